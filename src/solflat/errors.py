# src/solflat/errors.py
from pathlib import Path
from typing import List, Optional, Sequence


class FlattenError(Exception):
    """Base class for every failure surfaced by the flattening engine."""
    kind = "Flatten"


class ConfigError(FlattenError):
    kind = "Config"


class ResolutionError(FlattenError):
    kind = "NotFound"

    def __init__(self, specifier: str, importing_file: Path, candidates: Sequence[Path] = ()):
        self.specifier = specifier
        self.importing_file = importing_file
        self.candidates: List[Path] = list(candidates)
        tried = ", ".join(str(c) for c in self.candidates) or "none"
        super().__init__(f"Unable to resolve import '{specifier}' (tried: {tried})")


class LoadError(FlattenError):
    kind = "Unreadable"

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to read '{path}': {reason}")


class GraphError(FlattenError):
    kind = "Resolution"

    def __init__(self, importing_file: Path, specifier: str, cause: Optional[ResolutionError] = None):
        self.importing_file = importing_file
        self.specifier = specifier
        self.cause = cause
        super().__init__(f"Failed to resolve import '{specifier}' in '{importing_file}'")


class CycleError(FlattenError):
    kind = "Cycle"

    def __init__(self, cycle: Sequence[Path]):
        self.cycle: List[Path] = list(cycle)
        chain = " -> ".join(str(p) for p in self.cycle)
        super().__init__(f"Circular import detected: {chain}")
