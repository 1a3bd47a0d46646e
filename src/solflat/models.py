# src/solflat/models.py
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple


class DirectiveKind(str, Enum):
    LICENSE = "License"
    PRAGMA = "Pragma"


@dataclass(frozen=True)
class Remapping:
    """A `[context:]prefix=target` import redirection."""
    prefix: str
    target: str
    context: Optional[str] = None

    def __str__(self) -> str:
        head = f"{self.context}:" if self.context else ""
        return f"{head}{self.prefix}={self.target}"


@dataclass(frozen=True)
class ProjectConfig:
    """Resolved project layout handed to the engine."""
    source_root: Path
    remappings: Tuple[Remapping, ...] = ()
    library_paths: Tuple[Path, ...] = ()
    sources_dir: Optional[Path] = None


@dataclass(frozen=True)
class ImportStatement:
    specifier: str
    start: int
    end: int


@dataclass(frozen=True)
class Directive:
    kind: DirectiveKind
    text: str
    start: int = 0
    end: int = 0

    @property
    def key(self) -> Tuple[DirectiveKind, str]:
        return (self.kind, self.text)


@dataclass(frozen=True)
class SourceFile:
    """Immutable data class holding a scanned source file."""
    path: Path
    content: str
    imports: Tuple[ImportStatement, ...]
    directives: Tuple[Directive, ...]
    body: str


@dataclass
class ImportGraph:
    target: Path
    files: Dict[Path, SourceFile] = field(default_factory=dict)
    edges: Dict[Path, Tuple[Path, ...]] = field(default_factory=dict)

    def __contains__(self, path: Path) -> bool:
        return path in self.files

    def __len__(self) -> int:
        return len(self.files)

    def dependencies(self, path: Path) -> Tuple[Path, ...]:
        return self.edges.get(path, ())


@dataclass(frozen=True)
class FileStats:
    """Per-file row of the CLI report."""
    path: Path
    rel_path: str
    lines: int
    size: int
    imports: int
    directives: int
