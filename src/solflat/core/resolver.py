# src/solflat/core/resolver.py
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from solflat.errors import ResolutionError
from solflat.models import ProjectConfig, Remapping

logger = logging.getLogger(__name__)

RELATIVE_MARKERS = ("./", "../", ".\\", "..\\")


def canonicalize(path: Path) -> Path:
    """Absolute, symlink-free, normalized form used as a file's identity."""
    return Path(os.path.realpath(os.path.abspath(path)))


def _relative_to_root(path: Path, root: Path) -> Optional[str]:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return None


def find_remapping(
    specifier: str,
    importing_file: Path,
    remappings: Sequence[Remapping],
    root: Path,
) -> Optional[Remapping]:
    """
    Longest matching prefix wins, then the longest applicable context; on a
    full tie the first configured one is kept. Remappings with a context only
    apply to files under that context.
    """
    rel_importer = _relative_to_root(importing_file, root)
    best: Optional[Remapping] = None
    best_rank = (-1, -1)

    for remapping in remappings:
        if not specifier.startswith(remapping.prefix):
            continue
        if remapping.context:
            if rel_importer is None or not rel_importer.startswith(remapping.context):
                continue
        rank = (len(remapping.prefix), len(remapping.context or ""))
        if rank > best_rank:
            best, best_rank = remapping, rank

    return best


def candidate_paths(specifier: str, importing_file: Path, config: ProjectConfig) -> List[Path]:
    """Every location `specifier` may refer to, in lookup order."""
    root = canonicalize(config.source_root)

    remapping = find_remapping(specifier, importing_file, config.remappings, root)
    if remapping is not None:
        # Plain string substitution, so `a=b` and `a/=b/` both behave
        mapped = Path(remapping.target + specifier[len(remapping.prefix):])
        return [mapped if mapped.is_absolute() else root / mapped]

    if specifier.startswith(RELATIVE_MARKERS):
        return [importing_file.parent / specifier]

    candidates = [Path(lib) / specifier for lib in config.library_paths]
    candidates.append(root / specifier)
    return candidates


def resolve(specifier: str, importing_file: Path, config: ProjectConfig) -> Path:
    """
    Maps an import specifier seen in `importing_file` to the canonical path of
    an existing file. Raises ResolutionError when nothing on disk matches.
    """
    candidates = candidate_paths(specifier, importing_file, config)

    for candidate in candidates:
        if candidate.is_file():
            resolved = canonicalize(candidate)
            logger.debug("Resolved '%s' from %s to %s", specifier, importing_file, resolved)
            return resolved

    raise ResolutionError(specifier, importing_file, candidates)
