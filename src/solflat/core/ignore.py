# src/solflat/core/ignore.py
from pathlib import Path
from typing import List, Optional

import pathspec

from solflat.config import DEFAULT_SKIP_PATTERNS
from solflat.errors import ConfigError


def load_skip_spec(extra_patterns: Optional[List[str]] = None) -> pathspec.PathSpec:
    """
    Builds the PathSpec of directories skipped while looking for libraries.
    Includes any extra patterns on top of the defaults.
    """
    lines = list(DEFAULT_SKIP_PATTERNS)
    if extra_patterns:
        lines.extend(extra_patterns)

    try:
        return pathspec.PathSpec.from_lines("gitwildmatch", lines)
    except ValueError as e:
        raise ConfigError(f"Invalid skip pattern: {e}") from e


def is_dir_skipped(rel_path: Path, spec: pathspec.PathSpec) -> bool:
    """Trailing slash so that directory-only patterns like `out/` apply."""
    return spec.match_file(rel_path.as_posix().rstrip("/") + "/")
