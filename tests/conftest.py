# tests/conftest.py
import os
from pathlib import Path

import pytest

from solflat.models import ProjectConfig


@pytest.fixture
def root(tmp_path):
    """Canonical form of tmp_path, so comparisons survive symlinked temp dirs."""
    return Path(os.path.realpath(tmp_path))


@pytest.fixture
def write(root):
    """Writes a file under the project root and returns its path."""
    def _write(rel_path: str, content: str) -> Path:
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def config(root):
    return ProjectConfig(source_root=root, library_paths=(root / "lib",))
