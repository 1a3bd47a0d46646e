# src/solflat/core/loader.py
import logging
import threading
from pathlib import Path
from typing import Dict

from solflat.core.scanner import scan_source
from solflat.errors import LoadError
from solflat.models import SourceFile

logger = logging.getLogger(__name__)


class SourceLoader:
    """
    Reads and scans source files, caching them by canonical path.

    Safe to share between threads: concurrent loads of the same path wait on
    a per-path lock, so every file is read from disk exactly once.
    """

    def __init__(self):
        self._cache: Dict[Path, SourceFile] = {}
        self._locks: Dict[Path, threading.Lock] = {}
        self._guard = threading.Lock()
        self.reads = 0

    def _lock_for(self, path: Path) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = self._locks[path] = threading.Lock()
            return lock

    def _read(self, path: Path) -> str:
        try:
            with path.open("rb") as f:
                raw = f.read()
        except OSError as e:
            raise LoadError(path, e.strerror or str(e)) from e

        with self._guard:
            self.reads += 1

        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise LoadError(path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e

    def load(self, path: Path) -> SourceFile:
        cached = self._cache.get(path)
        if cached is not None:
            return cached

        with self._lock_for(path):
            cached = self._cache.get(path)
            if cached is not None:
                return cached

            logger.debug("Loading %s", path)
            source = scan_source(path, self._read(path))
            with self._guard:
                self._cache[path] = source
            return source

    def __contains__(self, path: Path) -> bool:
        return path in self._cache
