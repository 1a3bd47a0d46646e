# src/solflat/core/project.py
import logging
import os
import tomllib
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import pathspec

from solflat.config import (
    DEFAULT_LIB_DIRS,
    DEFAULT_SOURCES_DIR,
    FOUNDRY_CONFIG_FILE,
    FOUNDRY_PROFILE,
    NODE_MODULES_DIR,
    REMAPPINGS_ENV,
    REMAPPINGS_FILE,
)
from solflat.core.ignore import is_dir_skipped, load_skip_spec
from solflat.core.resolver import canonicalize
from solflat.errors import ConfigError
from solflat.models import ProjectConfig, Remapping

logger = logging.getLogger(__name__)

LIBRARY_SOURCE_DIRS = ("src", "contracts")


def parse_remapping(raw: str) -> Remapping:
    """Parses `[context:]prefix=target`."""
    text = raw.strip()
    key, sep, target = text.partition("=")
    if not sep or not key or not target:
        raise ConfigError(f"Invalid remapping '{raw}', expected '[context:]prefix=target'")

    context = None
    if ":" in key:
        context, _, key = key.partition(":")
        if not key:
            raise ConfigError(f"Invalid remapping '{raw}', empty prefix")

    return Remapping(prefix=key, target=target, context=context or None)


def parse_remappings(lines: Iterable[str]) -> List[Remapping]:
    remappings = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        remappings.append(parse_remapping(line))
    return remappings


def read_remappings_file(path: Path) -> List[Remapping]:
    if not path.is_file():
        return []
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not read '{path}': {e}") from e
    return parse_remappings(lines)


def read_foundry_profile(root: Path, profile: str = FOUNDRY_PROFILE) -> Dict:
    """Returns the `[profile.<name>]` table of foundry.toml, or {} when absent."""
    config_file = root / FOUNDRY_CONFIG_FILE
    if not config_file.is_file():
        return {}

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Could not parse '{config_file}': {e}") from e

    profiles = data.get("profile", {})
    if not isinstance(profiles, dict):
        raise ConfigError(f"'{config_file}': [profile] is not a table")
    table = profiles.get(profile, {})
    if not isinstance(table, dict):
        raise ConfigError(f"'{config_file}': [profile.{profile}] is not a table")
    return table


def _profile_value(profile: Dict, key: str, default, expected: type):
    """Reads `key`, checking its type; list values must hold only strings."""
    value = profile.get(key, default)
    if not isinstance(value, expected):
        raise ConfigError(f"{FOUNDRY_CONFIG_FILE}: `{key}` must be a {expected.__name__}, got {type(value).__name__}")
    if expected is list and not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{FOUNDRY_CONFIG_FILE}: `{key}` must only hold strings")
    return value


def _as_project_relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def detect_remappings(
    lib_dir: Path,
    root: Path,
    spec: Optional[pathspec.PathSpec] = None,
) -> List[Remapping]:
    """
    One `name/=<lib>/name/<src>/` remapping per library directory, descending
    into each library's own nested library folder. Outer libraries come first.
    """
    spec = spec or load_skip_spec()
    found: List[Remapping] = []

    def _walk(current: Path):
        nested = []
        for child in sorted(current.iterdir()):
            if not child.is_dir():
                continue
            if is_dir_skipped(child.relative_to(lib_dir), spec):
                continue

            source_dir = child
            for candidate in LIBRARY_SOURCE_DIRS:
                if (child / candidate).is_dir():
                    source_dir = child / candidate
                    break

            target = _as_project_relative(source_dir, root)
            found.append(Remapping(prefix=f"{child.name}/", target=f"{target}/"))

            for lib_name in DEFAULT_LIB_DIRS:
                if (child / lib_name).is_dir():
                    nested.append(child / lib_name)

        for sub in nested:
            _walk(sub)

    if lib_dir.is_dir():
        _walk(lib_dir)
    return found


def _merge_remappings(layers: Iterable[Iterable[Remapping]]) -> Tuple[Remapping, ...]:
    """Later layers override earlier ones with the same context and prefix."""
    merged: Dict[Tuple[Optional[str], str], Remapping] = {}
    for layer in layers:
        for remapping in layer:
            merged[(remapping.context, remapping.prefix)] = remapping
    return tuple(merged.values())


def _keep_first(remappings: Iterable[Remapping]) -> List[Remapping]:
    seen = set()
    kept = []
    for remapping in remappings:
        key = (remapping.context, remapping.prefix)
        if key not in seen:
            seen.add(key)
            kept.append(remapping)
    return kept


def load_project_config(
    root: Path,
    *,
    contracts: Optional[str] = None,
    remappings: Iterable[str] = (),
    lib_paths: Iterable[str] = (),
    env: Optional[Mapping[str, str]] = None,
    auto_detect: bool = True,
) -> ProjectConfig:
    """
    Assembles the engine's configuration from the project on disk.

    Remapping precedence, highest first: explicit `remappings`, the
    environment, remappings.txt, foundry.toml, auto-detected libraries.
    """
    root = canonicalize(Path(root))
    if not root.is_dir():
        raise ConfigError(f"Invalid project root '{root}'")
    env = os.environ if env is None else env

    profile = read_foundry_profile(root)

    sources_dir = Path(contracts or _profile_value(profile, "src", DEFAULT_SOURCES_DIR, str))
    if not sources_dir.is_absolute():
        sources_dir = root / sources_dir

    lib_names = list(lib_paths) or list(_profile_value(profile, "libs", DEFAULT_LIB_DIRS, list))
    library_paths: List[Path] = []
    for name in lib_names:
        lib = Path(name)
        lib = lib if lib.is_absolute() else root / lib
        if lib not in library_paths:
            library_paths.append(lib)
    node_modules = root / NODE_MODULES_DIR
    if node_modules.is_dir() and node_modules not in library_paths:
        library_paths.append(node_modules)

    detected: List[Remapping] = []
    if auto_detect:
        spec = load_skip_spec()
        for lib in library_paths:
            if lib.name == NODE_MODULES_DIR:
                continue
            detected.extend(detect_remappings(lib, root, spec))
        detected = _keep_first(detected)

    layers = [
        detected,
        parse_remappings(_profile_value(profile, "remappings", [], list)),
        read_remappings_file(root / REMAPPINGS_FILE),
        parse_remappings(env.get(REMAPPINGS_ENV, "").split()),
        parse_remappings(remappings),
    ]
    merged = _merge_remappings(layers)

    for remapping in merged:
        logger.debug("Remapping %s", remapping)

    return ProjectConfig(
        source_root=root,
        remappings=merged,
        library_paths=tuple(library_paths),
        sources_dir=sources_dir,
    )
