# src/solflat/config.py

FOUNDRY_CONFIG_FILE = "foundry.toml"
FOUNDRY_PROFILE = "default"
REMAPPINGS_FILE = "remappings.txt"
REMAPPINGS_ENV = "DAPP_REMAPPINGS"

DEFAULT_SOURCES_DIR = "src"
DEFAULT_LIB_DIRS = ["lib"]
NODE_MODULES_DIR = "node_modules"

SOURCE_EXTENSION = ".sol"
FILE_MARKER = "// File: {path}"

# Directories never descended into while auto-detecting library remappings
DEFAULT_SKIP_PATTERNS = [
    "# Default skip patterns",
    ".git/",
    ".github/",
    "node_modules/",
    "venv/",
    ".venv/",
    "__pycache__/",
    "out/",
    "cache/",
    "artifacts/",
    "broadcast/",
    "test/",
    "tests/",
    "script/",
    "docs/",
]
