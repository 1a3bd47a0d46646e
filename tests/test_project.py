# tests/test_project.py
import pytest

from solflat.core.project import (
    detect_remappings,
    load_project_config,
    parse_remapping,
    parse_remappings,
)
from solflat.errors import ConfigError
from solflat.models import Remapping


def by_prefix(config):
    return {r.prefix: r.target for r in config.remappings}


# --- Parsing ---

def test_parse_remapping():
    assert parse_remapping("@oz/=lib/oz/contracts/") == Remapping("@oz/", "lib/oz/contracts/")
    assert parse_remapping("  ds-test/=lib/ds-test/src/  ") == Remapping("ds-test/", "lib/ds-test/src/")


def test_parse_remapping_with_context():
    remapping = parse_remapping("src/:@a/=lib/x/")

    assert remapping == Remapping("@a/", "lib/x/", context="src/")
    assert str(remapping) == "src/:@a/=lib/x/"


@pytest.mark.parametrize("raw", ["nope", "=lib/x/", "@a/=", "ctx:=lib/x/"])
def test_parse_remapping_rejects_malformed(raw):
    with pytest.raises(ConfigError):
        parse_remapping(raw)


def test_parse_remappings_skips_comments_and_blanks():
    lines = ["# comment", "", "a/=b/", "   ", "c/=d/"]

    assert [r.prefix for r in parse_remappings(lines)] == ["a/", "c/"]


# --- Loading ---

def test_defaults(root):
    config = load_project_config(root, env={})

    assert config.source_root == root
    assert config.sources_dir == root / "src"
    assert config.library_paths == (root / "lib",)
    assert config.remappings == ()


def test_remappings_file(root, write):
    write("remappings.txt", "# deps\n@oz/=lib/oz/contracts/\n\nsolmate/=lib/solmate/src/\n")

    config = load_project_config(root, env={})

    assert by_prefix(config) == {"@oz/": "lib/oz/contracts/", "solmate/": "lib/solmate/src/"}


def test_foundry_toml(root, write):
    write(
        "foundry.toml",
        '[profile.default]\n'
        'src = "contracts"\n'
        'libs = ["deps", "modules"]\n'
        'remappings = ["@a/=deps/a/"]\n',
    )

    config = load_project_config(root, env={})

    assert config.sources_dir == root / "contracts"
    assert config.library_paths == (root / "deps", root / "modules")
    assert by_prefix(config) == {"@a/": "deps/a/"}


def test_invalid_foundry_toml(root, write):
    write("foundry.toml", "[profile.default\nsrc = ")

    with pytest.raises(ConfigError):
        load_project_config(root, env={})


def test_remapping_precedence(root, write):
    write("foundry.toml", '[profile.default]\nremappings = ["@a/=toml/"]\n')
    write("remappings.txt", "@a/=file/\n")
    env = {"DAPP_REMAPPINGS": "@a/=env/\n@b/=env-b/"}

    assert by_prefix(load_project_config(root, env={}))["@a/"] == "file/"
    assert by_prefix(load_project_config(root, env=env))["@a/"] == "env/"

    config = load_project_config(root, env=env, remappings=["@a/=cli/"])
    assert by_prefix(config) == {"@a/": "cli/", "@b/": "env-b/"}


def test_node_modules_added_when_present(root):
    (root / "node_modules").mkdir()

    config = load_project_config(root, env={})

    assert config.library_paths == (root / "lib", root / "node_modules")


def test_cli_lib_paths_replace_defaults(root):
    config = load_project_config(root, env={}, lib_paths=["vendor"])

    assert config.library_paths == (root / "vendor",)


def test_invalid_root(root):
    with pytest.raises(ConfigError):
        load_project_config(root / "missing", env={})


# --- Auto-detection ---

@pytest.fixture
def libs(root):
    (root / "lib/forge-std/src").mkdir(parents=True)
    (root / "lib/forge-std/lib/ds-test/src").mkdir(parents=True)
    (root / "lib/openzeppelin/contracts").mkdir(parents=True)
    (root / "lib/solmate").mkdir(parents=True)
    (root / "lib/node_modules/junk").mkdir(parents=True)
    (root / "lib/README.md").write_text("not a library", encoding="utf-8")
    return root / "lib"


def test_detect_remappings(root, libs):
    detected = detect_remappings(libs, root)

    assert [str(r) for r in detected] == [
        "forge-std/=lib/forge-std/src/",
        "openzeppelin/=lib/openzeppelin/contracts/",
        "solmate/=lib/solmate/",
        "ds-test/=lib/forge-std/lib/ds-test/src/",
    ]


def test_explicit_remapping_overrides_detected(root, libs, write):
    write("remappings.txt", "forge-std/=lib/forge-std/src/custom/\n")

    config = load_project_config(root, env={})

    assert by_prefix(config)["forge-std/"] == "lib/forge-std/src/custom/"
    assert by_prefix(config)["solmate/"] == "lib/solmate/"


def test_auto_detect_disabled(root, libs):
    config = load_project_config(root, env={}, auto_detect=False)

    assert config.remappings == ()


@pytest.mark.parametrize(
    "toml",
    [
        '[profile.default]\nlibs = "lib"\n',
        '[profile.default]\nsrc = ["src"]\n',
        '[profile.default]\nremappings = ["a/=b/", 3]\n',
        'profile = "default"\n',
        '[profile]\ndefault = 3\n',
    ],
)
def test_foundry_toml_wrong_types(root, write, toml):
    write("foundry.toml", toml)

    with pytest.raises(ConfigError):
        load_project_config(root, env={})
