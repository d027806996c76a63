"""
YAML config files for vault-publish.

Config files are optional.  When present they are found by convention,
may pull in other files with ``!include``, may reference environment
variables as ``${VAR}`` or ``${VAR:-default}``, and are layered so that a
project file overrides a global one section by section.

A relative entry in a file's ``paths`` section is taken relative to the
directory of that file, so a project config can say ``source: ../obsidian``
no matter where the command is run from.

Usage:
    from vault_publish.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "VAULT_PUBLISH_CONFIG"
PROJECT_DIR_NAME = ".vault_publish"
CONFIG_FILENAMES = ("config.yml", "config.yaml")

# ${NAME} or ${NAME:-fallback}
_ENV_REF = re.compile(r"\$\{(?P<name>[^}:]+?)(?::-(?P<fallback>.*?))?\}")


# ---------------------------------------------------------------------------
# Environment references
# ---------------------------------------------------------------------------


def interpolate_env_vars(value: str) -> str:
    """Expand ``${VAR}`` / ``${VAR:-default}`` references in *value*.

    An unset or empty variable expands to its default, or to ``""`` when no
    default is given.  A ``${`` without a closing brace is kept as is.
    """
    return _ENV_REF.sub(
        lambda m: os.environ.get(m["name"]) or m["fallback"] or "", value
    )


def _interpolate_recursive(obj: Any) -> Any:
    """Apply ``interpolate_env_vars`` to every string in a YAML tree."""
    if isinstance(obj, dict):
        return {key: _interpolate_recursive(val) for key, val in obj.items()}
    if isinstance(obj, list):
        return list(map(_interpolate_recursive, obj))
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    return obj


# ---------------------------------------------------------------------------
# !include
# ---------------------------------------------------------------------------


class ConfigLoader(yaml.SafeLoader):
    """``SafeLoader`` that understands ``!include <file>``.

    Registering the tag on a subclass keeps ``yaml.safe_load`` untouched.
    Each instance carries the chain of files being loaded so that include
    cycles are reported instead of recursing forever.
    """

    include_chain: tuple[Path, ...] = ()


def _include_constructor(loader: ConfigLoader, node: yaml.ScalarNode) -> Any:
    parent = Path(loader.name).resolve()
    target = Path(loader.construct_scalar(node)).expanduser()
    if not target.is_absolute():
        target = parent.parent / target
    target = target.resolve()

    if target in loader.include_chain:
        cycle = [*loader.include_chain, target]
        raise ValueError(
            "Circular include detected: " + " -> ".join(map(str, cycle))
        )
    if not target.is_file():
        raise FileNotFoundError(
            f"Include file not found: {target} (referenced from {parent})"
        )
    return _load_yaml_with_includes(
        target, _include_stack=[*loader.include_chain, target]
    )


ConfigLoader.add_constructor("!include", _include_constructor)


def _load_yaml_with_includes(
    path: Path,
    *,
    _include_stack: list[Path] | None = None,
) -> Any:
    """Parse one YAML file, expanding its ``!include`` directives."""
    path = path.resolve()
    with open(path, encoding="utf-8") as fh:
        loader = ConfigLoader(fh)
        loader.include_chain = tuple(_include_stack or [path])
        try:
            return loader.get_single_data()
        finally:
            loader.dispose()


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def _candidate_paths() -> Iterator[Path]:
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        yield Path(explicit).expanduser().resolve()
    project_dir = Path.cwd() / PROJECT_DIR_NAME
    for name in CONFIG_FILENAMES:
        yield project_dir / name
    yield Path.home() / ".config" / "vault_publish" / CONFIG_FILENAMES[0]


def discover_config_files() -> list[Path]:
    """Return the config files that exist, highest precedence first.

    Candidates, in order:

    1. the file named by ``VAULT_PUBLISH_CONFIG``
    2. ``./.vault_publish/config.yml``
    3. ``./.vault_publish/config.yaml``
    4. ``~/.config/vault_publish/config.yml``
    """
    return [path for path in _candidate_paths() if path.exists()]


# ---------------------------------------------------------------------------
# Starter file
# ---------------------------------------------------------------------------

_STARTER_CONFIG = """\
# vault-publish configuration
#
# Paths may be absolute or relative to this file, and can also be set via
# environment variables:
#   OBSIDIAN_DIR, QUARTZ_CONTENT_DIR, VAULT_PUBLISH_MANIFEST
#
# paths:
#   source: ../obsidian
#   destination: ../quartz/content
#   manifest: sync-manifest.json
#
# sync:
#   images_dir: image
#   publish_keys: ["可发布", "已发布"]
#
# logging:
#   level: INFO
#   file: null
#   format: text
"""


def resolve_config_path() -> Path:
    """Return the active config file, or where a new one would be created.

    Nothing is written; see ``ensure_config()``.
    """
    found = discover_config_files()
    return found[0] if found else Path.cwd() / PROJECT_DIR_NAME / CONFIG_FILENAMES[0]


def ensure_config(target: Path | None = None) -> Path:
    """Return the active config file, writing a commented starter if none exists.

    Args:
        target: Where to create the starter file.  Defaults to
            ``resolve_config_path()``.
    """
    found = discover_config_files()
    if found:
        logger.debug("Using existing config file %s", found[0])
        return found[0]

    path = target or resolve_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_STARTER_CONFIG, encoding="utf-8")
    logger.info("Created starter config: %s", path)
    return path


# ---------------------------------------------------------------------------
# Layering
# ---------------------------------------------------------------------------


def _anchor_paths(data: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """Make relative ``paths.*`` entries absolute against *base_dir*.

    Values still holding a ``${...}`` reference are left for interpolation.
    """
    section = data.get("paths")
    if not isinstance(section, dict):
        return data

    def anchor(value: Any) -> Any:
        if not isinstance(value, str) or not value or "${" in value:
            return value
        candidate = Path(value).expanduser()
        return str(candidate if candidate.is_absolute() else base_dir / candidate)

    return {**data, "paths": {key: anchor(val) for key, val in section.items()}}


def _read_layer(path: Path) -> dict[str, Any]:
    try:
        data = _load_yaml_with_includes(path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.error("Cannot load config file %s: %s", path, exc)
        raise

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(
            "Skipping config file %s: top level is a %s, not a mapping",
            path,
            type(data).__name__,
        )
        return {}
    return _anchor_paths(data, path.resolve().parent)


def load_hierarchical_config() -> dict[str, Any]:
    """Load every discovered config file and layer them.

    Files are applied from lowest to highest precedence.  A top-level
    section in a higher file replaces the whole section from a lower one;
    sections are not merged key by key.  Environment references are
    expanded once, after layering.

    Returns:
        The layered config, or ``{}`` when there are no config files.
    """
    files = discover_config_files()
    if not files:
        logger.debug("No config files found, using defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(files):
        logger.debug("Loading config: %s", path)
        merged.update(_read_layer(path))
    return _interpolate_recursive(merged)
