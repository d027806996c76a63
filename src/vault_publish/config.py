"""Runtime configuration for a publish sync.

Resolves the vault, content directory and manifest locations from CLI args,
environment variables, .env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    OBSIDIAN_DIR: Obsidian vault directory (default: ./obsidian)
    QUARTZ_CONTENT_DIR: Quartz content directory (default: ./quartz/content)
    VAULT_PUBLISH_MANIFEST: Sync manifest file
        (default: ./.vault_publish/sync-manifest.json)
    VAULT_PUBLISH_IMAGES_DIR: Shared images directory name (default: image)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .sync.frontmatter import PUBLISH_KEYS
from .sync.resolver import DEFAULT_IMAGES_DIR
from .validators import validate_directory_layout, validate_images_dir

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "obsidian"
DEFAULT_DESTINATION = os.path.join("quartz", "content")
DEFAULT_MANIFEST = os.path.join(".vault_publish", "sync-manifest.json")


@dataclass
class Config:
    source_dir: Path
    content_dir: Path
    manifest_path: Path
    images_dir: str = DEFAULT_IMAGES_DIR
    publish_keys: tuple[str, ...] = field(default=PUBLISH_KEYS)
    debug: bool = False


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the vault is missing, the directories overlap, or
            the images directory name is unusable.
    """
    ok, reason = validate_images_dir(config.images_dir)
    if not ok:
        raise ValueError(reason)

    ok, reason = validate_directory_layout(
        config.source_dir, config.content_dir
    )
    if not ok:
        raise ValueError(reason)

    if not config.publish_keys:
        raise ValueError("At least one publish key must be configured.")


def load_config(
    source: str | None = None,
    destination: str | None = None,
    manifest: str | None = None,
    images_dir: str | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
    publish_keys: list[str] | tuple[str, ...] | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        source: Override vault directory.
        destination: Override Quartz content directory.
        manifest: Override manifest file path.
        images_dir: Override shared images directory name.
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``paths`` section
            (``source``, ``destination``, ``manifest``) plus optional
            ``images_dir``.
        publish_keys: Front matter keys accepted as the publish flag.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If the resolved configuration is invalid.
    """
    fb = yaml_fallbacks or {}

    def pick(cli_value: str | None, env_key: str, fb_key: str, default: str) -> str:
        return (
            cli_value
            or os.getenv(env_key)
            or fb.get(fb_key)
            or default
        ).strip()

    source_dir = pick(source, "OBSIDIAN_DIR", "source", DEFAULT_SOURCE)
    content_dir = pick(
        destination, "QUARTZ_CONTENT_DIR", "destination", DEFAULT_DESTINATION
    )
    manifest_path = pick(
        manifest, "VAULT_PUBLISH_MANIFEST", "manifest", DEFAULT_MANIFEST
    )
    final_images_dir = pick(
        images_dir,
        "VAULT_PUBLISH_IMAGES_DIR",
        "images_dir",
        DEFAULT_IMAGES_DIR,
    )

    config = Config(
        source_dir=Path(source_dir).expanduser().resolve(),
        content_dir=Path(content_dir).expanduser().resolve(),
        manifest_path=Path(manifest_path).expanduser().resolve(),
        images_dir=final_images_dir,
        publish_keys=tuple(publish_keys) if publish_keys else PUBLISH_KEYS,
        debug=debug,
    )

    validate_config(config)
    logger.debug(
        "Config: vault=%s content=%s manifest=%s",
        config.source_dir,
        config.content_dir,
        config.manifest_path,
    )
    return config
