"""Unified configuration schema for vault_publish.

Defines Pydantic models for the config file structure, with dedicated
sections for directory paths, sync behaviour and logging.

Usage:
    from vault_publish.config_schema import UnifiedConfig, build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

from .sync.frontmatter import PUBLISH_KEYS

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class PathsConfig(BaseModel):
    """Directory and manifest locations.

    All fields are optional so environment variables and CLI arguments can
    supply them at runtime instead.
    """

    source: str | None = Field(
        default=None, description="Obsidian vault directory"
    )
    destination: str | None = Field(
        default=None, description="Quartz content directory"
    )
    manifest: str | None = Field(
        default=None, description="Sync manifest JSON file"
    )

    model_config = {"frozen": True}


class SyncConfig(BaseModel):
    """Sync behaviour settings.

    Attributes:
        images_dir: Shared images directory at the vault root.
        publish_keys: Front matter flags that mark a note publishable.
    """

    images_dir: str = Field(
        default="image", description="Shared images directory name"
    )
    publish_keys: list[str] = Field(
        default_factory=lambda: list(PUBLISH_KEYS),
        min_length=1,
        description="Front matter keys accepted as the publish flag",
    )

    model_config = {"frozen": True}

    @field_validator("images_dir")
    @classmethod
    def _single_segment(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value or "/" in value or value in (".", ".."):
            raise ValueError(
                "images_dir must be a single directory name"
            )
        return value


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: ``text`` or ``json``.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: str = Field(
        default="text", pattern="^(text|json)$", description="Log format"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Aggregates all config sections. Every section has sensible defaults,
    so ``UnifiedConfig()`` (zero-config) is always valid.
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully: anything absent gets defaults.
    Unknown top-level sections are ignored with a warning.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.
    """
    if not raw_data:
        return UnifiedConfig()

    known = set(UnifiedConfig.model_fields)
    unknown = sorted(set(raw_data) - known)
    if unknown:
        logger.warning(
            "Ignoring unknown config sections: %s", ", ".join(unknown)
        )
    return UnifiedConfig(
        **{k: v for k, v in raw_data.items() if k in known}
    )
