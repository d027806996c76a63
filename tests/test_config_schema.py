"""Tests for config_schema.py — UnifiedConfig and build_config()."""

import logging

import pytest
from pydantic import ValidationError

from vault_publish.config_schema import (
    LoggingConfig,
    PathsConfig,
    SyncConfig,
    UnifiedConfig,
    build_config,
)


class TestDefaults:
    """Zero-config is always valid."""

    def test_unified_defaults(self):
        config = UnifiedConfig()
        assert config.paths == PathsConfig()
        assert config.paths.source is None
        assert config.sync.images_dir == "image"
        assert config.sync.publish_keys == ["可发布", "已发布"]
        assert config.logging.level == "INFO"
        assert config.logging.format == "text"

    def test_build_config_empty(self):
        assert build_config({}) == UnifiedConfig()

    def test_models_are_frozen(self):
        config = UnifiedConfig()
        with pytest.raises(ValidationError):
            config.sync.images_dir = "other"


class TestSyncConfig:
    """Validation of the sync section."""

    def test_images_dir_trimmed(self):
        assert SyncConfig(images_dir=" attachments/ ").images_dir == "attachments"

    @pytest.mark.parametrize("value", ["", "/", "a/b", "..", "."])
    def test_images_dir_rejected(self, value):
        with pytest.raises(ValidationError, match="single directory name"):
            SyncConfig(images_dir=value)

    def test_publish_keys_must_not_be_empty(self):
        with pytest.raises(ValidationError):
            SyncConfig(publish_keys=[])


class TestLoggingConfig:
    def test_json_format(self):
        assert LoggingConfig(format="json").format == "json"

    def test_unknown_format_rejected(self):
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")


class TestBuildConfig:
    """Tests for build_config()."""

    def test_full_document(self):
        config = build_config(
            {
                "paths": {
                    "source": "/vault",
                    "destination": "/site/content",
                    "manifest": "/state/m.json",
                },
                "sync": {"images_dir": "assets", "publish_keys": ["publish"]},
                "logging": {"level": "DEBUG", "file": "/tmp/vp.log"},
            }
        )
        assert config.paths.destination == "/site/content"
        assert config.sync.publish_keys == ["publish"]
        assert config.logging.file == "/tmp/vp.log"

    def test_unknown_sections_ignored_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = build_config({"server": {"port": 8080}, "sync": {}})
        assert config == UnifiedConfig()
        assert "server" in caplog.text

    def test_invalid_section_raises(self):
        with pytest.raises(ValidationError):
            build_config({"sync": {"images_dir": "a/b"}})

    def test_validation_error_is_a_value_error(self):
        """The CLI reports config errors by catching ValueError."""
        with pytest.raises(ValueError):
            build_config({"logging": {"format": "yaml"}})
