"""Tests for validators.py."""

from __future__ import annotations

from pathlib import Path

from vault_publish.validators import (
    format_validation_error,
    validate_directory_layout,
    validate_images_dir,
)


class TestFormatValidationError:
    def test_joins_field_and_reason(self):
        assert (
            format_validation_error("Vault directory", "does not exist")
            == "Vault directory does not exist"
        )


class TestValidateImagesDir:
    """Tests for validate_images_dir()."""

    def test_valid(self):
        assert validate_images_dir("image") == (True, "")
        assert validate_images_dir("附件") == (True, "")

    def test_empty(self):
        ok, msg = validate_images_dir("  ")
        assert not ok
        assert "cannot be empty" in msg

    def test_path_separators_and_dots(self):
        for name in ("a/b", "a\\b", ".", ".."):
            ok, msg = validate_images_dir(name)
            assert not ok, name
            assert "single directory name" in msg


class TestValidateDirectoryLayout:
    """Tests for validate_directory_layout()."""

    def test_valid_layout(self, tmp_path: Path):
        vault = tmp_path / "vault"
        vault.mkdir()
        assert validate_directory_layout(vault, tmp_path / "content") == (
            True,
            "",
        )

    def test_missing_vault_mentions_env_var(self, tmp_path: Path):
        ok, msg = validate_directory_layout(
            tmp_path / "nope", tmp_path / "content"
        )
        assert not ok
        assert "OBSIDIAN_DIR" in msg

    def test_vault_is_a_file(self, tmp_path: Path):
        vault = tmp_path / "vault.md"
        vault.write_text("x")
        ok, msg = validate_directory_layout(vault, tmp_path / "content")
        assert not ok
        assert "is not a directory" in msg

    def test_content_is_a_file(self, tmp_path: Path):
        vault = tmp_path / "vault"
        vault.mkdir()
        content = tmp_path / "content"
        content.write_text("x")
        ok, msg = validate_directory_layout(vault, content)
        assert not ok
        assert msg.startswith("Content directory")

    def test_same_directory(self, tmp_path: Path):
        ok, msg = validate_directory_layout(tmp_path, tmp_path)
        assert not ok
        assert "must be different" in msg

    def test_content_inside_vault(self, tmp_path: Path):
        ok, msg = validate_directory_layout(tmp_path, tmp_path / "out")
        assert not ok
        assert "inside the vault" in msg

    def test_vault_inside_content(self, tmp_path: Path):
        vault = tmp_path / "content" / "vault"
        vault.mkdir(parents=True)
        ok, msg = validate_directory_layout(vault, tmp_path / "content")
        assert not ok
        assert "inside the content directory" in msg
