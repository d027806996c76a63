"""Tests for destination filename normalization."""

from __future__ import annotations

import pytest

from vault_publish.sync.naming import (
    asset_destination_path,
    asset_link,
    normalize_filename,
    reference_basename,
)


class TestNormalizeFilename:
    """Tests for normalize_filename()."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("pic 1.png", "pic-1.png"),
            ("a&b.png", "a-and-b.png"),
            ("50%.png", "50-percent.png"),
            ("what?.png", "what.png"),
            ("issue #3.png", "issue-3.png"),
            ("tab\there.jpg", "tab-here.jpg"),
            ("plain.png", "plain.png"),
        ],
    )
    def test_replacements(self, name: str, expected: str):
        """Each special character is replaced as Quartz would slug it."""
        assert normalize_filename(name) == expected

    def test_extension_is_left_alone(self):
        """Only the stem is transformed."""
        assert normalize_filename("my file.tar gz") == "my-file.tar gz"

    def test_multiple_dots_keep_last_extension(self):
        """The extension is what follows the last dot."""
        assert normalize_filename("a b.c d.png") == "a-b.c-d.png"

    def test_no_extension(self):
        """A name without a dot is treated as all stem."""
        assert normalize_filename("my pic") == "my-pic"

    def test_dotfile_is_all_stem(self):
        """A leading dot does not start an extension."""
        assert normalize_filename(".hidden file") == ".hidden-file"

    def test_unicode_is_preserved(self):
        """Non-ASCII letters are not transliterated."""
        assert normalize_filename("图片 1.png") == "图片-1.png"

    @pytest.mark.parametrize(
        "name", ["pic 1.png", "a & b?.jpg", "x%#y.gif", "no ext", "图 片.png"]
    )
    def test_idempotent(self, name: str):
        """Normalizing an already normalized name changes nothing."""
        once = normalize_filename(name)
        assert normalize_filename(once) == once


class TestReferenceHelpers:
    """Tests for basename and destination helpers."""

    def test_reference_basename_strips_directories(self):
        assert reference_basename("assets/sub/pic 1.png") == "pic 1.png"

    def test_reference_basename_handles_backslashes(self):
        assert reference_basename("assets\\pic.png") == "pic.png"

    def test_asset_destination_path(self):
        assert asset_destination_path("pic 1.png") == "image/pic-1.png"

    def test_asset_link_is_relative_to_content_root(self):
        assert asset_link("pic 1.png") == "../image/pic-1.png"
