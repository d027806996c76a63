"""Tests for the publishability filter."""

from __future__ import annotations

from vault_publish.sync.frontmatter import (
    PUBLISH_KEYS,
    is_publishable,
    read_header,
)


class TestReadHeader:
    """Tests for read_header()."""

    def test_returns_lines_between_markers(self):
        text = "---\ntitle: x\ntags: [a]\n---\nbody\n"
        assert read_header(text) == ["title: x", "tags: [a]"]

    def test_no_opening_marker(self):
        """A header must start on the first line."""
        assert read_header("\n---\n可发布: true\n---\n") is None

    def test_unclosed_header(self):
        assert read_header("---\n可发布: true\nbody\n") is None

    def test_empty_header(self):
        assert read_header("---\n---\nbody") == []

    def test_bom_is_ignored(self):
        assert read_header("\ufeff---\na: b\n---\n") == ["a: b"]

    def test_trailing_whitespace_on_markers(self):
        assert read_header("---  \na: b\n--- \n") == ["a: b"]

    def test_crlf_line_endings(self):
        assert read_header("---\r\na: b\r\n---\r\n") == ["a: b"]

    def test_stops_at_first_closing_marker(self):
        """A later ``---`` (e.g. a horizontal rule) is body text."""
        text = "---\na: b\n---\ntext\n---\nc: d\n"
        assert read_header(text) == ["a: b"]


class TestIsPublishable:
    """Tests for is_publishable()."""

    def test_publishable_flag(self):
        assert is_publishable("---\n可发布: true\n---\nbody")

    def test_published_flag_is_a_synonym(self):
        assert is_publishable("---\n已发布: true\n---\nbody")

    def test_false_value(self):
        assert not is_publishable("---\n可发布: false\n---\n")

    def test_value_must_be_exactly_true(self):
        assert not is_publishable("---\n可发布: True\n---\n")
        assert not is_publishable("---\n可发布: yes\n---\n")
        assert not is_publishable('---\n可发布: "true"\n---\n')

    def test_whitespace_around_key_and_value(self):
        assert is_publishable("---\n  可发布 :   true  \n---\n")

    def test_no_header(self):
        assert not is_publishable("可发布: true\n")

    def test_flag_outside_header_is_ignored(self):
        assert not is_publishable("---\ntitle: x\n---\n可发布: true\n")

    def test_unclosed_header(self):
        assert not is_publishable("---\n可发布: true\n")

    def test_other_keys_and_broken_yaml(self):
        """Lines that are not ``key: value`` do not break the scan."""
        text = "---\ntags:\n  - [unbalanced\n可发布: true\n---\n"
        assert is_publishable(text)

    def test_custom_keys(self):
        text = "---\npublish: true\n---\n"
        assert not is_publishable(text)
        assert is_publishable(text, keys=("publish",))

    def test_default_keys(self):
        assert PUBLISH_KEYS == ("可发布", "已发布")
