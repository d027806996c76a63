"""Tests for sync report formatting."""

from __future__ import annotations

import json

from vault_publish.sync.models import SyncAction, SyncReport, SyncResult
from vault_publish.sync.reporter import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_report(**overrides) -> SyncReport:
    defaults = {
        "source_root": "/vault",
        "content_root": "/site/content",
        "started_at": "2026-01-01T00:00:00+00:00",
        "completed_at": "2026-01-01T00:00:01+00:00",
        "results": [
            SyncResult(
                path="a.md",
                action=SyncAction.CREATE,
                reason="new",
                assets=["image/a.png"],
            ),
            SyncResult(
                path="notes/b.md", action=SyncAction.UPDATE, reason="modified"
            ),
            SyncResult(
                path="old.md",
                action=SyncAction.DELETE,
                reason="no longer publishable",
                assets=["image/old.png"],
            ),
            SyncResult(path="same.md", action=SyncAction.SKIP),
        ],
        "removed_assets": ["image/old.png"],
        "removed_dirs": ["archive"],
        "dangling": {"a.md": ["missing.png"]},
    }
    defaults.update(overrides)
    return SyncReport(**defaults)


class TestFormatSyncReport:
    """Tests for format_sync_report()."""

    def test_sections(self):
        text = format_sync_report(_make_report())
        assert "Publish sync /vault -> /site/content" in text
        assert (
            "Published 3 notes: 1 created, 1 updated, 1 deleted, "
            "1 assets removed"
        ) in text
        assert "Created:\n  a.md [+1 asset]" in text
        assert "Updated:\n  notes/b.md (modified)" in text
        assert "Deleted:\n  old.md" in text
        assert "Assets removed:\n  image/old.png" in text
        assert "Empty directories removed:\n  archive/" in text
        assert "Unresolved embeds:\n  a.md: missing.png" in text
        assert text.endswith("Unchanged: 1 notes")

    def test_empty_sections_are_omitted(self):
        report = _make_report(
            results=[SyncResult(path="x.md", action=SyncAction.SKIP)],
            removed_assets=[],
            removed_dirs=[],
            dangling={},
        )
        text = format_sync_report(report)
        for heading in ("Created:", "Updated:", "Deleted:", "Assets removed:"):
            assert heading not in text

    def test_dry_run_header(self):
        text = format_sync_report(_make_report(dry_run=True))
        assert text.splitlines()[0].endswith("(DRY RUN)")

    def test_plural_asset_suffix(self):
        report = _make_report(
            results=[
                SyncResult(
                    path="a.md",
                    action=SyncAction.CREATE,
                    assets=["image/a.png", "image/b.png"],
                )
            ]
        )
        assert "a.md [+2 assets]" in format_sync_report(report)


class TestFormatDryRunPreview:
    """Tests for format_dry_run_preview()."""

    def test_grouped_by_action(self):
        text = format_dry_run_preview(_make_report(dry_run=True))
        assert text.startswith("DRY RUN -- No changes will be made")
        assert "[CREATE]\n  a.md" in text
        assert "[UPDATE]\n  notes/b.md" in text
        assert "[DELETE]\n  old.md" in text
        assert "[REMOVE ASSET]\n  image/old.png" in text
        assert "Skipped: 1 notes (unchanged)" in text
        assert "No changes needed." not in text

    def test_no_changes(self):
        report = _make_report(
            dry_run=True,
            results=[SyncResult(path="x.md", action=SyncAction.SKIP)],
            removed_assets=[],
            removed_dirs=[],
        )
        text = format_dry_run_preview(report)
        assert "[CREATE]" not in text
        assert text.endswith("No changes needed.")


class TestReportToJson:
    """Tests for report_to_json()."""

    def test_structure(self):
        data = report_to_json(_make_report())
        assert data["counts"] == {
            "total": 4,
            "created": 1,
            "updated": 1,
            "deleted": 1,
            "skipped": 1,
            "assets_removed": 1,
        }
        assert data["results"][0] == {
            "path": "a.md",
            "action": "create",
            "reason": "new",
            "assets": ["image/a.png"],
        }
        assert data["results"][3] == {"path": "same.md", "action": "skip"}
        assert data["removed_dirs"] == ["archive"]
        assert data["dangling"] == {"a.md": ["missing.png"]}
        assert data["dry_run"] is False

    def test_is_json_serialisable(self):
        text = json.dumps(report_to_json(_make_report()), ensure_ascii=False)
        assert json.loads(text)["source_root"] == "/vault"
