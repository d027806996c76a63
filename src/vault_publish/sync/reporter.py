"""Sync report formatting functions.

Provides human-readable and machine-readable output for publish runs:

- ``format_sync_report`` -- full post-sync summary.
- ``format_dry_run_preview`` -- dry-run preview grouped by action.
- ``report_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SyncReport

from .models import SyncAction

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_sync_report(report: SyncReport) -> str:
    """Format a complete sync report as human-readable text.

    Sections are only included when they contain at least one entry.
    Unchanged notes are summarised by count only.

    Args:
        report: The completed sync report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    header = f"Publish sync {report.source_root} -> {report.content_root}"
    if report.dry_run:
        header += " (DRY RUN)"
    lines.append(header)
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    lines.append(
        f"Published {len(report.results) - len(report.deleted)} notes: "
        f"{len(report.created)} created, {len(report.updated)} updated, "
        f"{len(report.deleted)} deleted, "
        f"{len(report.removed_assets)} assets removed"
    )
    lines.append("")

    if report.created:
        lines.append("Created:")
        for r in report.created:
            lines.append(f"  {r.path}{_asset_suffix(r.assets)}")
        lines.append("")

    if report.updated:
        lines.append("Updated:")
        for r in report.updated:
            lines.append(f"  {r.path} ({r.reason}){_asset_suffix(r.assets)}")
        lines.append("")

    if report.deleted:
        lines.append("Deleted:")
        for r in report.deleted:
            lines.append(f"  {r.path}")
        lines.append("")

    if report.removed_assets:
        lines.append("Assets removed:")
        for asset in report.removed_assets:
            lines.append(f"  {asset}")
        lines.append("")

    if report.removed_dirs:
        lines.append("Empty directories removed:")
        for directory in report.removed_dirs:
            lines.append(f"  {directory}/")
        lines.append("")

    if report.dangling:
        lines.append("Unresolved embeds:")
        for path, refs in report.dangling.items():
            lines.append(f"  {path}: {', '.join(refs)}")
        lines.append("")

    if report.skipped:
        lines.append(f"Unchanged: {len(report.skipped)} notes")
        lines.append("")

    return "\n".join(lines).rstrip()


def _asset_suffix(assets: list[str]) -> str:
    if not assets:
        return ""
    return f" [+{len(assets)} asset{'s' if len(assets) != 1 else ''}]"


# ------------------------------------------------------------------
# Dry-run preview
# ------------------------------------------------------------------


def format_dry_run_preview(report: SyncReport) -> str:
    """Format a dry-run preview grouped by action type.

    Each proposed action is shown as ``[ACTION]`` followed by the notes.

    Args:
        report: A dry-run sync report (``dry_run=True``).

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []
    lines.append("DRY RUN -- No changes will be made")
    lines.append(f"Vault: {report.source_root}")
    lines.append(f"Content: {report.content_root}")
    lines.append("")

    groups: dict[SyncAction, list[str]] = defaultdict(list)
    for r in report.results:
        groups[r.action].append(r.path)

    for action in (SyncAction.CREATE, SyncAction.UPDATE, SyncAction.DELETE):
        if action not in groups:
            continue
        lines.append(f"[{action.value.upper()}]")
        for path in groups[action]:
            lines.append(f"  {path}")
        lines.append("")

    if report.removed_assets:
        lines.append("[REMOVE ASSET]")
        for asset in report.removed_assets:
            lines.append(f"  {asset}")
        lines.append("")

    skip_count = len(groups.get(SyncAction.SKIP, []))
    if skip_count > 0:
        lines.append(f"Skipped: {skip_count} notes (unchanged)")
        lines.append("")

    if not report.changed:
        lines.append("No changes needed.")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(report: SyncReport) -> dict:
    """Convert a sync report to a structured dict for JSON serialisation.

    Args:
        report: The sync report.

    Returns:
        Dict with run info, counts, and per-result details.
    """
    results_list = []
    for r in report.results:
        entry: dict = {"path": r.path, "action": r.action.value}
        if r.reason:
            entry["reason"] = r.reason
        if r.assets:
            entry["assets"] = list(r.assets)
        results_list.append(entry)

    return {
        "source_root": report.source_root,
        "content_root": report.content_root,
        "dry_run": report.dry_run,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "counts": {
            "total": len(report.results),
            "created": len(report.created),
            "updated": len(report.updated),
            "deleted": len(report.deleted),
            "skipped": len(report.skipped),
            "assets_removed": len(report.removed_assets),
        },
        "results": results_list,
        "removed_assets": list(report.removed_assets),
        "removed_dirs": list(report.removed_dirs),
        "dangling": {k: list(v) for k, v in report.dangling.items()},
    }
