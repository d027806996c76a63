"""Core sync engine that reconciles Quartz content with the vault.

The ``SyncEngine`` ties together the snapshot builder and the manifest
store into one publish run.  It:

1. Builds a snapshot of the publishable notes in the vault.
2. Loads the manifest written by the previous run.
3. Deletes notes that are no longer publishable, their assets (unless some
   remaining note still embeds them) and directories left empty.
4. Writes new and changed notes with their assets, rewriting embed links.
5. Replaces the manifest with the new entry set.

Files under the content root that no manifest entry names are never read,
written or deleted.  Errors abort the run before the manifest is saved, so
the next run retries whatever did not complete.  The engine keeps no state
between runs; callers must not run two engines against the same manifest at
the same time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from vault_publish.file_handler import (
    copy_file,
    ensure_within,
    remove_empty_dirs,
    remove_file,
    write_file,
)
from vault_publish.sync.frontmatter import PUBLISH_KEYS
from vault_publish.sync.models import (
    DocumentRecord,
    ManifestEntry,
    SyncAction,
    SyncReport,
    SyncResult,
)
from vault_publish.sync.references import rewrite_embeds
from vault_publish.sync.resolver import DEFAULT_IMAGES_DIR
from vault_publish.sync.snapshot import (
    Snapshot,
    build_snapshot,
    referenced_asset_paths,
)
from vault_publish.sync.state import Manifest, ManifestStore

logger = logging.getLogger(__name__)


class SyncEngine:
    """Publish the vault's publishable notes into a Quartz content tree.

    Args:
        source_root: Absolute path of the Obsidian vault.
        content_root: Absolute path of the Quartz ``content`` directory.
        manifest_store: Store holding the record of the previous run.
        images_dir: Name of the vault's shared images directory.
        publish_keys: Front matter flags accepted as "publishable".
    """

    def __init__(
        self,
        source_root: Path,
        content_root: Path,
        manifest_store: ManifestStore,
        images_dir: str = DEFAULT_IMAGES_DIR,
        publish_keys: Iterable[str] = PUBLISH_KEYS,
    ) -> None:
        self.source_root = source_root
        self.content_root = content_root
        self.manifest_store = manifest_store
        self.images_dir = images_dir
        self.publish_keys = tuple(publish_keys)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(self, dry_run: bool = False) -> SyncReport:
        """Execute a full publish sync.

        Args:
            dry_run: If ``True``, compute the report but do not touch the
                content directory or the manifest.

        Returns:
            A ``SyncReport`` summarising what was (or would be) done.

        Raises:
            OSError: On any file system failure other than a missing file
                during cleanup.  The manifest is left as it was.
        """
        started_at = datetime.now(timezone.utc).isoformat()

        dangling: dict[str, list[str]] = {}
        snapshot = build_snapshot(
            self.source_root,
            self.images_dir,
            self.publish_keys,
            dangling=dangling,
        )
        previous = self.manifest_store.load()

        results: list[SyncResult] = []
        removed_assets: list[str] = []
        removed_dirs = self._delete_stale(
            snapshot, previous, results, removed_assets, dry_run
        )
        entries = self._write_current(
            snapshot, previous, results, removed_assets, dry_run
        )

        if dry_run:
            logger.info("Dry run: manifest not updated")
        else:
            self.manifest_store.save(entries)

        report = SyncReport(
            source_root=str(self.source_root),
            content_root=str(self.content_root),
            dry_run=dry_run,
            results=results,
            removed_assets=removed_assets,
            removed_dirs=removed_dirs,
            dangling=dangling,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(
            "Sync finished: %d created, %d updated, %d deleted, %d unchanged",
            len(report.created),
            len(report.updated),
            len(report.deleted),
            len(report.skipped),
        )
        return report

    # ------------------------------------------------------------------
    # Phase 1: delete
    # ------------------------------------------------------------------

    def _delete_stale(
        self,
        snapshot: Snapshot,
        previous: Manifest,
        results: list[SyncResult],
        removed_assets: list[str],
        dry_run: bool,
    ) -> list[str]:
        """Remove notes that left the snapshot, with their orphaned assets.

        Removed asset paths are appended to *removed_assets*.

        Returns:
            Directories removed because they became empty.
        """
        still_referenced = referenced_asset_paths(snapshot)
        touched_dirs: dict[str, None] = {}

        for rel in sorted(set(previous) - set(snapshot)):
            target = self._content_path(rel)
            if target is None:
                continue

            if dry_run:
                logger.info("Would delete %s", rel)
            elif remove_file(target):
                logger.info("Deleted %s", rel)
            else:
                logger.debug("Already absent: %s", rel)

            orphaned = self._remove_assets(
                previous[rel].assets,
                still_referenced,
                removed_assets,
                dry_run,
            )

            parent = str(PurePosixPath(rel).parent)
            if parent != ".":
                touched_dirs.setdefault(parent, None)

            results.append(
                SyncResult(
                    path=rel,
                    action=SyncAction.DELETE,
                    reason="no longer publishable",
                    assets=orphaned,
                )
            )

        removed_dirs: list[str] = []
        if dry_run:
            return removed_dirs
        for parent in touched_dirs:
            for directory in remove_empty_dirs(
                self.content_root / parent, self.content_root
            ):
                rel_dir = directory.relative_to(self.content_root).as_posix()
                logger.info("Removed empty directory %s", rel_dir)
                removed_dirs.append(rel_dir)
        return removed_dirs

    def _remove_assets(
        self,
        assets: Iterable[str],
        still_referenced: set[str],
        removed_assets: list[str],
        dry_run: bool,
    ) -> list[str]:
        """Delete the assets no remaining note embeds.

        Returns:
            The asset paths removed by this call.
        """
        orphaned: list[str] = []
        for asset in assets:
            if asset in still_referenced or asset in removed_assets:
                continue
            asset_path = self._content_path(asset)
            if asset_path is None:
                continue
            if dry_run:
                logger.info("Would remove asset %s", asset)
            else:
                remove_file(asset_path)
                logger.info("Removed asset %s", asset)
            orphaned.append(asset)
            removed_assets.append(asset)
        return orphaned

    # ------------------------------------------------------------------
    # Phase 2: add / update
    # ------------------------------------------------------------------

    def _write_current(
        self,
        snapshot: Snapshot,
        previous: Manifest,
        results: list[SyncResult],
        removed_assets: list[str],
        dry_run: bool,
    ) -> Manifest:
        """Write new and changed notes; carry unchanged entries forward.

        Assets an updated note stopped embedding are removed once no other
        note embeds them either.

        Returns:
            The complete manifest for this run.
        """
        still_referenced = referenced_asset_paths(snapshot)
        entries: Manifest = {}

        for rel, record in snapshot.items():
            prior = previous.get(rel)
            reason = self._change_reason(record, prior)

            if reason is None:
                entries[rel] = prior
                results.append(SyncResult(path=rel, action=SyncAction.SKIP))
                continue

            action = SyncAction.CREATE if prior is None else SyncAction.UPDATE
            if dry_run:
                logger.info("Would %s %s (%s)", action.value, rel, reason)
                assets = record.asset_paths()
            else:
                assets = self._materialize(record)
                logger.info("%s %s (%s)", action.value.title(), rel, reason)

            if prior is not None:
                self._remove_assets(
                    prior.assets, still_referenced, removed_assets, dry_run
                )

            entries[rel] = ManifestEntry(mtime=record.mtime, assets=assets)
            results.append(
                SyncResult(path=rel, action=action, reason=reason, assets=assets)
            )

        return entries

    def _change_reason(
        self, record: DocumentRecord, prior: ManifestEntry | None
    ) -> str | None:
        """Return why *record* must be written, or ``None`` to skip it.

        Only the modification time is compared, never content: touching a
        note republishes it.
        """
        if prior is None:
            return "new"
        if prior.mtime < record.mtime:
            return "modified"

        wanted = record.asset_paths()
        if len(wanted) != len(prior.assets) or set(wanted) != set(
            prior.assets
        ):
            return "assets changed"

        if not (self.content_root / record.path).is_file():
            return "missing in content"
        for asset in prior.assets:
            if not (self.content_root / asset).is_file():
                return "missing asset"
        return None

    def _materialize(self, record: DocumentRecord) -> list[str]:
        """Copy the note's assets and write the rewritten note.

        Returns:
            Asset paths written, relative to the content root.
        """
        written: list[str] = []
        for asset in record.assets:
            destination = asset.destination_path
            if destination in written:
                continue
            copy_file(
                Path(asset.source_path), self.content_root / destination
            )
            written.append(destination)

        body = rewrite_embeds(record.content, record.assets)
        write_file(ensure_within(self.content_root, record.path), body)
        return written

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _content_path(self, rel: str) -> Path | None:
        """Map a manifest path into the content root, or ``None`` if unsafe."""
        try:
            return ensure_within(self.content_root, rel)
        except ValueError as exc:
            logger.warning("Skipping manifest path: %s", exc)
            return None
