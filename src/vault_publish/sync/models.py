"""Pydantic models for the publish sync engine.

Defines the data contracts shared across the sync modules:

- ``AssetRecord``: One resolved embed reference.
- ``DocumentRecord``: One publishable note in the current snapshot.
- ``ManifestEntry``: What the previous run wrote for one note.
- ``SyncAction``: Enum of per-document outcomes.
- ``SyncResult``: Outcome of reconciling one document.
- ``SyncReport``: Aggregate results for a full sync run.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from .naming import asset_destination_path


class AssetRecord(BaseModel):
    """An embed reference resolved to a file in the vault.

    Attributes:
        reference: Reference string exactly as it appeared in the note.
        filename: Base filename of the reference.
        normalized_name: Filename used in the content ``image/`` directory.
        source_path: Absolute path of the file in the vault.
    """

    reference: str
    filename: str
    normalized_name: str
    source_path: str

    model_config = {"frozen": True}

    @property
    def destination_path(self) -> str:
        """Content-root-relative path, e.g. ``image/pic-1.png``."""
        return asset_destination_path(self.filename)


class DocumentRecord(BaseModel):
    """A publishable note as found by the current scan.

    Attributes:
        path: POSIX path relative to the vault root (the identity key).
        content: Raw note text.
        mtime: File modification time in seconds.
        references: Distinct embed references in order of discovery.
        assets: References that resolved to files on disk.
    """

    path: str
    content: str
    mtime: float
    references: list[str] = []
    assets: list[AssetRecord] = []

    model_config = {"frozen": True}

    def asset_paths(self) -> list[str]:
        """Distinct destination asset paths, in reference order."""
        seen: dict[str, None] = {}
        for asset in self.assets:
            seen.setdefault(asset.destination_path, None)
        return list(seen)


class ManifestEntry(BaseModel):
    """What the last run materialized for one note.

    Attributes:
        mtime: Note modification time at the last write.
        assets: Content-root-relative asset paths written for the note.
    """

    mtime: float
    assets: list[str] = []

    model_config = {"frozen": True}


class SyncAction(str, Enum):
    """Possible outcomes for one document."""

    SKIP = "skip"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class SyncResult(BaseModel):
    """Result of reconciling one document.

    Attributes:
        path: Relative note path.
        action: What was (or, for a dry run, would be) done.
        reason: Why the document was rewritten, if it was.
        assets: Asset paths materialized (or removed, for deletes).
    """

    path: str
    action: SyncAction
    reason: str | None = None
    assets: list[str] = []

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate report for a full sync run.

    Attributes:
        source_root: Vault directory that was scanned.
        content_root: Quartz content directory that was updated.
        dry_run: Whether this was a dry-run (no changes applied).
        results: Per-document results.
        removed_assets: Asset paths deleted from the content root.
        removed_dirs: Empty directories removed from the content root.
        dangling: ``{note path: [unresolved references]}``.
        started_at: ISO 8601 timestamp when sync started.
        completed_at: ISO 8601 timestamp when sync completed.
    """

    source_root: str
    content_root: str
    dry_run: bool = False
    results: list[SyncResult] = []
    removed_assets: list[str] = []
    removed_dirs: list[str] = []
    dangling: dict[str, list[str]] = {}
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @property
    def created(self) -> list[SyncResult]:
        """Results where action is CREATE."""
        return [r for r in self.results if r.action == SyncAction.CREATE]

    @property
    def updated(self) -> list[SyncResult]:
        """Results where action is UPDATE."""
        return [r for r in self.results if r.action == SyncAction.UPDATE]

    @property
    def deleted(self) -> list[SyncResult]:
        """Results where action is DELETE."""
        return [r for r in self.results if r.action == SyncAction.DELETE]

    @property
    def skipped(self) -> list[SyncResult]:
        """Results where action is SKIP."""
        return [r for r in self.results if r.action == SyncAction.SKIP]

    @property
    def changed(self) -> bool:
        """``True`` if the run wrote or removed anything."""
        return bool(
            self.created
            or self.updated
            or self.deleted
            or self.removed_assets
            or self.removed_dirs
        )
