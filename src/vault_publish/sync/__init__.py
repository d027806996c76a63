"""One-way publish sync from an Obsidian vault into Quartz content.

Public API for mirroring the publishable notes of a vault (front matter
``可发布: true`` or ``已发布: true``) and the images they embed into the
``content`` directory of a Quartz site.

Architecture
------------
Each run rebuilds a **snapshot** of the vault and compares it with the
**manifest** written by the previous run.  The manifest names every file
the tool owns in the content directory, so hand-written pages such as
``index.md`` are never touched.

Modules:

- ``engine``      -- ``SyncEngine``: delete / write / persist cycle.
- ``snapshot``    -- ``build_snapshot``: scan the vault for publishable notes.
- ``frontmatter`` -- ``is_publishable``: front matter publish flag check.
- ``references``  -- embed extraction and link rewriting.
- ``resolver``    -- map embed references to files in the vault.
- ``naming``      -- ``normalize_filename``: Quartz-compatible asset names.
- ``state``       -- ``ManifestStore``: load/save the JSON manifest.
- ``models``      -- ``AssetRecord``, ``DocumentRecord``, ``ManifestEntry``,
  ``SyncAction``, ``SyncResult``, ``SyncReport``.
- ``reporter``    -- human-readable and JSON report formatting.

Usage example
-------------
::

    from pathlib import Path
    from vault_publish.sync import ManifestStore, SyncEngine, format_sync_report

    engine = SyncEngine(
        source_root=Path("obsidian"),
        content_root=Path("quartz/content"),
        manifest_store=ManifestStore(Path(".vault_publish/sync-manifest.json")),
    )

    # Dry-run first to preview changes
    print(format_sync_report(engine.run(dry_run=True)))

    # Execute the sync
    print(format_sync_report(engine.run()))
"""

from .engine import SyncEngine
from .frontmatter import PUBLISH_KEYS, is_publishable
from .models import (
    AssetRecord,
    DocumentRecord,
    ManifestEntry,
    SyncAction,
    SyncReport,
    SyncResult,
)
from .naming import normalize_filename
from .reporter import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)
from .snapshot import build_snapshot
from .state import ManifestStore

__all__ = [
    "PUBLISH_KEYS",
    "AssetRecord",
    "DocumentRecord",
    "ManifestEntry",
    "ManifestStore",
    "SyncAction",
    "SyncEngine",
    "SyncReport",
    "SyncResult",
    "build_snapshot",
    "format_dry_run_preview",
    "format_sync_report",
    "is_publishable",
    "normalize_filename",
    "report_to_json",
]
