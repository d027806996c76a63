"""Snapshot builder: the desired content state computed from the vault.

Walks the vault, keeps the publishable notes and resolves their embeds.
Every run is a full rescan; nothing here is cached or persisted.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from vault_publish.file_handler import read_file_with_encoding

from .frontmatter import PUBLISH_KEYS, is_publishable
from .models import DocumentRecord
from .references import extract_asset_refs
from .resolver import DEFAULT_IMAGES_DIR, resolve_assets

logger = logging.getLogger(__name__)

Snapshot = dict[str, DocumentRecord]


def discover_notes(
    source_root: Path, images_dir: str = DEFAULT_IMAGES_DIR
) -> list[str]:
    """Scan *source_root* for Markdown notes.

    Hidden directories are skipped at every level; the shared images
    directory is skipped at the vault root.

    Returns:
        Sorted list of relative paths (POSIX-style forward slashes).
    """
    if not source_root.is_dir():
        return []

    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(source_root):
        at_root = Path(dirpath) == source_root
        dirnames[:] = sorted(
            d
            for d in dirnames
            if not d.startswith(".") and not (at_root and d == images_dir)
        )
        for name in filenames:
            if not name.endswith(".md"):
                continue
            full = Path(dirpath) / name
            if full.is_file():
                rel = full.relative_to(source_root).as_posix()
                found.append(rel)
    return sorted(found)


def build_snapshot(
    source_root: Path,
    images_dir: str = DEFAULT_IMAGES_DIR,
    publish_keys: Iterable[str] = PUBLISH_KEYS,
    dangling: dict[str, list[str]] | None = None,
) -> Snapshot:
    """Build the snapshot of publishable notes under *source_root*.

    Args:
        source_root: Absolute path of the vault.
        images_dir: Name of the shared images directory.
        publish_keys: Front matter flags accepted as "publishable".
        dangling: Optional dict collecting unresolved references per note.

    Returns:
        ``{relative path: DocumentRecord}`` in sorted path order.
    """
    keys = tuple(publish_keys)
    snapshot: Snapshot = {}
    for rel in discover_notes(source_root, images_dir):
        full = source_root / rel
        content, _ = read_file_with_encoding(full)
        if not is_publishable(content, keys):
            continue

        mtime = full.stat().st_mtime
        references = extract_asset_refs(content)
        doc_dir = str(PurePosixPath(rel).parent)
        if doc_dir == ".":
            doc_dir = ""
        assets, missing = resolve_assets(
            source_root, doc_dir, references, images_dir
        )
        if missing and dangling is not None:
            dangling[rel] = missing

        snapshot[rel] = DocumentRecord(
            path=rel,
            content=content,
            mtime=mtime,
            references=references,
            assets=assets,
        )

    logger.info(
        "Scanned %s: %d publishable notes", source_root, len(snapshot)
    )
    return snapshot


def referenced_asset_paths(snapshot: Snapshot) -> set[str]:
    """Every destination asset path referenced by the snapshot."""
    return {
        path
        for record in snapshot.values()
        for path in record.asset_paths()
    }
