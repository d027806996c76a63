"""Asset resolution for embed references.

Maps a reference found in a note to the file it denotes inside the vault.
Resolution order (first match wins):

1. **Shared images** -- ``<vault>/image/<basename>``.
2. **Relative path** -- ``<vault>/<note dir>/<reference>``.
3. **Normalized name** -- ``<vault>/image/<normalized basename>``, for
   references written with the original name while the stored file was
   renamed to the slug form (or vice versa).
4. **Fuzzy scan** -- first file in ``<vault>/image/`` (sorted) whose
   normalized name equals the normalized target, ignoring case.

Unresolvable references are dangling: they are dropped, not reported as
errors.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .models import AssetRecord
from .naming import normalize_filename, reference_basename
from .references import embed_target

logger = logging.getLogger(__name__)

#: Default name of the shared images directory at the vault root.
DEFAULT_IMAGES_DIR = "image"


def resolve_asset(
    source_root: Path,
    doc_dir: str,
    reference: str,
    images_dir: str = DEFAULT_IMAGES_DIR,
) -> AssetRecord | None:
    """Resolve one embed reference to a file in the vault.

    Args:
        source_root: Absolute path of the vault.
        doc_dir: Directory of the referencing note, relative to the vault
            (``""`` for the root).
        reference: Reference string as written in the note.
        images_dir: Name of the shared images directory.

    Returns:
        An ``AssetRecord``, or ``None`` if the reference is dangling.
    """
    target = embed_target(reference)
    filename = reference_basename(target)
    if not filename:
        return None

    normalized = normalize_filename(filename)
    images = source_root / images_dir
    candidates = [
        images / filename,
        _within(source_root, source_root / doc_dir / target),
        images / normalized,
    ]
    for candidate in candidates:
        if candidate is not None and candidate.is_file():
            return _record(reference, filename, normalized, candidate)

    found = _scan_images(images, normalized)
    if found is not None:
        return _record(reference, filename, normalized, found)

    logger.debug(
        "Dangling reference %r in %s", reference, doc_dir or "."
    )
    return None


def resolve_assets(
    source_root: Path,
    doc_dir: str,
    references: Iterable[str],
    images_dir: str = DEFAULT_IMAGES_DIR,
) -> tuple[list[AssetRecord], list[str]]:
    """Resolve every reference of one note.

    Returns:
        ``(resolved, dangling)`` preserving reference order.
    """
    resolved: list[AssetRecord] = []
    dangling: list[str] = []
    for ref in references:
        record = resolve_asset(source_root, doc_dir, ref, images_dir)
        if record is None:
            dangling.append(ref)
        else:
            resolved.append(record)
    return resolved, dangling


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _record(
    reference: str, filename: str, normalized: str, path: Path
) -> AssetRecord:
    return AssetRecord(
        reference=reference,
        filename=filename,
        normalized_name=normalized,
        source_path=str(path.resolve()),
    )


def _within(root: Path, candidate: Path) -> Path | None:
    """Return *candidate* if it stays inside *root*, else ``None``."""
    try:
        resolved = candidate.resolve()
    except (OSError, RuntimeError):
        return None
    if not resolved.is_relative_to(root.resolve()):
        logger.warning("Ignoring reference outside the vault: %s", candidate)
        return None
    return resolved


def _scan_images(images: Path, normalized: str) -> Path | None:
    """Case-insensitive match on normalized names inside *images*."""
    if not images.is_dir():
        return None
    wanted = normalized.lower()
    for entry in sorted(images.iterdir()):
        if entry.is_file() and normalize_filename(entry.name).lower() == wanted:
            return entry
    return None
