"""Destination filename normalization.

Quartz slugifies asset filenames during its own build, so links written into
published documents must already use the slugified name.  Every place that
computes a destination filename goes through ``normalize_filename()``.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

#: Flat directory (relative to the content root) holding all copied assets.
ASSET_DIR = "image"

_WHITESPACE = re.compile(r"\s")


def normalize_filename(name: str) -> str:
    """Return the destination name Quartz will expose *name* as.

    Applied to the stem only, in order:

    1. each whitespace character -> ``-``
    2. ``&`` -> ``-and-``
    3. ``%`` -> ``-percent``
    4. ``?`` and ``#`` removed

    The extension is re-appended unchanged.  The transform is idempotent.
    """
    stem, dot, ext = name.rpartition(".")
    if not stem:
        # No extension (or a dotfile): the whole name is the stem.
        stem, dot, ext = name, "", ""
    stem = _WHITESPACE.sub("-", stem)
    stem = stem.replace("&", "-and-")
    stem = stem.replace("%", "-percent")
    stem = stem.replace("?", "").replace("#", "")
    return f"{stem}{dot}{ext}"


def reference_basename(ref: str) -> str:
    """Return the final path component of an embed reference."""
    return PurePosixPath(ref.strip().replace("\\", "/")).name


def asset_destination_path(filename: str) -> str:
    """Content-root-relative path for a copied asset, e.g. ``image/a-b.png``."""
    return f"{ASSET_DIR}/{normalize_filename(filename)}"


def asset_link(filename: str) -> str:
    """Link target used inside published documents, e.g. ``../image/a-b.png``."""
    return f"../{asset_destination_path(filename)}"
