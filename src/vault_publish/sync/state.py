"""Sync manifest persistence layer.

The manifest is the only durable memory of previous runs: for every note
the tool wrote into the content directory it records the note's mtime at
the time and the asset paths copied for it.  Anything under the content
directory that is not listed here is never touched.

File format::

    {
      "version": 1,
      "entries": {
        "notes/a.md": {"mtime": 1700000000.5, "assets": ["image/pic-1.png"]}
      }
    }

Key design choices:

* **Atomic writes** -- ``save()`` writes to a temp file then calls
  ``os.replace()`` so readers never see partial data.
* **Forgiving loads** -- a missing, unreadable or malformed manifest loads
  as empty, so the next run simply treats every note as new.
* **Stable output** -- entries are written sorted with no run timestamp, so
  a run with no changes rewrites a byte-identical file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..file_handler import write_json_atomic
from .models import ManifestEntry

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1

Manifest = dict[str, ManifestEntry]


class ManifestStore:
    """Load and save the sync manifest.

    Args:
        path: Path of the manifest JSON file.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Location of the manifest file."""
        return self._path

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> Manifest:
        """Load the manifest from disk.

        Returns:
            ``{relative path: ManifestEntry}``.  Empty when the file is
            missing or cannot be parsed.
        """
        try:
            with open(self._path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning(
                "Ignoring unreadable manifest %s: %s", self._path, exc
            )
            return {}

        if not isinstance(data, dict) or data.get("version") != MANIFEST_VERSION:
            logger.warning(
                "Ignoring manifest %s: unsupported format", self._path
            )
            return {}

        raw_entries = data.get("entries")
        if not isinstance(raw_entries, dict):
            logger.warning(
                "Ignoring manifest %s: missing entries", self._path
            )
            return {}

        try:
            return {
                str(rel): ManifestEntry.model_validate(entry)
                for rel, entry in raw_entries.items()
            }
        except ValidationError as exc:
            logger.warning(
                "Ignoring manifest %s: malformed entry (%s)",
                self._path,
                exc.error_count(),
            )
            return {}

    def save(self, entries: Manifest) -> None:
        """Replace the manifest on disk atomically.

        Args:
            entries: The complete entry set for this run.
        """
        document = {
            "version": MANIFEST_VERSION,
            "entries": {
                rel: entries[rel].model_dump() for rel in sorted(entries)
            },
        }
        write_json_atomic(self._path, document)
