"""File handler module: encoding-aware reads, writes, copies and cleanup.

Provides the file I/O primitives used by the sync engine.  Cleanup helpers
treat "not found" as already done; every other ``OSError`` propagates.
"""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

from charset_normalizer import from_bytes

logger = logging.getLogger(__name__)

# =============================================================================
# Path Validation
# =============================================================================


def ensure_within(root: Path, rel_path: str) -> Path:
    """Join *rel_path* onto *root*, refusing paths that escape it.

    Args:
        root: Base directory.
        rel_path: POSIX-style relative path.

    Returns:
        The joined (unresolved) path.

    Raises:
        ValueError: If the path is absolute or resolves outside *root*.
    """
    if Path(rel_path).is_absolute():
        raise ValueError(f"Path must be relative: {rel_path}")
    joined = root / rel_path
    root_resolved = root.resolve()
    if not joined.resolve().is_relative_to(root_resolved):
        raise ValueError(
            f"Path escapes base directory: {rel_path} not under {root_resolved}"
        )
    return joined


# =============================================================================
# File Read/Write
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a text file, detecting the encoding when it is not UTF-8.

    UTF-8 (with or without BOM) is tried first since vault notes are almost
    always UTF-8; otherwise charset-normalizer picks the best match.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    try:
        return (raw.decode("utf-8"), "utf-8")
    except UnicodeDecodeError:
        pass

    result = from_bytes(raw).best()
    if result is None:
        # Detection failed, fall back to utf-8
        logger.warning("Could not detect encoding of %s", path)
        return (raw.decode("utf-8", errors="replace"), "utf-8")
    return (str(result), result.encoding)


def write_file(
    path: Path, content: str, encoding: str = "utf-8"
) -> int:
    """Write content to a file, creating parent directories as needed.

    Args:
        path: Path to the output file.
        content: String content to write.
        encoding: Encoding to use (default: utf-8).

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode(encoding)
    path.write_bytes(encoded)
    return len(encoded)


def copy_file(source: Path, target: Path) -> None:
    """Copy *source* over *target*, creating the parent directory."""
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)


# =============================================================================
# Cleanup
# =============================================================================


def remove_file(path: Path) -> bool:
    """Delete *path*.

    Returns:
        ``True`` if a file was removed, ``False`` if it was already absent.
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def remove_empty_dirs(start: Path, stop: Path) -> list[Path]:
    """Remove *start* and its parents while they are empty.

    Never removes *stop* or anything outside it.  A non-empty or missing
    directory ends the walk.

    Returns:
        Directories removed, deepest first.
    """
    removed: list[Path] = []
    stop_resolved = stop.resolve()
    current = start
    while True:
        resolved = current.resolve()
        if resolved == stop_resolved or not resolved.is_relative_to(
            stop_resolved
        ):
            break
        try:
            with os.scandir(current) as entries:
                if any(entries):
                    break
            current.rmdir()
        except FileNotFoundError:
            break
        removed.append(current)
        current = current.parent
    return removed


# =============================================================================
# Atomic JSON
# =============================================================================


def write_json_atomic(path: Path, data: object) -> None:
    """Write *data* as pretty-printed JSON, replacing *path* atomically.

    Writes to a temporary file in the same directory then calls
    ``os.replace()`` so readers never see partial data.  Creates the parent
    directory if needed.
    """
    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=str(directory), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, ensure_ascii=False)
            fh.write("\n")
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up temp file on any failure.
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
