"""Publishability filter.

A note is publishable when its leading front matter block carries one of the
publish flags set to ``true``::

    ---
    可发布: true
    ---

The header is located with a small line scanner rather than a YAML parser:
only the opening/closing ``---`` markers and ``key: value`` lines matter, and
notes with broken YAML must still be classified.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

#: Accepted publish flags ("publishable" / "published"); treated as synonyms.
PUBLISH_KEYS: tuple[str, ...] = ("可发布", "已发布")

_MARKER = "---"
_KEY_VALUE = re.compile(r"^\s*(?P<key>[^:]+?)\s*:\s*(?P<value>.*?)\s*$")


def read_header(text: str) -> list[str] | None:
    """Return the lines between the leading ``---`` markers.

    Returns ``None`` when the text does not open with a marker line or the
    block is never closed.
    """
    inside = False
    header: list[str] = []
    for index, line in enumerate(text.lstrip("\ufeff").splitlines()):
        if not inside:
            if index == 0 and line.rstrip() == _MARKER:
                inside = True
                continue
            return None
        if line.rstrip() == _MARKER:
            return header
        header.append(line)
    return None


def is_publishable(
    text: str, keys: Iterable[str] = PUBLISH_KEYS
) -> bool:
    """Return ``True`` if the front matter marks the note publishable.

    Args:
        text: Raw note content.
        keys: Flag names accepted as the publish switch.
    """
    header = read_header(text)
    if header is None:
        return False

    accepted = set(keys)
    for line in header:
        match = _KEY_VALUE.match(line)
        if match is None:
            continue
        if match["key"] in accepted and match["value"] == "true":
            return True
    return False
