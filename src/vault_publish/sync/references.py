"""Embed reference extraction and link rewriting.

Two embed syntaxes are recognised, each by its own matcher:

- Obsidian wiki embeds: ``![[pic 1.png]]`` (optionally ``![[pic.png|300]]``)
- Markdown images: ``![alt](assets/pic.png)``; ``http(s)://`` targets are
  external and ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import AssetRecord
from .naming import asset_link, reference_basename

WIKI_EMBED = re.compile(r"!\[\[([^\]]+)\]\]")
MARKDOWN_IMAGE = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")

_EXTERNAL = re.compile(r"^https?://", re.IGNORECASE)


def embed_target(reference: str) -> str:
    """Return the file part of a reference, dropping a ``|size`` suffix."""
    return reference.split("|", 1)[0].strip()


def extract_wiki_refs(text: str) -> list[str]:
    """Return the inner text of every ``![[...]]`` embed, in order."""
    return [m.group(1).strip() for m in WIKI_EMBED.finditer(text)]


def extract_markdown_refs(text: str) -> list[str]:
    """Return the local target of every ``![alt](...)`` image, in order."""
    refs: list[str] = []
    for m in MARKDOWN_IMAGE.finditer(text):
        target = m.group(2).strip()
        if target and not _EXTERNAL.match(target):
            refs.append(target)
    return refs


def extract_asset_refs(text: str) -> list[str]:
    """Return distinct embed references: wiki embeds first, then images.

    References are deduplicated by their exact string.
    """
    seen: dict[str, None] = {}
    for ref in extract_wiki_refs(text) + extract_markdown_refs(text):
        if ref:
            seen.setdefault(ref, None)
    return list(seen)


def rewrite_embeds(text: str, assets: Iterable[AssetRecord]) -> str:
    """Rewrite embeds so they point at the copied assets.

    * Markdown images whose target resolved keep their alt text and point
      at ``../image/<normalized>``.
    * Wiki embeds whose reference resolved become
      ``![](../image/<normalized>)``.
    * Any remaining wiki embed is rewritten from its own base filename, so
      the link matches what Quartz would expose if the file shows up later.
    """
    by_reference = {asset.reference: asset for asset in assets}

    def _markdown(match: re.Match) -> str:
        asset = by_reference.get(match.group(2).strip())
        if asset is None:
            return match.group(0)
        return f"![{match.group(1)}]({asset_link(asset.filename)})"

    def _wiki(match: re.Match) -> str:
        inner = match.group(1).strip()
        asset = by_reference.get(inner)
        if asset is not None:
            return f"![]({asset_link(asset.filename)})"
        filename = reference_basename(embed_target(inner))
        if not filename:
            return match.group(0)
        return f"![]({asset_link(filename)})"

    # Images first: the wiki pass produces image links that must not be
    # rewritten a second time.
    out = MARKDOWN_IMAGE.sub(_markdown, text)
    return WIKI_EMBED.sub(_wiki, out)
