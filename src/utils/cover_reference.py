"""Helpers for the ``cover`` frontmatter field.

A cover can be stored in several shapes depending on who wrote the note:

- a wiki link: ``[[Vinyl/covers/discogs-123.jpg]]`` (optionally with
  ``|300`` sizing),
- a markdown image: ``![](https://img.discogs.com/...)``,
- a bare URL or vault path,
- a YAML mapping with ``path``, ``url`` or ``value``,
- a one-element list of any of the above.

:func:`has_cover_value` is the single test the import engine uses to decide
whether a note already has a cover.
"""

from __future__ import annotations

import re
from typing import Any

from src.utils.text_normalizer import to_text

_MARKDOWN_IMAGE_RE = re.compile(r"!\[[^\]]*\]\(([^)]+)\)")
_WIKI_LINK_RE = re.compile(r"^\[\[([^\]]+)\]\]$")
_EXTERNAL_SCHEME_RE = re.compile(r"^(https?:|data:|file:|app:)", re.IGNORECASE)


def unwrap_cover_value(raw: Any) -> str:
    """Flatten list/mapping cover values into a single string."""
    if raw is None:
        return ""
    if isinstance(raw, (list, tuple)):
        return unwrap_cover_value(raw[0]) if raw else ""
    if isinstance(raw, dict):
        if raw.get("path"):
            return f"[[{raw['path']}]]"
        if raw.get("url"):
            return to_text(raw["url"])
        if raw.get("value"):
            return to_text(raw["value"])
        return ""
    return to_text(raw)


def normalize_cover_target(raw: Any) -> str:
    """Strip markdown/wiki wrappers and sizing suffixes, returning the target."""
    cover = to_text(raw)
    if not cover:
        return ""

    markdown_image = _MARKDOWN_IMAGE_RE.search(cover)
    if markdown_image:
        cover = markdown_image.group(1).strip()

    wiki = _WIKI_LINK_RE.match(cover)
    if wiki:
        cover = wiki.group(1).strip()

    if "|" in cover and not _EXTERNAL_SCHEME_RE.match(cover):
        cover = cover.split("|", 1)[0].strip()

    return cover


def has_cover_value(raw: Any) -> bool:
    """Return ``True`` when *raw* normalizes to a non-empty cover target."""
    return bool(normalize_cover_target(unwrap_cover_value(raw)))


def is_external_cover(target: str) -> bool:
    """Return ``True`` for ``http(s)``, ``data``, ``file`` and ``app`` targets."""
    return bool(_EXTERNAL_SCHEME_RE.match(target))


def make_cover_link(path: str) -> str:
    """Format a vault path as the wiki link stored in ``cover``."""
    return f"[[{path}]]"
