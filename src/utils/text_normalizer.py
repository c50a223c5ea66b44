"""Text normalization utilities for catalog metadata and file names.

This module handles three distinct concerns:

1. **Value coercion** -- frontmatter values arrive as strings, numbers,
   lists or ``None``; :func:`to_text` and :func:`to_price` turn them into
   the plain shapes the rest of the code expects.

2. **Identity keys** -- :func:`make_artist_title_key` builds the
   case/whitespace-insensitive key the identity index uses to match a CSV
   row against an existing note.

3. **File naming** -- :func:`sanitize_name` strips characters that are not
   allowed in file names, :func:`slugify` produces ASCII stems for cover
   files (transliterating Cyrillic), and the ``ext_from_*`` helpers pick an
   image extension.
"""

import re
import unicodedata
from typing import Any
from urllib.parse import urlparse

ARTIST_TITLE_DELIMITER = "::"

_FORBIDDEN_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')
_IMAGE_EXT_RE = re.compile(r"\.(jpg|jpeg|png|webp|svg)$")

_CYRILLIC_TO_LATIN = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "e",
    "ж": "zh", "з": "z", "и": "i", "й": "y", "к": "k", "л": "l", "м": "m",
    "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "у": "u",
    "ф": "f", "х": "h", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "sch",
    "ъ": "", "ы": "y", "ь": "", "э": "e", "ю": "yu", "я": "ya",
}


def to_text(value: Any) -> str:
    """Coerce a frontmatter or CSV value into a trimmed string.

    ``None`` becomes ``""`` and a list is represented by its first item,
    mirroring how single-valued fields sometimes get saved as YAML lists.
    """
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return to_text(value[0]) if value else ""
    return str(value).strip()


def to_price(value: Any) -> float | None:
    """Parse a positive decimal price; ``,`` is accepted as decimal separator.

    Returns ``None`` for blanks, non-numbers, and non-positive values.
    """
    if value is None or value == "":
        return None
    normalized = str(value).replace(",", ".", 1).strip()
    try:
        parsed = float(normalized)
    except ValueError:
        return None
    if parsed != parsed or parsed in (float("inf"), float("-inf")):
        return None
    return parsed if parsed > 0 else None


def normalize_lookup_value(value: Any) -> str:
    """Lowercase, collapse internal whitespace, and trim."""
    return re.sub(r"\s+", " ", to_text(value).lower()).strip()


def make_artist_title_key(artist: Any, title: Any) -> str:
    """Build the identity-index key for an artist/title pair.

    >>> make_artist_title_key("  The  Cure ", "Disintegration")
    'the cure::disintegration'
    """
    return f"{normalize_lookup_value(artist)}{ARTIST_TITLE_DELIMITER}{normalize_lookup_value(title)}"


def sanitize_name(value: Any) -> str:
    """Remove characters that are not allowed in file or folder names."""
    return _FORBIDDEN_FILENAME_CHARS.sub("", to_text(value)).strip()


def transliterate_cyrillic(value: str) -> str:
    """Replace Russian Cyrillic letters with Latin approximations."""
    out: list[str] = []
    for ch in value:
        latin = _CYRILLIC_TO_LATIN.get(ch.lower())
        out.append(ch if latin is None else latin)
    return "".join(out)


def slugify(value: str) -> str:
    """Return an ASCII, dash-separated slug; ``"cover"`` when nothing survives.

    >>> slugify("Кино — Группа крови")
    'kino-gruppa-krovi'
    """
    text = transliterate_cyrillic(value).lower()
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"[^a-z0-9]+", "-", text).strip("-")
    return text or "cover"


def ext_from_url(url: str) -> str:
    """Return the image extension in *url*'s path (``jpeg`` → ``jpg``), or ``""``."""
    try:
        path = urlparse(url).path.lower()
    except ValueError:
        return ""
    match = _IMAGE_EXT_RE.search(path)
    if not match:
        return ""
    return "jpg" if match.group(1) == "jpeg" else match.group(1)


def ext_from_content_type(content_type: Any) -> str:
    """Map an image content type to a file extension, or ``""`` if unknown."""
    raw = to_text(content_type).lower()
    if "svg" in raw:
        return "svg"
    if "png" in raw:
        return "png"
    if "webp" in raw:
        return "webp"
    if "jpeg" in raw or "jpg" in raw:
        return "jpg"
    return ""
