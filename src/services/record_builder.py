"""Build and patch catalog note content.

Pure functions shared by the import pipeline and the catalog service:
where a new record goes, what its frontmatter and body look like, and how
Discogs fields are written onto existing metadata.
"""

from __future__ import annotations

from typing import Any

from src.models.catalog import DISCOGS_SOURCE, VINYL_TAG, normalize_tags
from src.models.imports import ImportRecord
from src.utils.cover_reference import make_cover_link
from src.utils.text_normalizer import sanitize_name, to_price, to_text

EMPTY_VALUE = "—"
_UNKNOWN_NAME = "Unknown"

# ImportRecord attribute  →  frontmatter key.  Written only when non-empty.
DISCOGS_METADATA_KEYS: dict[str, str] = {
    "year": "year",
    "release_id": "discogs_release_id",
    "catalog_number": "catalog_number",
    "label": "label",
    "format": "format",
    "rating": "discogs_rating",
    "date_added": "discogs_date_added",
    "media_condition": "media_condition",
    "sleeve_condition": "sleeve_condition",
}


def _path_name(value: str) -> str:
    # No leading dots: listings skip hidden names and ".." leaves the folder.
    return sanitize_name(value).lstrip(". ") or _UNKNOWN_NAME


def record_note_path(artists_folder: str, artist: str, title: str) -> str:
    """Return ``<artists>/<Artist>/<Artist> — <Title>.md`` with unsafe characters removed."""
    artist_name = _path_name(artist)
    title_name = _path_name(title)
    folder = f"{artists_folder.rstrip('/')}/{artist_name}" if artists_folder else artist_name
    return f"{folder}/{artist_name} — {title_name}.md"


def with_vinyl_tag(raw_tags: Any) -> list[str]:
    """Existing tags plus ``vinyl`` (appended once, order preserved)."""
    tags = normalize_tags(raw_tags)
    if VINYL_TAG not in tags:
        tags.append(VINYL_TAG)
    return tags


def apply_discogs_fields(metadata: dict[str, Any], record: ImportRecord) -> dict[str, Any]:
    """Overwrite the Discogs-mapped keys of *metadata* in place and return it.

    ``artist``, ``title`` and ``source`` are always written.  The other
    mapped keys are written only when the CSV row has a value, so a blank
    cell never erases data already on the note.  Keys the CSV does not map
    (price, cover, hidden, custom keys) are left alone.
    """
    metadata["artist"] = record.artist
    metadata["title"] = record.title
    for attr, key in DISCOGS_METADATA_KEYS.items():
        value = getattr(record, attr)
        if value:
            metadata[key] = value
    metadata["source"] = DISCOGS_SOURCE
    metadata["tags"] = with_vinyl_tag(metadata.get("tags"))
    return metadata


def build_discogs_body(record: ImportRecord) -> str:
    """Initial note body for a record created from a Discogs row."""
    lines = [
        f"**Artist:** {record.artist}",
        "",
        "### Discogs",
        f"- Release ID: {record.release_id or EMPTY_VALUE}",
        f"- Catalog number: {record.catalog_number or EMPTY_VALUE}",
        f"- Label: {record.label or EMPTY_VALUE}",
        f"- Format: {record.format or EMPTY_VALUE}",
        f"- Added to Discogs collection: {record.date_added or EMPTY_VALUE}",
        "",
        "### Notes",
        f"- Media condition: {record.media_condition}",
        f"- Sleeve condition: {record.sleeve_condition}",
        "- Edition:",
        f"- Comments: {record.notes}",
        "",
    ]
    return "\n".join(lines)


def build_manual_metadata(
    artist: str,
    title: str,
    year: Any = None,
    price: Any = None,
    cover_path: str = "",
) -> dict[str, Any]:
    """Frontmatter for a record added by hand."""
    metadata: dict[str, Any] = {
        "artist": artist,
        "title": title,
        "tags": [VINYL_TAG],
    }
    if to_text(year):
        metadata["year"] = to_text(year)
    parsed_price = to_price(price)
    if parsed_price:
        metadata["price"] = parsed_price
    if cover_path:
        metadata["cover"] = make_cover_link(cover_path)
    return metadata


def build_manual_body(artist: str, cover_path: str = "") -> str:
    """Initial note body for a record added by hand."""
    lines: list[str] = []
    if cover_path:
        lines.extend([f"![[{cover_path}|300]]", ""])
    lines.extend([
        f"**Artist:** {artist}",
        "",
        "",
        "### Notes",
        "- Condition:",
        "- Edition:",
        "- Comments:",
        "",
    ])
    return "\n".join(lines)
