"""Map one raw Discogs CSV row to an :class:`ImportRecord`.

Column names are the ones Discogs uses in its "Export collection" CSV.
Columns not listed in :data:`DISCOGS_FIELD_MAP` are ignored.
"""

from __future__ import annotations

from collections.abc import Mapping

from src.models.imports import ImportRecord
from src.utils.text_normalizer import to_text

# CSV column name  →  ImportRecord attribute
DISCOGS_FIELD_MAP: dict[str, str] = {
    "Artist":                      "artist",
    "Title":                       "title",
    "Released":                    "year",
    "release_id":                  "release_id",
    "Catalog#":                    "catalog_number",
    "Label":                       "label",
    "Format":                      "format",
    "Rating":                      "rating",
    "Date Added":                  "date_added",
    "Collection Media Condition":  "media_condition",
    "Collection Sleeve Condition": "sleeve_condition",
    "Collection Notes":            "notes",
}


def map_row(row: Mapping[str, object]) -> ImportRecord | None:
    """Return the canonical record for *row*, or ``None`` without artist/title."""
    values = {attr: to_text(row.get(column)) for column, attr in DISCOGS_FIELD_MAP.items()}
    if not values["artist"] or not values["title"]:
        return None
    return ImportRecord(**values)
