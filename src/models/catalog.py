"""Catalog entry model — one Markdown note in the vault.

A note's metadata is an open YAML mapping.  Only a handful of keys are
reserved by the catalog (artist, title, cover, release id, hidden flag,
price, tags); everything else a user adds by hand must survive a
read-modify-write untouched.  ``CatalogEntry`` therefore keeps the raw
mapping and exposes typed read-only accessors for the reserved keys instead
of modelling the whole record as a fixed struct.

Identity is the note's vault-relative POSIX path.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.utils.cover_reference import has_cover_value, normalize_cover_target, unwrap_cover_value
from src.utils.text_normalizer import to_price, to_text

VINYL_TAG = "vinyl"
DISCOGS_SOURCE = "discogs"


class CatalogEntry(BaseModel):
    """Snapshot of one catalog note: its path plus the metadata read from it."""

    model_config = ConfigDict(frozen=True)

    path: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def stem(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def artist(self) -> str:
        return to_text(self.metadata.get("artist"))

    @property
    def title(self) -> str:
        """Title from metadata, falling back to the file name."""
        return to_text(self.metadata.get("title")) or self.stem

    @property
    def year(self) -> str:
        return to_text(self.metadata.get("year"))

    @property
    def price(self) -> float | None:
        return to_price(self.metadata.get("price"))

    @property
    def release_id(self) -> str:
        """Discogs release id; older notes used a bare ``release_id`` key."""
        return to_text(self.metadata.get("discogs_release_id") or self.metadata.get("release_id"))

    @property
    def cover_target(self) -> str:
        return normalize_cover_target(unwrap_cover_value(self.metadata.get("cover")))

    @property
    def has_cover(self) -> bool:
        return has_cover_value(self.metadata.get("cover"))

    @property
    def hidden(self) -> bool:
        raw = self.metadata.get("hidden")
        return raw is True or to_text(raw).lower() == "true"

    @property
    def tags(self) -> list[str]:
        return normalize_tags(self.metadata.get("tags"))


def normalize_tags(raw: Any) -> list[str]:
    """Return tags as a list of non-empty strings.

    A scalar string is treated as a single tag.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [tag for tag in (to_text(item) for item in raw) if tag]
    tag = to_text(raw)
    return [tag] if tag else []
