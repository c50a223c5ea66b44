"""Models for Discogs CSV imports and cover backfills.

``ImportRecord`` is the canonical, validated form of one CSV row.  The two
summary models are the whole public output of an import or backfill run:
they are filled in row by row while the run progresses and handed back to
the caller when it finishes.  ``ThrottleState`` is the run-scoped timing and
cache state shared by every Discogs request in one run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field


class ImportRecord(BaseModel):
    """One Discogs collection row after mapping.

    ``artist`` and ``title`` are always non-empty; the row mapper drops rows
    that would violate this instead of producing a record.
    """

    model_config = ConfigDict(frozen=True)

    artist: str = Field(min_length=1)
    title: str = Field(min_length=1)
    year: str = ""
    release_id: str = ""
    catalog_number: str = ""
    label: str = ""
    format: str = ""
    rating: str = ""
    date_added: str = ""
    media_condition: str = ""
    sleeve_condition: str = ""
    notes: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.artist} — {self.title}"


class ImportSummary(BaseModel):
    """Counters and per-row errors of one CSV import run."""

    total: int = 0
    created: int = 0
    updated: int = 0
    covers_attached: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)


class BackfillSummary(BaseModel):
    """Counters and per-note errors of one cover backfill run."""

    scanned: int = 0
    candidates: int = 0
    attached: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)


@dataclass
class ThrottleState:
    """Per-run Discogs request state.

    Internal only, never serialized.  ``last_request_at`` is a monotonic
    timestamp in seconds (``None`` until the first request).
    ``image_url_cache`` maps a release id to its resolved image URL; ``""``
    records a release known to have no usable image so it is not requested
    again in the same run.
    """

    last_request_at: float | None = None
    image_url_cache: dict[str, str] = field(default_factory=dict)
