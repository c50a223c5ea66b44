"""Pydantic request/response schemas for the vinyl catalog API.

Defines the public contract for the REST endpoints: record listing,
manual record creation, hide/unhide, Discogs CSV import, cover backfill
and health.  Import and backfill responses reuse the run summary models
from ``src.models.imports`` unchanged; they are already the complete
public output of a run.

# ─── HOW SCHEMAS WORK (Junior Developer Guide) ────────────────────────
#
# These Pydantic models define the *shape* of every HTTP request body
# and response body in the API.  FastAPI uses them for:
#
#   1. **Validation** — Incoming JSON is validated against the schema.
#      Invalid requests get a 422 error with details.
#   2. **Serialization** — Outgoing objects are converted to JSON
#      matching the schema (via response_model=...).
#   3. **Documentation** — OpenAPI docs are generated from them (/docs).
#
# Convention: Request schemas end with "Request", response schemas
# end with "Response".
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.models.catalog import CatalogEntry


class RecordResponse(BaseModel):
    """One catalog record as shown in listings."""

    path: str
    artist: str
    title: str
    year: str = ""
    price: float | None = None
    cover: str = Field(default="", description="External URL or vault path; empty when missing")
    hidden: bool = False

    @classmethod
    def from_entry(cls, entry: CatalogEntry, cover: str | None = None) -> RecordResponse:
        return cls(
            path=entry.path,
            artist=entry.artist,
            title=entry.title,
            year=entry.year,
            price=entry.price,
            cover=entry.cover_target if cover is None else cover,
            hidden=entry.hidden,
        )


class RecordListResponse(BaseModel):
    """Visible catalog records, sorted by artist then title."""

    records: list[RecordResponse]
    total: int


class CreateRecordRequest(BaseModel):
    """A record added by hand."""

    artist: str = Field(..., min_length=1, max_length=500)
    title: str = Field(..., min_length=1, max_length=500)
    year: str | None = None
    price: float | str | None = None
    cover_url: str = Field(default="", description="Optional image URL downloaded into the covers folder")


class SetHiddenRequest(BaseModel):
    """Hide or unhide the record at ``path``."""

    path: str = Field(..., min_length=1)
    hidden: bool = True


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    vault_root: str
    discogs_authenticated: bool


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
