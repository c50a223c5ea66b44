"""Vinyl catalog domain models — re-exports all public model classes.

    - catalog.py  — CatalogEntry (one vault note) and tag helpers
    - imports.py  — ImportRecord, run summaries, and ThrottleState
"""

from __future__ import annotations

from src.models.catalog import DISCOGS_SOURCE, VINYL_TAG, CatalogEntry, normalize_tags
from src.models.imports import BackfillSummary, ImportRecord, ImportSummary, ThrottleState

__all__ = [
    "BackfillSummary",
    "CatalogEntry",
    "DISCOGS_SOURCE",
    "ImportRecord",
    "ImportSummary",
    "ThrottleState",
    "VINYL_TAG",
    "normalize_tags",
]
