"""Pipeline orchestration for Discogs imports and cover backfills."""

from src.pipeline.backfill_orchestrator import CoverBackfillPipeline
from src.pipeline.import_orchestrator import DiscogsImportPipeline
from src.pipeline.progress_tracker import ProgressReporter

__all__ = [
    "CoverBackfillPipeline",
    "DiscogsImportPipeline",
    "ProgressReporter",
]
