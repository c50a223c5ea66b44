"""Cover backfill pipeline.

Walks every catalog record and attaches a Discogs cover to the ones that
carry a release id but no cover yet.  No CSV is involved: this is the
cover-enrichment step of the import pipeline run on its own over the
existing catalog.

Records are visited in store listing order, one at a time, sharing one
ThrottleState so the whole run respects the Discogs request interval and
never asks twice for the same release.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

import structlog

from src.config.settings import Settings
from src.interfaces.catalog_store import ICatalogStore
from src.models.catalog import CatalogEntry
from src.models.imports import BackfillSummary, ThrottleState
from src.pipeline.progress_tracker import ProgressCallback, ProgressReporter
from src.services.cover_service import CoverService
from src.utils.logging import get_logger

_FALLBACK_NOTE_ERROR = "backfill error"


class CoverBackfillPipeline:
    """Retrofits Discogs covers onto existing catalog records."""

    def __init__(
        self,
        store: ICatalogStore,
        cover_service: CoverService,
        settings: Settings,
        on_complete: Callable[[], Any] | None = None,
    ) -> None:
        self._store = store
        self._cover_service = cover_service
        self._artists_folder = settings.artists_folder
        self._on_complete = on_complete
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def run(self, *, on_progress: ProgressCallback | None = None) -> BackfillSummary:
        """Scan the catalog and attach missing covers.

        ``on_progress(current, total)`` is called after each scanned record,
        with ``total`` equal to the number of records scanned.
        """
        paths = await self._store.list_records(self._artists_folder)
        summary = BackfillSummary(scanned=len(paths))
        state = ThrottleState()
        progress = ProgressReporter(on_progress, run_name="cover_backfill")

        self._logger.info("cover_backfill_started", records=len(paths))

        for position, path in enumerate(paths, start=1):
            try:
                entry = CatalogEntry(path=path, metadata=await self._store.read_metadata(path))
                if not entry.release_id or entry.has_cover:
                    summary.skipped += 1
                else:
                    summary.candidates += 1
                    attached = await self._cover_service.resolve_and_attach(path, entry.release_id, state)
                    if attached:
                        summary.attached += 1
                    else:
                        summary.skipped += 1
            except Exception as exc:
                message = str(exc) or _FALLBACK_NOTE_ERROR
                summary.errors.append(f"{path}: {message}")
                self._logger.warning("cover_backfill_note_failed", path=path, error=message)
            await progress.report(position, len(paths))

        self._logger.info(
            "cover_backfill_complete",
            scanned=summary.scanned,
            candidates=summary.candidates,
            attached=summary.attached,
            skipped=summary.skipped,
            errors=len(summary.errors),
        )

        if self._on_complete is not None:
            try:
                result = self._on_complete()
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                self._logger.warning("backfill_complete_hook_failed", error=str(exc))

        return summary
