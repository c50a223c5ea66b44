"""Discogs CSV import pipeline.

Turns a Discogs collection export into catalog notes:

    CSV text ─parse─→ rows ─map─→ ImportRecords ─resolve─→ create / update
                                                         └→ cover enrichment

ARCHITECTURE NOTE:
    Two conditions abort the whole run before the catalog is touched:
    an empty CSV (EmptyInputError) and a CSV where no row has both an
    Artist and a Title (NoValidRowsError).  Everything after that is
    per-row: an exception while resolving, writing, or fetching a cover
    for one row is recorded in ``summary.errors`` and the loop moves on.
    Nothing already written for a failed row is rolled back.

    Rows are processed strictly in file order, one at a time.  The
    identity index is updated after every row, so when the same release
    (or artist+title) appears twice in one file the first row creates the
    note and the second updates it.  Sequential processing also keeps
    Discogs requests inside the throttle of the run's ThrottleState.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

import structlog

from src.config.settings import Settings
from src.interfaces.catalog_store import ICatalogStore
from src.models.catalog import CatalogEntry
from src.models.imports import ImportRecord, ImportSummary, ThrottleState
from src.pipeline.progress_tracker import ProgressCallback, ProgressReporter
from src.services.cover_service import CoverService
from src.services.csv_parser import parse_csv
from src.services.identity_index import IdentityIndex, build_identity_index
from src.services.record_builder import (
    apply_discogs_fields,
    build_discogs_body,
    record_note_path,
)
from src.services.row_mapper import map_row
from src.utils.errors import ConfigurationError, EmptyInputError, NoValidRowsError
from src.utils.logging import get_logger

_FALLBACK_ROW_ERROR = "import error"


class DiscogsImportPipeline:
    """Upserts Discogs CSV rows into the catalog.

    Parameters
    ----------
    store:
        Catalog store the notes are read from and written to.
    settings:
        Supplies ``artists_folder``.
    cover_service:
        Needed only for runs with ``auto_fetch_covers=True``.
    on_complete:
        Optional hook called after every finished run (e.g. to refresh
        open catalog views).  Errors raised by it are logged, not raised.
    """

    def __init__(
        self,
        store: ICatalogStore,
        settings: Settings,
        cover_service: CoverService | None = None,
        on_complete: Callable[[], Any] | None = None,
    ) -> None:
        self._store = store
        self._artists_folder = settings.artists_folder
        self._cover_service = cover_service
        self._on_complete = on_complete
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        csv_text: str | bytes,
        *,
        upsert: bool = True,
        auto_fetch_covers: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> ImportSummary:
        """Import *csv_text* and return the run summary.

        Parameters
        ----------
        csv_text:
            Discogs collection export (``str`` or UTF-8 ``bytes``).
        upsert:
            Update notes matching by release id or artist+title instead of
            always creating new ones.
        auto_fetch_covers:
            Fetch a Discogs cover for every imported row that has a release
            id and no cover yet.
        on_progress:
            ``(current, total)`` observer, called once per mapped row after
            the row is processed.

        Raises
        ------
        EmptyInputError
            The CSV contains no data rows.
        NoValidRowsError
            No data row has both Artist and Title.
        ConfigurationError
            Covers were requested but no cover service is configured.
        """
        if auto_fetch_covers and self._cover_service is None:
            raise ConfigurationError(message="Cover fetching requested but no cover service is configured")

        raw_rows = list(parse_csv(csv_text))
        if not raw_rows:
            raise EmptyInputError()

        records = [record for record in map(map_row, raw_rows) if record is not None]
        if not records:
            raise NoValidRowsError()

        summary = ImportSummary(
            total=len(raw_rows),
            skipped=len(raw_rows) - len(records),
        )
        self._logger.info(
            "discogs_import_started",
            rows=len(raw_rows),
            valid=len(records),
            upsert=upsert,
            auto_fetch_covers=auto_fetch_covers,
        )

        index = await build_identity_index(self._store, self._artists_folder)
        state = ThrottleState()
        progress = ProgressReporter(on_progress, run_name="discogs_import")

        for position, record in enumerate(records, start=1):
            try:
                await self._import_record(record, index, state, summary, upsert, auto_fetch_covers)
            except Exception as exc:
                message = str(exc) or _FALLBACK_ROW_ERROR
                summary.errors.append(f"{record.display_name}: {message}")
                self._logger.warning(
                    "discogs_import_row_failed",
                    row=position,
                    artist=record.artist,
                    title=record.title,
                    error=message,
                )
            await progress.report(position, len(records))

        self._logger.info(
            "discogs_import_complete",
            total=summary.total,
            created=summary.created,
            updated=summary.updated,
            covers_attached=summary.covers_attached,
            skipped=summary.skipped,
            errors=len(summary.errors),
        )
        await self._notify_complete()
        return summary

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _import_record(
        self,
        record: ImportRecord,
        index: IdentityIndex,
        state: ThrottleState,
        summary: ImportSummary,
        upsert: bool,
        auto_fetch_covers: bool,
    ) -> None:
        target = index.resolve(record) if upsert else None

        if target is not None:
            entry = await self._update_entry(target, record)
            summary.updated += 1
        else:
            entry = await self._create_entry(record)
            summary.created += 1

        index.remember(record, entry)

        if auto_fetch_covers and record.release_id and self._cover_service is not None:
            attached = await self._cover_service.resolve_and_attach(entry.path, record.release_id, state)
            if attached:
                summary.covers_attached += 1

    async def _update_entry(self, target: CatalogEntry, record: ImportRecord) -> CatalogEntry:
        metadata = await self._store.update_metadata(
            target.path,
            lambda current: apply_discogs_fields(current, record),
        )
        self._logger.debug("discogs_record_updated", path=target.path)
        return CatalogEntry(path=target.path, metadata=metadata)

    async def _create_entry(self, record: ImportRecord) -> CatalogEntry:
        initial_path = record_note_path(self._artists_folder, record.artist, record.title)
        folder = initial_path.rsplit("/", 1)[0]
        await self._store.ensure_folder(folder)

        note_path = await self._store.unique_path(initial_path)
        metadata = apply_discogs_fields({}, record)
        created_path = await self._store.create_note(note_path, metadata, build_discogs_body(record))
        self._logger.debug("discogs_record_created", path=created_path)
        return CatalogEntry(path=created_path, metadata=metadata)

    async def _notify_complete(self) -> None:
        if self._on_complete is None:
            return
        try:
            result = self._on_complete()
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            self._logger.warning("import_complete_hook_failed", error=str(exc))
