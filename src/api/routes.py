"""FastAPI API routes for the vinyl catalog.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP (Junior Developer Guide) ───────────────────────────
#
# Endpoint                      Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/health                GET     Health check
# /api/v1/records               GET     List records (?include_hidden=true)
# /api/v1/records               POST    Add a record by hand
# /api/v1/records/hidden        POST    Hide / unhide a record
# /api/v1/imports/discogs       POST    Upload a Discogs CSV export
# /api/v1/covers/backfill       POST    Attach missing Discogs covers
#
# DEPENDENCY INJECTION PATTERN:
# Each route declares its dependencies as type-annotated params.
# FastAPI resolves them via Depends() helpers that read from app.state
# (populated at startup in main.py's _build_all).
#
# ERRORS:
# Routes raise domain exceptions (EmptyInputError, NoteNotFoundError, …)
# and let ErrorHandlingMiddleware turn them into JSON error bodies.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, UploadFile

from src.api.schemas import (
    CreateRecordRequest,
    ErrorResponse,
    HealthResponse,
    RecordListResponse,
    RecordResponse,
    SetHiddenRequest,
)
from src.config.settings import Settings
from src.models.imports import BackfillSummary, ImportSummary
from src.pipeline.backfill_orchestrator import CoverBackfillPipeline
from src.pipeline.import_orchestrator import DiscogsImportPipeline
from src.services.catalog_service import CatalogService
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

_APP_VERSION = "0.5.0"
_MAX_CSV_SIZE = 20 * 1024 * 1024  # 20 MB
_UPLOAD_CHUNK_SIZE = 64 * 1024

router = APIRouter(prefix="/api/v1", tags=["catalog"])


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def _get_import_pipeline(request: Request) -> DiscogsImportPipeline:
    return request.app.state.import_pipeline


def _get_backfill_pipeline(request: Request) -> CoverBackfillPipeline:
    return request.app.state.backfill_pipeline


SettingsDep = Annotated[Settings, Depends(_get_settings)]
CatalogDep = Annotated[CatalogService, Depends(_get_catalog_service)]
ImportPipelineDep = Annotated[DiscogsImportPipeline, Depends(_get_import_pipeline)]
BackfillPipelineDep = Annotated[CoverBackfillPipeline, Depends(_get_backfill_pipeline)]


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=_APP_VERSION,
        vault_root=settings.vault_root,
        discogs_authenticated=bool(settings.discogs_token),
    )


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@router.get(
    "/records",
    response_model=RecordListResponse,
    summary="List catalog records",
)
async def list_records(
    catalog: CatalogDep,
    include_hidden: Annotated[bool, Query()] = False,
) -> RecordListResponse:
    entries = await catalog.list_records(include_hidden=include_hidden)
    records = [
        RecordResponse.from_entry(entry, cover=await catalog.resolve_cover(entry))
        for entry in entries
    ]
    return RecordListResponse(records=records, total=len(records))


@router.post(
    "/records",
    response_model=RecordResponse,
    status_code=201,
    summary="Add a record by hand",
)
async def create_record(body: CreateRecordRequest, catalog: CatalogDep) -> RecordResponse:
    entry = await catalog.add_record(
        artist=body.artist,
        title=body.title,
        year=body.year,
        price=body.price,
        cover_url=body.cover_url,
    )
    return RecordResponse.from_entry(entry)


@router.post(
    "/records/hidden",
    response_model=RecordResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Hide or unhide a record",
)
async def set_record_hidden(body: SetHiddenRequest, catalog: CatalogDep) -> RecordResponse:
    entry = await catalog.set_hidden(body.path, body.hidden)
    return RecordResponse.from_entry(entry)


# ---------------------------------------------------------------------------
# Discogs import and cover backfill
# ---------------------------------------------------------------------------


@router.post(
    "/imports/discogs",
    response_model=ImportSummary,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
    summary="Import a Discogs collection CSV export",
)
async def import_discogs_csv(
    file: UploadFile,
    pipeline: ImportPipelineDep,
    upsert: Annotated[bool, Form()] = True,
    auto_fetch_covers: Annotated[bool, Form()] = False,
) -> ImportSummary:
    """Run a Discogs import over the uploaded CSV and return the run summary."""
    # Read in chunks so an oversized upload is rejected without buffering it all.
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > _MAX_CSV_SIZE:
            raise HTTPException(
                status_code=413,
                detail=f"CSV too large: maximum is {_MAX_CSV_SIZE} bytes.",
            )
        chunks.append(chunk)

    _logger.info(
        "discogs_csv_uploaded",
        filename=file.filename or "unknown",
        size=total_size,
    )
    return await pipeline.run(
        b"".join(chunks),
        upsert=upsert,
        auto_fetch_covers=auto_fetch_covers,
    )


@router.post(
    "/covers/backfill",
    response_model=BackfillSummary,
    summary="Attach Discogs covers to records that have a release id but no cover",
)
async def backfill_covers(pipeline: BackfillPipelineDep) -> BackfillSummary:
    return await pipeline.run()
