"""Vinyl catalog FastAPI application entry point.

Wires together the vault store, the Discogs client, services and
pipelines via dependency injection, and mounts the API routes.  Loads
configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.

Run with ``python -m src.main`` or ``uvicorn src.main:app``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.pipeline.backfill_orchestrator import CoverBackfillPipeline
from src.pipeline.import_orchestrator import DiscogsImportPipeline
from src.providers.catalog.markdown_vault_store import MarkdownVaultStore
from src.providers.music_db.discogs_release_client import DiscogsReleaseClient
from src.services.catalog_service import CatalogService
from src.services.cover_service import CoverService
from src.utils.logging import configure_logging, get_logger

_APP_VERSION = "0.5.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, http_client: httpx.AsyncClient | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    # -- Shared resources --
    http_client = http_client or httpx.AsyncClient(timeout=app_settings.http_timeout_seconds)
    store = MarkdownVaultStore(app_settings.vault_root)

    # -- Discogs --
    release_client = DiscogsReleaseClient(http_client, app_settings)
    cover_service = CoverService(store, release_client, app_settings)

    # -- Services & pipelines --
    catalog_service = CatalogService(store, app_settings, release_client)
    import_pipeline = DiscogsImportPipeline(store, app_settings, cover_service=cover_service)
    backfill_pipeline = CoverBackfillPipeline(store, cover_service, app_settings)

    return {
        "settings": app_settings,
        "http_client": http_client,
        "store": store,
        "catalog_service": catalog_service,
        "import_pipeline": import_pipeline,
        "backfill_pipeline": backfill_pipeline,
    }


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(
    app_settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    app_settings:
        Settings to wire the app with; the module-level settings by default.
    http_client:
        Optional pre-built client (tests pass one backed by
        ``httpx.MockTransport``).  A client created here is closed on
        shutdown; an injected one is left to its owner.
    """
    resolved_settings = app_settings or settings

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Initialise components on startup, close the HTTP client on shutdown."""
        components = _build_all(resolved_settings, http_client)
        for key, value in components.items():
            setattr(application.state, key, value)

        await components["catalog_service"].ensure_structure()

        _logger.info(
            "app_startup",
            app=config.get("app", {}).get("name", "vinyl-catalog"),
            version=_APP_VERSION,
            environment=resolved_settings.app_env,
            vault_root=resolved_settings.vault_root,
        )

        yield

        if http_client is None:
            owned_client: httpx.AsyncClient = components["http_client"]
            await owned_client.aclose()
        _logger.info("app_shutdown", message="HTTP client closed")

    application = FastAPI(
        title="Vinyl Catalog API",
        version=_APP_VERSION,
        description=(
            "Browse a Markdown vinyl catalog, import Discogs collection CSV "
            "exports with upsert by release id or artist+title, and attach "
            "Discogs cover art."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
