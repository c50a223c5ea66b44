"""Vinyl catalog API layer — routes, schemas, and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router
from src.api.schemas import (
    CreateRecordRequest,
    ErrorResponse,
    HealthResponse,
    RecordListResponse,
    RecordResponse,
    SetHiddenRequest,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "CreateRecordRequest",
    "ErrorResponse",
    "HealthResponse",
    "RecordListResponse",
    "RecordResponse",
    "SetHiddenRequest",
]
