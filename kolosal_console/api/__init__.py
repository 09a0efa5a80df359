"""Kolosal console API layer: routes, schemas, and middleware."""

from kolosal_console.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    status_code_for,
)
from kolosal_console.api.routes import router
from kolosal_console.api.schemas import (
    ChunkEditRequest,
    CommitResponse,
    ErrorResponse,
    HealthResponse,
    IngestionConfigRequest,
    IngestionRunResponse,
    ParseResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "status_code_for",
    "router",
    "ChunkEditRequest",
    "CommitResponse",
    "ErrorResponse",
    "HealthResponse",
    "IngestionConfigRequest",
    "IngestionRunResponse",
    "ParseResponse",
]
