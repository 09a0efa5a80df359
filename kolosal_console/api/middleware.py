"""API middleware: CORS, request logging, and error handling.

Middleware order (set in main.py)::

    Client → RequestLogging → ErrorHandling → route handler

so the request log records the final status code, including the ones
ErrorHandling produced from a domain exception, and every event logged
while handling a request carries its ``request_id``.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from kolosal_console.api.schemas import ErrorResponse
from kolosal_console.utils.errors import (
    ChunkNotFoundError,
    IngestionConfigError,
    IngestionStateError,
    InvalidMetadataError,
    KolosalConsoleError,
    NothingToCommitError,
    ParseNotReadyError,
    SessionNotFoundError,
    UnsupportedParserError,
)
from kolosal_console.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# First match wins; anything not listed is an upstream failure (502).
_STATUS_CODES: tuple[tuple[type[KolosalConsoleError], int], ...] = (
    (UnsupportedParserError, 400),
    (InvalidMetadataError, 400),
    (IngestionConfigError, 400),
    (NothingToCommitError, 400),
    (ChunkNotFoundError, 404),
    (SessionNotFoundError, 404),
    (IngestionStateError, 409),
    (ParseNotReadyError, 503),
)
_UPSTREAM_FAILURE = 502

REQUEST_ID_HEADER = "X-Request-ID"


def status_code_for(exc: KolosalConsoleError) -> int:
    """Return the HTTP status used to report *exc*."""
    for error_cls, status_code in _STATUS_CODES:
        if isinstance(exc, error_cls):
            return status_code
    return _UPSTREAM_FAILURE


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Let the dashboard front end call the API from another origin.

    Browsers refuse credentialed responses for a wildcard origin, so
    credentials are allowed only when explicit origins are configured.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log it once it completes.

    The id comes from an incoming ``X-Request-ID`` header or is generated,
    is bound into structlog's context so adapter and pipeline events of
    the same request carry it, and is echoed on the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        start = time.perf_counter()
        response: Response | None = None

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                response = await call_next(request)
                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                _logger.info(
                    "http_request",
                    method=request.method,
                    path=str(request.url.path),
                    status=response.status_code if response else 500,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert ``KolosalConsoleError`` subclasses into JSON error bodies.

    The client sees the exception class name, its message and whether the
    same request may be re-issued.  Tracebacks stay in the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except KolosalConsoleError as exc:
            status_code = status_code_for(exc)
            log = _logger.error if status_code >= 500 else _logger.warning
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=status_code,
                path=str(request.url.path),
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
                retryable=exc.retryable,
            )
            return JSONResponse(
                status_code=status_code,
                content=body.model_dump(),
            )
