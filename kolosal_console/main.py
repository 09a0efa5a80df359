"""Kolosal console FastAPI application entry point.

Wires the adapters, services and ingestion pipeline together, configures
structured logging, and exposes the API router.  ``build_components`` is
also used by the CLI so both entry points share one composition root.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from kolosal_console.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from kolosal_console.api.routes import APP_VERSION
from kolosal_console.api.routes import router as api_router
from kolosal_console.config import settings
from kolosal_console.config.endpoints import Service, endpoints_for
from kolosal_console.config.settings import Settings
from kolosal_console.pipeline.ingestion_pipeline import IngestionPipeline
from kolosal_console.pipeline.session_store import IngestionSessionStore
from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient
from kolosal_console.providers.parser.docling_parser import DoclingParser
from kolosal_console.providers.parser.kolosal_fast_parser import KolosalFastParser
from kolosal_console.providers.parser.markitdown_parser import MarkItDownParser
from kolosal_console.services.chunker import ChunkerService
from kolosal_console.services.document_committer import DocumentCommitter
from kolosal_console.services.document_service import DocumentService
from kolosal_console.services.engine_service import EngineService
from kolosal_console.services.parser_dispatcher import ParserDispatcher
from kolosal_console.services.retrieval_service import RetrievalService
from kolosal_console.services.status_service import StatusService
from kolosal_console.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level logging
# ---------------------------------------------------------------------------

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Composition root
# ---------------------------------------------------------------------------


def build_components(
    app_settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Construct every adapter and service for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    All adapters share one ``httpx.AsyncClient``; the caller closes it.
    """
    # -- Shared resources --
    http_client = http_client or httpx.AsyncClient(
        timeout=httpx.Timeout(app_settings.http_timeout_seconds)
    )

    # -- Adapters --
    kolosal_client = KolosalServerClient(
        endpoints_for(app_settings, Service.KOLOSAL),
        http_client=http_client,
        embedding_model_name=app_settings.embedding_model_name,
    )
    markitdown = MarkItDownParser(
        endpoints_for(app_settings, Service.MARKITDOWN), http_client=http_client
    )
    docling = DoclingParser(endpoints_for(app_settings, Service.DOCLING), http_client=http_client)

    # -- Ingestion --
    dispatcher = ParserDispatcher([KolosalFastParser(kolosal_client), markitdown, docling])
    chunker = ChunkerService(
        kolosal_client,
        default_similarity_threshold=app_settings.default_similarity_threshold,
    )
    session_store = IngestionSessionStore()
    pipeline = IngestionPipeline(
        dispatcher,
        chunker,
        DocumentCommitter(kolosal_client),
        session_store=session_store,
        default_similarity_threshold=app_settings.default_similarity_threshold,
    )

    return {
        "http_client": http_client,
        "kolosal_client": kolosal_client,
        "dispatcher": dispatcher,
        "chunker": chunker,
        "session_store": session_store,
        "pipeline": pipeline,
        "status_service": StatusService(kolosal_client, markitdown, docling),
        "document_service": DocumentService(kolosal_client),
        "retrieval_service": RetrievalService(
            kolosal_client,
            default_limit=app_settings.retrieve_default_limit,
            default_score_threshold=app_settings.retrieve_default_score_threshold,
        ),
        "engine_service": EngineService(kolosal_client),
    }


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        components = build_components(app_settings)
        for key, value in components.items():
            setattr(application.state, key, value)

        _logger.info(
            "app_startup",
            version=APP_VERSION,
            environment=app_settings.app_env,
            kolosal=app_settings.kolosal_server_url,
            markitdown=app_settings.markitdown_server_url,
            docling=app_settings.docling_server_url,
        )

        yield

        http_client: httpx.AsyncClient = components["http_client"]
        await http_client.aclose()
        _logger.info("app_shutdown", message="HTTP client closed")

    application = FastAPI(
        title="Kolosal Console API",
        version=APP_VERSION,
        description=(
            "Dashboard backend for a kolosal inference server: service status, "
            "document browsing, retrieval, engine management, and a guided "
            "parse, chunk, review and commit ingestion flow."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.cors_allowed_origins)

    application.include_router(api_router)
    return application


app = create_app()


def main() -> None:
    uvicorn.run(
        "kolosal_console.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )


if __name__ == "__main__":
    main()
