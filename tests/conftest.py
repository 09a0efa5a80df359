"""Shared pytest fixtures for the Kolosal console test suite."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from kolosal_console.config.endpoints import Service, ServiceEndpoints, endpoints_for
from kolosal_console.config.settings import Settings
from kolosal_console.interfaces.document_parser import IDocumentParser
from kolosal_console.models.ingestion import (
    Chunk,
    DocumentSource,
    DocumentType,
    ParsedDocument,
    ParserType,
)
from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient

KOLOSAL_URL = "http://kolosal.test"
MARKITDOWN_URL = "http://markitdown.test"
DOCLING_URL = "http://docling.test"

Handler = Callable[[httpx.Request], httpx.Response]


# ---------------------------------------------------------------------------
# Settings & endpoints
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Settings pointing every service at a fake host."""
    return Settings(
        kolosal_server_url=KOLOSAL_URL,
        markitdown_server_url=MARKITDOWN_URL,
        docling_server_url=DOCLING_URL,
        embedding_model_name="test-embedding",
        app_env="test",
    )


@pytest.fixture
def kolosal_endpoints(settings: Settings) -> ServiceEndpoints:
    return endpoints_for(settings, Service.KOLOSAL)


@pytest.fixture
def markitdown_endpoints(settings: Settings) -> ServiceEndpoints:
    return endpoints_for(settings, Service.MARKITDOWN)


@pytest.fixture
def docling_endpoints(settings: Settings) -> ServiceEndpoints:
    return endpoints_for(settings, Service.DOCLING)


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


def make_http_client(handler: Handler) -> tuple[httpx.AsyncClient, RecordingTransport]:
    """Return an AsyncClient served by *handler* plus its recording transport."""
    transport = RecordingTransport(handler)
    return httpx.AsyncClient(transport=transport), transport


@pytest.fixture
def make_http() -> Callable[[Handler], tuple[httpx.AsyncClient, RecordingTransport]]:
    """Factory fixture: ``make_http(handler)`` -> ``(client, transport)``."""
    return make_http_client


@pytest.fixture
def make_kolosal(
    kolosal_endpoints: ServiceEndpoints,
) -> Callable[[Handler], tuple[KolosalServerClient, RecordingTransport]]:
    """Factory fixture: a KolosalServerClient served by *handler*."""

    def _make(handler: Handler) -> tuple[KolosalServerClient, RecordingTransport]:
        http_client, transport = make_http_client(handler)
        client = KolosalServerClient(
            kolosal_endpoints, http_client=http_client, embedding_model_name="test-embedding"
        )
        return client, transport

    return _make


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def pdf_source() -> DocumentSource:
    return DocumentSource(
        filename="report.pdf",
        data=b"%PDF-1.7 fake",
        content_type="application/pdf",
    )


@pytest.fixture
def parsed_document() -> ParsedDocument:
    return ParsedDocument(
        filename="report.pdf",
        text="First paragraph.\n\nSecond paragraph.",
        metadata={"filename": "report.pdf", "status": "success"},
    )


@pytest.fixture
def staged_chunks() -> list[Chunk]:
    return [
        Chunk(id="chunk-1", text="First paragraph.", metadata={"chunk_index": 1}),
        Chunk(id="chunk-2", text="Second paragraph.", metadata={"chunk_index": 2}),
    ]


def make_mock_parser(
    parser_type: ParserType,
    provider_name: str,
    result: ParsedDocument | None = None,
    supported: frozenset[DocumentType] | None = None,
) -> MagicMock:
    """A MagicMock shaped like an IDocumentParser."""
    parser = MagicMock(spec=IDocumentParser)
    parser.get_parser_type.return_value = parser_type
    parser.get_provider_name.return_value = provider_name
    types = supported if supported is not None else frozenset(
        {DocumentType.PDF, DocumentType.DOCX, DocumentType.XLSX, DocumentType.PPTX, DocumentType.HTML}
    )
    parser.supported_types.return_value = types
    parser.supports.side_effect = lambda doc_type: doc_type in types
    parser.parse = AsyncMock(
        return_value=result or ParsedDocument(filename="", text="parsed text", metadata={})
    )
    parser.health = AsyncMock(return_value={"status": "healthy"})
    return parser


@pytest.fixture
def make_parser() -> Callable[..., MagicMock]:
    """Factory fixture for mock parser backends."""
    return make_mock_parser
