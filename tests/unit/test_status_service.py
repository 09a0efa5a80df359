"""Unit tests for the batched dashboard status fetch."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from kolosal_console.models.ingestion import ParserType
from kolosal_console.models.status import UNAVAILABLE
from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient
from kolosal_console.services.status_service import StatusService
from kolosal_console.utils.errors import RemoteServiceError, RemoteUnavailableError


def _client() -> MagicMock:
    client = MagicMock(spec=KolosalServerClient)
    client.status = AsyncMock(
        return_value={
            "status": "healthy",
            "engines": [{"engine_id": "qwen3-0.6b", "status": "loaded"}],
            "node_manager": {"total_engines": 1},
        }
    )
    client.list_documents = AsyncMock(
        return_value={"collection_name": "documents", "document_ids": ["a"], "total_count": 1}
    )
    return client


@pytest.fixture
def parsers(make_parser):
    markitdown = make_parser(ParserType.MARKDOWN_CONVERSION, "markitdown")
    docling = make_parser(ParserType.OCR_CONVERSION, "docling")
    return markitdown, docling


class TestStatusService:
    @pytest.mark.asyncio
    async def test_all_healthy(self, parsers) -> None:
        markitdown, docling = parsers
        service = StatusService(_client(), markitdown, docling)

        status = await service.fetch_all()

        assert status.inference_status.status == "healthy"
        assert status.inference_status.engines[0]["engine_id"] == "qwen3-0.6b"
        assert status.markitdown_status.status == "healthy"
        assert status.markitdown_status.service == "markitdown-api"
        assert status.docling_status.service == "docling-api"
        assert status.documents_data is not None
        assert status.documents_data.total_count == 1
        assert status.last_updated.tzinfo is not None

    @pytest.mark.asyncio
    async def test_each_failure_degrades_alone(self, parsers) -> None:
        markitdown, docling = parsers
        client = _client()
        client.status.side_effect = RemoteUnavailableError(provider_name="kolosal")
        docling.health.side_effect = RemoteUnavailableError(provider_name="docling")

        status = await StatusService(client, markitdown, docling).fetch_all()

        assert status.inference_status.status == UNAVAILABLE
        assert status.docling_status.status == UNAVAILABLE
        assert status.docling_status.service == "docling-api"
        assert status.markitdown_status.status == "healthy"
        assert status.documents_data is not None

    @pytest.mark.asyncio
    async def test_document_list_failure_is_null(self, parsers) -> None:
        markitdown, docling = parsers
        client = _client()
        client.list_documents.side_effect = RemoteServiceError(message="down")

        status = await StatusService(client, markitdown, docling).fetch_all()

        assert status.documents_data is None
        assert status.inference_status.status == "healthy"

    @pytest.mark.asyncio
    async def test_malformed_payload_is_unavailable(self, parsers) -> None:
        markitdown, docling = parsers
        client = _client()
        client.status.return_value = {"engines": "not a list"}
        markitdown.health.return_value = ["unexpected"]

        status = await StatusService(client, markitdown, docling).fetch_all()

        assert status.inference_status.status == UNAVAILABLE
        assert status.markitdown_status.status == UNAVAILABLE

    @pytest.mark.asyncio
    async def test_checks_run_once_each(self, parsers) -> None:
        markitdown, docling = parsers
        client = _client()
        await StatusService(client, markitdown, docling).fetch_all()
        client.status.assert_awaited_once()
        client.list_documents.assert_awaited_once()
        markitdown.health.assert_awaited_once()
        docling.health.assert_awaited_once()
