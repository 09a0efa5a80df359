"""MarkItDown adapter implementing IDocumentParser.

Uploads the raw file as multipart form data (field ``file``) to the
markitdown service's ``/parse_{type}`` endpoint.  The service answers
with ``{filename, title, markdown_content, metadata}``; ``markdown_content``
becomes the parsed text and ``metadata`` is passed through.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from kolosal_console.config.endpoints import ServiceEndpoints
from kolosal_console.interfaces.document_parser import IDocumentParser
from kolosal_console.models.ingestion import (
    DocumentSource,
    DocumentType,
    ParsedDocument,
    ParserType,
)
from kolosal_console.utils.errors import ParseFailedError, RemoteUnavailableError
from kolosal_console.utils.http import upstream_reason

logger = structlog.get_logger(logger_name=__name__)

_SUPPORTED = frozenset(
    {
        DocumentType.PDF,
        DocumentType.DOCX,
        DocumentType.XLSX,
        DocumentType.PPTX,
        DocumentType.HTML,
    }
)


class MarkItDownParser(IDocumentParser):
    """Markdown conversion through the markitdown service."""

    def __init__(
        self,
        endpoints: ServiceEndpoints,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 120.0,
    ) -> None:
        self._endpoints = endpoints
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def parse(
        self,
        source: DocumentSource,
        document_type: DocumentType,
    ) -> ParsedDocument:
        if source.data is None:
            raise ParseFailedError(
                message="MarkItDown needs file bytes",
                provider_name=self.get_provider_name(),
            )
        url = self._endpoints.custom_url(f"/parse_{document_type.value}")
        files = {"file": (source.filename or "upload", source.data, source.content_type)}

        try:
            response = await self._client.post(url, files=files)
        except httpx.HTTPError as exc:
            raise ParseFailedError(
                message=f"Failed to parse with MarkItDown: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not response.is_success:
            raise ParseFailedError(
                message=f"Failed to parse with MarkItDown: {upstream_reason(response)}",
                provider_name=self.get_provider_name(),
            )

        try:
            result = response.json()
        except ValueError as exc:
            raise ParseFailedError(
                message="Failed to parse with MarkItDown: response was not valid JSON",
                provider_name=self.get_provider_name(),
            ) from exc

        markdown = result.get("markdown_content") if isinstance(result, dict) else None
        if not isinstance(markdown, str):
            raise ParseFailedError(
                message="Failed to parse with MarkItDown: response had no markdown_content",
                provider_name=self.get_provider_name(),
            )
        metadata = result.get("metadata") or {}
        if not isinstance(metadata, dict):
            metadata = {"value": metadata}

        logger.info(
            "markitdown_parse_complete",
            filename=source.filename,
            document_type=document_type.value,
            characters=len(markdown),
        )
        return ParsedDocument(
            filename=result.get("filename") or source.filename,
            text=markdown,
            metadata=metadata,
        )

    async def health(self) -> dict[str, Any]:
        try:
            response = await self._client.get(self._endpoints.url("health"))
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteUnavailableError(
                message=f"MarkItDown health check failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def supported_types(self) -> frozenset[DocumentType]:
        return _SUPPORTED

    def get_parser_type(self) -> ParserType:
        return ParserType.MARKDOWN_CONVERSION

    def get_provider_name(self) -> str:
        return "markitdown"
