"""Docling OCR-conversion adapter implementing IDocumentParser.

Uploads the file to the docling service's ``/processFile`` endpoint with a
fixed set of conversion options: markdown and JSON output, OCR on, table
structure recognition in accurate mode, images embedded.

Docling converts asynchronously on its side.  A response whose ``status``
is still ``pending``/``started`` is surfaced as :class:`ParseNotReadyError`
so the caller can re-issue the same request; it is never treated as an
empty document.

Successful response shape (fields the adapter reads)::

    {
        "document": {"filename": ..., "md_content": ..., "text_content": ...,
                     "metadata": {...}},
        "status": "success",
        "processing_time": 3.2,
        "timings": {...},
        "errors": []
    }
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
from kolosal_console.utils.errors import (
    ParseFailedError,
    ParseNotReadyError,
    RemoteUnavailableError,
)
from kolosal_console.utils.http import upstream_reason

logger = structlog.get_logger(logger_name=__name__)

# Multipart form fields sent with every conversion.
CONVERSION_OPTIONS: dict[str, str | list[str]] = {
    "to_formats": ["md", "json"],
    "do_ocr": "true",
    "do_table_structure": "true",
    "include_images": "true",
    "table_mode": "accurate",
    "pdf_backend": "dlparse_v4",
    "image_export_mode": "embedded",
}

NOT_READY_STATUSES = frozenset({"pending", "started"})
FAILED_STATUSES = frozenset({"failure"})

_SUPPORTED = frozenset(
    {
        DocumentType.PDF,
        DocumentType.DOCX,
        DocumentType.XLSX,
        DocumentType.PPTX,
        DocumentType.HTML,
    }
)


def flatten_metadata(result: dict[str, Any], fallback_filename: str) -> dict[str, Any]:
    """Collect the docling response fields worth keeping on each chunk."""
    document = result.get("document") or {}
    metadata: dict[str, Any] = {
        "filename": document.get("filename") or fallback_filename,
        "processing_time": result.get("processing_time"),
        "status": result.get("status"),
        "timings": result.get("timings") or {},
    }
    nested = document.get("metadata")
    if isinstance(nested, dict):
        metadata.update(nested)
    return metadata


class DoclingParser(IDocumentParser):
    """OCR-capable conversion through the docling service."""

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
                message="Docling needs file bytes",
                provider_name=self.get_provider_name(),
            )
        files = {"files": (source.filename or "upload", source.data, source.content_type)}

        try:
            response = await self._client.post(
                self._endpoints.url("process_file"),
                files=files,
                data=CONVERSION_OPTIONS,
            )
        except httpx.HTTPError as exc:
            raise ParseFailedError(
                message=f"Failed to parse with Docling: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not response.is_success:
            raise ParseFailedError(
                message=f"Failed to parse with Docling: {upstream_reason(response)}",
                provider_name=self.get_provider_name(),
            )

        try:
            result = response.json()
        except ValueError as exc:
            raise ParseFailedError(
                message="Failed to parse with Docling: response was not valid JSON",
                provider_name=self.get_provider_name(),
            ) from exc
        if not isinstance(result, dict):
            raise ParseFailedError(
                message="Failed to parse with Docling: unexpected response shape",
                provider_name=self.get_provider_name(),
            )

        status = str(result.get("status") or "").lower()
        if status in NOT_READY_STATUSES:
            logger.info("docling_parse_pending", filename=source.filename, status=status)
            raise ParseNotReadyError(
                message=f"Docling is still processing {source.filename or 'the document'}; try again shortly",
                provider_name=self.get_provider_name(),
            )
        if status in FAILED_STATUSES:
            errors = result.get("errors") or []
            detail = "; ".join(str(error) for error in errors) or "conversion failed"
            raise ParseFailedError(
                message=f"Failed to parse with Docling: {detail}",
                provider_name=self.get_provider_name(),
            )

        document = result.get("document") or {}
        text = document.get("md_content")
        if text is None:
            text = document.get("text_content")
        if text is None:
            raise ParseFailedError(
                message="Failed to parse with Docling: response had no markdown or text content",
                provider_name=self.get_provider_name(),
            )

        metadata = flatten_metadata(result, source.filename)
        logger.info(
            "docling_parse_complete",
            filename=metadata["filename"],
            status=status,
            processing_time=metadata["processing_time"],
            characters=len(text),
        )
        return ParsedDocument(filename=metadata["filename"], text=text, metadata=metadata)

    async def health(self) -> dict[str, Any]:
        try:
            response = await self._client.get(self._endpoints.url("health"))
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteUnavailableError(
                message=f"Docling health check failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def supported_types(self) -> frozenset[DocumentType]:
        return _SUPPORTED

    def get_parser_type(self) -> ParserType:
        return ParserType.OCR_CONVERSION

    def get_provider_name(self) -> str:
        return "docling"
