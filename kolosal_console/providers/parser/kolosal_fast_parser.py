"""Kolosal fast-parse adapter implementing IDocumentParser.

Sends the file base64-encoded in a JSON body to the kolosal server's
``/parse_{type}`` endpoint with ``method="fast"``.  The server's response
schema is loosely typed, so the text is taken from the first non-empty
field in :data:`TEXT_FIELD_PRIORITY`; if none is present the whole body
is kept as JSON so the user still sees what came back.
"""

from __future__ import annotations

import base64
import json
from typing import Any

import structlog

from kolosal_console.interfaces.document_parser import IDocumentParser
from kolosal_console.models.ingestion import (
    DocumentSource,
    DocumentType,
    ParsedDocument,
    ParserType,
)
from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient
from kolosal_console.utils.errors import ParseFailedError

logger = structlog.get_logger(logger_name=__name__)

TEXT_FIELD_PRIORITY: tuple[str, ...] = ("text", "content", "markdown_content", "markdown")

_SUPPORTED = frozenset(
    {
        DocumentType.PDF,
        DocumentType.DOCX,
        DocumentType.XLSX,
        DocumentType.PPTX,
        DocumentType.HTML,
    }
)


def extract_text(result: Any) -> str:
    """Return the first non-empty text field of *result*, else its JSON dump."""
    if isinstance(result, dict):
        for key in TEXT_FIELD_PRIORITY:
            value = result.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return json.dumps(result, ensure_ascii=False)


class KolosalFastParser(IDocumentParser):
    """Fastest extraction mode of the kolosal server.  Metadata is always empty."""

    def __init__(self, client: KolosalServerClient) -> None:
        self._client = client

    async def parse(
        self,
        source: DocumentSource,
        document_type: DocumentType,
    ) -> ParsedDocument:
        if source.data is None:
            raise ParseFailedError(
                message="Fast parse needs file bytes",
                provider_name=self.get_provider_name(),
            )
        encoded = base64.b64encode(source.data).decode("ascii")
        result = await self._client.parse_document(document_type.value, encoded)

        text = extract_text(result)
        logger.info(
            "kolosal_fast_parse_complete",
            filename=source.filename,
            document_type=document_type.value,
            characters=len(text),
        )
        return ParsedDocument(filename=source.filename, text=text, metadata={})

    async def health(self) -> dict[str, Any]:
        return await self._client.status()

    def supported_types(self) -> frozenset[DocumentType]:
        return _SUPPORTED

    def get_parser_type(self) -> ParserType:
        return ParserType.FAST_PARSE

    def get_provider_name(self) -> str:
        return "kolosal"
