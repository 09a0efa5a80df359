"""Parser dispatcher: picks a parser backend and normalises its output.

Given a document source, the user's document type and parser choice, the
dispatcher either short-circuits (literal text needs no parsing) or hands
the upload to the matching :class:`IDocumentParser`.  Unsupported
combinations fail fast with :class:`UnsupportedParserError` before any
network traffic.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from kolosal_console.interfaces.document_parser import IDocumentParser
from kolosal_console.models.ingestion import (
    DocumentSource,
    DocumentType,
    ParsedDocument,
    ParserType,
)
from kolosal_console.utils.errors import IngestionConfigError, UnsupportedParserError
from kolosal_console.utils.logging import get_logger


def coerce_document_type(value: DocumentType | str | None) -> DocumentType:
    """Convert user input to :class:`DocumentType`, rejecting blanks and unknowns."""
    if value is None or value == "":
        raise IngestionConfigError(message="Please select a document type")
    try:
        return DocumentType(value)
    except ValueError as exc:
        raise UnsupportedParserError(message=f"Unsupported document type: {value}") from exc


def coerce_parser_type(value: ParserType | str | None) -> ParserType:
    """Convert user input to :class:`ParserType`, rejecting blanks and unknowns."""
    if value is None or value == "":
        raise IngestionConfigError(message="Please select a parser")
    try:
        return ParserType(value)
    except ValueError as exc:
        raise UnsupportedParserError(message=f"Unsupported parser type: {value}") from exc


def text_document(source: DocumentSource) -> ParsedDocument:
    """Wrap literal text as a parsed document with ``{type, length}`` metadata."""
    if source.text is not None:
        text = source.text
    elif source.data is not None:
        text = source.data.decode("utf-8", errors="replace")
    else:
        text = ""
    if not text.strip():
        raise IngestionConfigError(message="Please enter text content")
    return ParsedDocument(
        filename=source.filename,
        text=text,
        metadata={"type": "text", "length": len(text)},
    )


class ParserDispatcher:
    """Routes a parse request to one of the registered parser backends."""

    def __init__(self, parsers: Iterable[IDocumentParser]) -> None:
        self._parsers: dict[ParserType, IDocumentParser] = {
            parser.get_parser_type(): parser for parser in parsers
        }
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def parsers(self) -> dict[ParserType, IDocumentParser]:
        return dict(self._parsers)

    def resolve(
        self,
        document_type: DocumentType | str | None,
        parser_type: ParserType | str | None,
    ) -> IDocumentParser | None:
        """Return the backend for this combination, or ``None`` for literal text.

        Raises
        ------
        UnsupportedParserError
            Unknown parser, parser not registered, or parser that cannot
            handle *document_type*.
        IngestionConfigError
            Document type or parser not chosen.
        """
        doc_type = coerce_document_type(document_type)
        if doc_type is DocumentType.TEXT:
            return None

        parser_id = coerce_parser_type(parser_type)
        if parser_id is ParserType.NONE:
            raise UnsupportedParserError(
                message=f"A parser is required for {doc_type.value} documents"
            )
        parser = self._parsers.get(parser_id)
        if parser is None:
            raise UnsupportedParserError(message=f"Parser {parser_id.value} is not available")
        if not parser.supports(doc_type):
            raise UnsupportedParserError(
                message=f"Parser {parser_id.value} cannot parse {doc_type.value} documents",
                provider_name=parser.get_provider_name(),
            )
        return parser

    async def dispatch(
        self,
        source: DocumentSource,
        document_type: DocumentType | str | None,
        parser_type: ParserType | str | None,
    ) -> ParsedDocument:
        """Parse *source* and return a normalised :class:`ParsedDocument`.

        Literal text is returned as-is without a network call.  Every other
        type is sent to the resolved backend; backend errors propagate as
        ``ParseFailedError`` / ``ParseNotReadyError``.
        """
        doc_type = coerce_document_type(document_type)
        parser = self.resolve(doc_type, parser_type)

        if parser is None:
            parsed = text_document(source)
            self._logger.info("text_document_accepted", length=len(parsed.text))
            return parsed

        if source.data is None:
            raise IngestionConfigError(message="Please select a file")

        self._logger.info(
            "parse_started",
            parser=parser.get_provider_name(),
            document_type=doc_type.value,
            filename=source.filename,
            size=len(source.data),
        )
        parsed = await parser.parse(source, doc_type)
        if not parsed.filename:
            parsed = parsed.model_copy(update={"filename": source.filename})
        return parsed
