"""Abstract base class for document parser backends.

Defines the contract for converting an uploaded document into plain text
or markdown.  There is one adapter per backend (kolosal fast parse, markitdown and
docling OCR), and the parser dispatcher picks one per ingestion run.  Each adapter hides its
backend's response shape behind :class:`ParsedDocument`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from kolosal_console.models.ingestion import (
    DocumentSource,
    DocumentType,
    ParsedDocument,
    ParserType,
)


# Concrete implementations live in kolosal_console/providers/parser/.
class IDocumentParser(ABC):
    """Contract for services that turn raw document bytes into text."""

    @abstractmethod
    async def parse(
        self,
        source: DocumentSource,
        document_type: DocumentType,
    ) -> ParsedDocument:
        """Parse *source* as a document of *document_type*.

        Parameters
        ----------
        source:
            The uploaded bytes and original filename.
        document_type:
            The type the user selected; decides which remote endpoint is used.

        Returns
        -------
        ParsedDocument
            Normalised ``{filename, text, metadata}``; ``text`` is never ``None``.

        Raises
        ------
        kolosal_console.utils.errors.ParseFailedError
            If the backend is unreachable or answers with a non-2xx status.
        kolosal_console.utils.errors.ParseNotReadyError
            If the backend accepted the file but has not finished converting it.
        """

    @abstractmethod
    async def health(self) -> dict[str, Any]:
        """Return the backend's health payload.

        Raises
        ------
        kolosal_console.utils.errors.RemoteUnavailableError
            If the backend cannot be reached or reports an error status.
        """

    @abstractmethod
    def supported_types(self) -> frozenset[DocumentType]:
        """Return the document types this backend can parse."""

    @abstractmethod
    def get_parser_type(self) -> ParserType:
        """Return the parser identifier users select for this backend."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs and error messages.

        Example return values: ``"kolosal"``, ``"markitdown"``, ``"docling"``.
        """

    def supports(self, document_type: DocumentType) -> bool:
        return document_type in self.supported_types()
