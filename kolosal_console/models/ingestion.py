"""Ingestion run models for the parse → chunk → review → commit pipeline.

Defines Pydantic v2 models for the choices a user makes, the parsed
document, the staged chunks, and the run that ties them together.  All
models use frozen config to enforce immutability; state transitions
produce new IngestionRun instances via model_copy(update={...}).

Architecture note:
    IngestionRun is the single source of truth for one ingestion attempt.
    The pipeline (kolosal_console/pipeline/ingestion_pipeline.py) receives
    a run, performs one command, and returns a new run.  The session
    registry keeps the latest run per session id in memory only; runs are
    never written anywhere.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentType(str, Enum):  # noqa: UP042
    """Kinds of input the ingestion wizard accepts."""

    PDF = "pdf"
    DOCX = "docx"
    XLSX = "xlsx"
    PPTX = "pptx"
    HTML = "html"
    TEXT = "text"


class ParserType(str, Enum):  # noqa: UP042
    """Parser backends.

    ``NONE`` is only meaningful for literal text, which is never sent to
    a parser.  The service names used by older dashboard builds
    (``kolosal``, ``markitdown``, ``docling``) are accepted as aliases.
    """

    FAST_PARSE = "fast-parse"
    MARKDOWN_CONVERSION = "markdown-conversion"
    OCR_CONVERSION = "ocr-conversion"
    NONE = "none"

    @classmethod
    def _missing_(cls, value: object) -> ParserType | None:
        aliases = {
            "kolosal": cls.FAST_PARSE,
            "markitdown": cls.MARKDOWN_CONVERSION,
            "docling": cls.OCR_CONVERSION,
        }
        if isinstance(value, str):
            return aliases.get(value.strip().lower())
        return None


class ChunkingMethod(str, Enum):  # noqa: UP042
    """Chunking strategies understood by the kolosal ``/chunking`` endpoint."""

    REGULAR = "regular"
    SEMANTIC = "semantic"
    NONE = "none"


class IngestionPhase(str, Enum):  # noqa: UP042
    """Phases of one ingestion run.

    IDLE → CONFIGURING → PARSING → PARSED → CHUNKING → REVIEWING →
    COMMITTING → IDLE (success) | REVIEWING (failure)

    PARSING, CHUNKING and COMMITTING are the only phases with a request
    in flight.
    """

    IDLE = "IDLE"
    CONFIGURING = "CONFIGURING"
    PARSING = "PARSING"
    PARSED = "PARSED"
    CHUNKING = "CHUNKING"
    REVIEWING = "REVIEWING"
    COMMITTING = "COMMITTING"


IN_FLIGHT_PHASES = frozenset(
    {IngestionPhase.PARSING, IngestionPhase.CHUNKING, IngestionPhase.COMMITTING}
)


class DocumentSource(BaseModel):
    """Raw input for one run: uploaded bytes or literal text."""

    model_config = ConfigDict(frozen=True)

    filename: str = ""
    data: bytes | None = None
    text: str | None = None
    content_type: str = "application/octet-stream"


class ParsedDocument(BaseModel):
    """Normalised parser output, regardless of which backend produced it."""

    model_config = ConfigDict(frozen=True)

    filename: str = ""
    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class Chunk(BaseModel):
    """A staged text segment awaiting review and commit.

    ``id`` is a local sequence token (``"1"`` or ``"chunk-N"``), never a
    server-assigned identifier.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    editing: bool = False

    def to_document(self) -> dict[str, Any]:
        """Return the ``{text, metadata}`` pair sent to ``/add_documents``."""
        return {"text": self.text, "metadata": dict(self.metadata)}


class IngestionRun(BaseModel):
    """The complete state of one ingestion attempt.

    Immutable: use model_copy(update={...}) to produce new states.
    ``source`` keeps the raw upload so a failed parse can be retried
    without re-uploading; it is excluded from serialised output.
    """

    model_config = ConfigDict(frozen=True)

    run_id: str
    phase: IngestionPhase = IngestionPhase.IDLE
    document_type: DocumentType | None = None
    parser_type: ParserType | None = None
    chunking_method: ChunkingMethod | None = None
    # Forwarded as-is to the chunker; values outside [0, 1] are not clamped.
    similarity_threshold: float = 0.6
    source: DocumentSource | None = Field(default=None, exclude=True)
    parsed_document: ParsedDocument | None = None
    chunks: list[Chunk] = Field(default_factory=list)
    last_error: str | None = None
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )

    @property
    def in_flight(self) -> bool:
        return self.phase in IN_FLIGHT_PHASES
