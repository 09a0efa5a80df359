"""Pydantic request/response schemas for the console API.

Request schemas end with ``Request`` and response schemas with
``Response``.  Proxy endpoints whose upstream payload is loosely typed
return plain dicts instead of a schema.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from kolosal_console.models.ingestion import (
    Chunk,
    ChunkingMethod,
    DocumentType,
    IngestionPhase,
    IngestionRun,
    ParsedDocument,
    ParserType,
)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    retryable: bool = False


class HealthResponse(BaseModel):
    """Console liveness response."""

    status: str
    version: str


# ---------------------------------------------------------------------------
# Document proxy
# ---------------------------------------------------------------------------


class DocumentIdsRequest(BaseModel):
    """Body for ``/documents/info`` and ``/documents/delete``."""

    document_ids: list[str]


class AddDocumentsRequest(BaseModel):
    """Body for ``/add-documents``: ``{text, metadata}`` pairs."""

    documents: list[dict[str, Any]] = Field(min_length=1)


class RetrieveRequest(BaseModel):
    """Similarity search query.  Zero or missing values use the server defaults."""

    query: str = Field(min_length=1)
    limit: int | None = Field(default=None, ge=0)
    score_threshold: float | None = None


class RepositoryEngineRequest(BaseModel):
    """Register a model fetched from a hub repository such as ``Qwen/Qwen3-0.6B``."""

    repo_id: str = Field(min_length=1)
    model_path: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Stateless parse / chunk
# ---------------------------------------------------------------------------


class ParseResponse(BaseModel):
    """Normalised parser output."""

    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    filename: str = ""

    @classmethod
    def from_document(cls, document: ParsedDocument) -> ParseResponse:
        return cls(text=document.text, metadata=document.metadata, filename=document.filename)


class ChunkRequest(BaseModel):
    """Split *text* with the remote chunker."""

    text: str = Field(min_length=1)
    method: ChunkingMethod = ChunkingMethod.REGULAR
    similarity_threshold: float | None = None


class ChunkResponse(BaseModel):
    """Ordered text spans returned by the chunker."""

    chunks: list[str]


# ---------------------------------------------------------------------------
# Ingestion sessions
# ---------------------------------------------------------------------------


class IngestionConfigRequest(BaseModel):
    """Choices for one run; omitted fields keep their current value."""

    document_type: DocumentType | None = None
    parser_type: ParserType | None = None
    chunking_method: ChunkingMethod | None = None
    similarity_threshold: float | None = None


class ChunkEditRequest(BaseModel):
    """Edited chunk content.  ``metadata`` may be a JSON object or its text."""

    text: str
    metadata: str | dict[str, Any] = Field(default_factory=dict)


class IngestionRunResponse(BaseModel):
    """Serialisable view of an ingestion run (the raw upload is omitted)."""

    run_id: str
    phase: IngestionPhase
    document_type: DocumentType | None = None
    parser_type: ParserType | None = None
    chunking_method: ChunkingMethod | None = None
    similarity_threshold: float
    has_source: bool = False
    parsed_document: ParsedDocument | None = None
    chunks: list[Chunk] = Field(default_factory=list)
    last_error: str | None = None
    updated_at: datetime

    @classmethod
    def from_run(cls, run: IngestionRun) -> IngestionRunResponse:
        return cls(
            run_id=run.run_id,
            phase=run.phase,
            document_type=run.document_type,
            parser_type=run.parser_type,
            chunking_method=run.chunking_method,
            similarity_threshold=run.similarity_threshold,
            has_source=run.source is not None,
            parsed_document=run.parsed_document,
            chunks=list(run.chunks),
            last_error=run.last_error,
            updated_at=run.updated_at,
        )


class CommitResponse(BaseModel):
    """Result of a successful commit; ``run`` is the reset IDLE run."""

    success: bool = True
    documents_added: int
    message: str
    run: IngestionRunResponse
