"""Kolosal console domain models: re-exports all public model classes.

The models are organized across four submodules by concern:
    - documents.py  - Document browser pages and retrieval results
    - engines.py    - Inference engine registration payloads
    - ingestion.py  - Ingestion run state (choices, parsed document, chunks)
    - status.py     - Aggregated service status for the dashboard
"""

from __future__ import annotations

from kolosal_console.models.documents import (
    DOCUMENTS_PER_PAGE,
    DocumentPage,
    RetrievalResult,
    page_bounds,
    page_document_ids,
)
from kolosal_console.models.engines import (
    AddEngineRequest,
    LoadingParameters,
    ModelType,
    engine_id_from_repo,
    infer_model_type,
)
from kolosal_console.models.ingestion import (
    Chunk,
    ChunkingMethod,
    DocumentSource,
    DocumentType,
    IngestionPhase,
    IngestionRun,
    ParsedDocument,
    ParserType,
)
from kolosal_console.models.status import (
    UNAVAILABLE,
    DashboardStatus,
    DocumentsSummary,
    InferenceStatus,
    ServiceStatus,
)

__all__ = [
    "DOCUMENTS_PER_PAGE",
    "UNAVAILABLE",
    "AddEngineRequest",
    "Chunk",
    "ChunkingMethod",
    "DashboardStatus",
    "DocumentPage",
    "DocumentSource",
    "DocumentType",
    "DocumentsSummary",
    "InferenceStatus",
    "IngestionPhase",
    "IngestionRun",
    "LoadingParameters",
    "ModelType",
    "ParsedDocument",
    "ParserType",
    "RetrievalResult",
    "ServiceStatus",
    "engine_id_from_repo",
    "infer_model_type",
    "page_bounds",
    "page_document_ids",
]
