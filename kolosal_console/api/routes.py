"""FastAPI routes for the Kolosal console.

Two groups of endpoints live here.  The proxy endpoints forward one call
to the kolosal server or a parser service and hand back its answer.  The
``/ingest/sessions`` endpoints drive an :class:`IngestionRun` through
parse, chunk, review and commit, one command per request.

Route map (all under ``/api``)::

    GET     /status                                  dashboard status
    GET     /documents/list                          list document ids
    POST    /documents/info                          document records
    DELETE  /documents/delete                        remove documents
    GET     /documents/page                          one page of records
    POST    /add-documents                           add documents
    POST    /parse                                   parse an upload
    POST    /chunk                                   chunk text
    POST    /retrieve                                similarity search
    GET     /engines                                 list engines
    POST    /engines                                 add an engine
    POST    /engines/repository                      add an engine from a repo id
    DELETE  /engines/{engine_id}                     remove an engine
    POST    /ingest/sessions                         open a run
    GET     /ingest/sessions/{sid}                   current run
    PUT     /ingest/sessions/{sid}/config            choose options
    POST    /ingest/sessions/{sid}/parse             parse
    POST    /ingest/sessions/{sid}/chunk             chunk
    POST    /ingest/sessions/{sid}/chunks/{cid}/edit     begin edit
    PUT     /ingest/sessions/{sid}/chunks/{cid}          save edit
    POST    /ingest/sessions/{sid}/chunks/{cid}/cancel   cancel edit
    DELETE  /ingest/sessions/{sid}/chunks/{cid}          delete chunk
    POST    /ingest/sessions/{sid}/commit            commit
    DELETE  /ingest/sessions/{sid}                   discard run
    GET     /health                                  console liveness

Domain errors are not caught here; ``ErrorHandlingMiddleware`` turns
them into ``ErrorResponse`` bodies.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, UploadFile

from kolosal_console.api.schemas import (
    AddDocumentsRequest,
    ChunkEditRequest,
    ChunkRequest,
    ChunkResponse,
    CommitResponse,
    DocumentIdsRequest,
    ErrorResponse,
    HealthResponse,
    IngestionConfigRequest,
    IngestionRunResponse,
    ParseResponse,
    RepositoryEngineRequest,
    RetrieveRequest,
)
from kolosal_console.models.documents import DOCUMENTS_PER_PAGE, DocumentPage, RetrievalResult
from kolosal_console.models.engines import AddEngineRequest
from kolosal_console.models.ingestion import DocumentSource
from kolosal_console.models.status import DashboardStatus, InferenceStatus
from kolosal_console.pipeline.ingestion_pipeline import IngestionPipeline
from kolosal_console.services.chunker import ChunkerService
from kolosal_console.services.document_service import DocumentService
from kolosal_console.services.engine_service import EngineService
from kolosal_console.services.parser_dispatcher import ParserDispatcher
from kolosal_console.services.retrieval_service import RetrievalService
from kolosal_console.services.status_service import StatusService
from kolosal_console.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")

APP_VERSION = "0.1.0"

_ERRORS: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}
_SESSION_ERRORS: dict[int | str, dict[str, Any]] = {
    **_ERRORS,
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Dependency injection helpers (singletons on app.state, set in main.py)
# ---------------------------------------------------------------------------


def _get_status_service(request: Request) -> StatusService:
    return request.app.state.status_service


def _get_document_service(request: Request) -> DocumentService:
    return request.app.state.document_service


def _get_retrieval_service(request: Request) -> RetrievalService:
    return request.app.state.retrieval_service


def _get_engine_service(request: Request) -> EngineService:
    return request.app.state.engine_service


def _get_dispatcher(request: Request) -> ParserDispatcher:
    return request.app.state.dispatcher


def _get_chunker(request: Request) -> ChunkerService:
    return request.app.state.chunker


def _get_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.pipeline


StatusServiceDep = Annotated[StatusService, Depends(_get_status_service)]
DocumentServiceDep = Annotated[DocumentService, Depends(_get_document_service)]
RetrievalServiceDep = Annotated[RetrievalService, Depends(_get_retrieval_service)]
EngineServiceDep = Annotated[EngineService, Depends(_get_engine_service)]
DispatcherDep = Annotated[ParserDispatcher, Depends(_get_dispatcher)]
ChunkerDep = Annotated[ChunkerService, Depends(_get_chunker)]
PipelineDep = Annotated[IngestionPipeline, Depends(_get_pipeline)]


async def _read_source(file: UploadFile | None, text: str | None) -> DocumentSource | None:
    """Build a :class:`DocumentSource` from a multipart upload or form text."""
    if file is not None:
        data = await file.read()
        return DocumentSource(
            filename=file.filename or "",
            data=data,
            content_type=file.content_type or "application/octet-stream",
        )
    if text is not None:
        return DocumentSource(text=text, content_type="text/plain")
    return None


# ---------------------------------------------------------------------------
# Health & status
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Console liveness check")
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=APP_VERSION)


@router.get(
    "/status",
    response_model=DashboardStatus,
    summary="Status of the kolosal server, parsers and document store",
)
async def dashboard_status(status_service: StatusServiceDep) -> DashboardStatus:
    """Every upstream is checked concurrently; unreachable ones read ``unavailable``."""
    return await status_service.fetch_all()


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.get("/documents/list", responses=_ERRORS, summary="List stored document ids")
async def list_documents(documents: DocumentServiceDep) -> dict[str, Any]:
    return await documents.list_documents()


@router.get(
    "/documents/page",
    response_model=DocumentPage,
    responses=_ERRORS,
    summary="One page of stored documents",
)
async def document_page(
    documents: DocumentServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = DOCUMENTS_PER_PAGE,
) -> DocumentPage:
    return await documents.get_page(page, page_size)


@router.post("/documents/info", responses=_ERRORS, summary="Fetch document records by id")
async def info_documents(body: DocumentIdsRequest, documents: DocumentServiceDep) -> dict[str, Any]:
    return await documents.info_documents(body.document_ids)


@router.delete("/documents/delete", responses=_ERRORS, summary="Remove documents by id")
async def delete_documents(
    body: DocumentIdsRequest, documents: DocumentServiceDep
) -> dict[str, Any]:
    if not body.document_ids:
        raise HTTPException(status_code=400, detail="document_ids must not be empty")
    return await documents.remove_documents(body.document_ids)


@router.post("/add-documents", responses=_ERRORS, summary="Add documents to the store")
async def add_documents(body: AddDocumentsRequest, documents: DocumentServiceDep) -> dict[str, Any]:
    return await documents.add_documents(body.documents)


# ---------------------------------------------------------------------------
# Stateless parse / chunk / retrieve
# ---------------------------------------------------------------------------


@router.post(
    "/parse",
    response_model=ParseResponse,
    responses={**_ERRORS, 503: {"model": ErrorResponse}},
    summary="Parse an uploaded document with the chosen backend",
)
async def parse_document(
    dispatcher: DispatcherDep,
    document_type: Annotated[str, Form(alias="documentType")],
    parser_type: Annotated[str, Form(alias="parserType")] = "",
    file: UploadFile | None = None,
    text: Annotated[str | None, Form()] = None,
) -> ParseResponse:
    source = await _read_source(file, text) or DocumentSource()
    parsed = await dispatcher.dispatch(source, document_type, parser_type)
    return ParseResponse.from_document(parsed)


@router.post(
    "/chunk",
    response_model=ChunkResponse,
    responses=_ERRORS,
    summary="Split text with the remote chunker",
)
async def chunk_text(body: ChunkRequest, chunker: ChunkerDep) -> ChunkResponse:
    spans = await chunker.split(body.text, body.method, body.similarity_threshold)
    return ChunkResponse(chunks=spans)


@router.post(
    "/retrieve",
    response_model=RetrievalResult,
    responses=_ERRORS,
    summary="Similarity search over stored documents",
)
async def retrieve(body: RetrieveRequest, retrieval: RetrievalServiceDep) -> RetrievalResult:
    try:
        return await retrieval.retrieve(body.query, body.limit, body.score_threshold)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------


@router.get(
    "/engines",
    response_model=InferenceStatus,
    responses=_ERRORS,
    summary="List inference engines",
)
async def list_engines(engines: EngineServiceDep) -> InferenceStatus:
    return await engines.list_engines()


@router.post("/engines", responses=_ERRORS, summary="Register an inference engine")
async def add_engine(body: AddEngineRequest, engines: EngineServiceDep) -> dict[str, Any]:
    return await engines.add_engine(body)


@router.post(
    "/engines/repository",
    responses=_ERRORS,
    summary="Register an engine from a hub repository id",
)
async def add_engine_from_repository(
    body: RepositoryEngineRequest, engines: EngineServiceDep
) -> dict[str, Any]:
    """Engine id and model type are derived from ``repo_id`` and ``tags``."""
    return await engines.add_from_repository(body.repo_id, body.model_path, body.tags)


@router.delete("/engines/{engine_id}", responses=_ERRORS, summary="Remove an inference engine")
async def remove_engine(engine_id: str, engines: EngineServiceDep) -> dict[str, Any]:
    return await engines.remove_engine(engine_id)


# ---------------------------------------------------------------------------
# Ingestion sessions
# ---------------------------------------------------------------------------


@router.post(
    "/ingest/sessions",
    response_model=IngestionRunResponse,
    status_code=201,
    summary="Open an ingestion run",
)
async def open_session(pipeline: PipelineDep) -> IngestionRunResponse:
    return IngestionRunResponse.from_run(pipeline.new_run())


@router.get(
    "/ingest/sessions/{session_id}",
    response_model=IngestionRunResponse,
    responses=_SESSION_ERRORS,
    summary="Current state of an ingestion run",
)
async def get_session(session_id: str, pipeline: PipelineDep) -> IngestionRunResponse:
    return IngestionRunResponse.from_run(pipeline.sessions.get(session_id))


@router.put(
    "/ingest/sessions/{session_id}/config",
    response_model=IngestionRunResponse,
    responses=_SESSION_ERRORS,
    summary="Choose document type, parser and chunking options",
)
async def configure_session(
    session_id: str, body: IngestionConfigRequest, pipeline: PipelineDep
) -> IngestionRunResponse:
    run = pipeline.configure(
        pipeline.sessions.get(session_id),
        document_type=body.document_type,
        parser_type=body.parser_type,
        chunking_method=body.chunking_method,
        similarity_threshold=body.similarity_threshold,
    )
    return IngestionRunResponse.from_run(run)


@router.post(
    "/ingest/sessions/{session_id}/parse",
    response_model=IngestionRunResponse,
    responses={**_SESSION_ERRORS, 503: {"model": ErrorResponse}},
    summary="Parse the run's document",
)
async def parse_session(
    session_id: str,
    pipeline: PipelineDep,
    file: UploadFile | None = None,
    text: Annotated[str | None, Form()] = None,
) -> IngestionRunResponse:
    """Parse a new upload or text, or re-parse the stored one when neither is sent."""
    source = await _read_source(file, text)
    run = await pipeline.parse(pipeline.sessions.get(session_id), source)
    return IngestionRunResponse.from_run(run)


@router.post(
    "/ingest/sessions/{session_id}/chunk",
    response_model=IngestionRunResponse,
    responses=_SESSION_ERRORS,
    summary="Chunk the parsed document",
)
async def chunk_session(session_id: str, pipeline: PipelineDep) -> IngestionRunResponse:
    run = await pipeline.chunk(pipeline.sessions.get(session_id))
    return IngestionRunResponse.from_run(run)


@router.post(
    "/ingest/sessions/{session_id}/chunks/{chunk_id}/edit",
    response_model=IngestionRunResponse,
    responses=_SESSION_ERRORS,
    summary="Put a chunk into edit mode",
)
async def begin_chunk_edit(
    session_id: str, chunk_id: str, pipeline: PipelineDep
) -> IngestionRunResponse:
    run = pipeline.begin_edit(pipeline.sessions.get(session_id), chunk_id)
    return IngestionRunResponse.from_run(run)


@router.put(
    "/ingest/sessions/{session_id}/chunks/{chunk_id}",
    response_model=IngestionRunResponse,
    responses=_SESSION_ERRORS,
    summary="Save an edited chunk",
)
async def save_chunk_edit(
    session_id: str, chunk_id: str, body: ChunkEditRequest, pipeline: PipelineDep
) -> IngestionRunResponse:
    run = pipeline.save_edit(
        pipeline.sessions.get(session_id), chunk_id, body.text, body.metadata
    )
    return IngestionRunResponse.from_run(run)


@router.post(
    "/ingest/sessions/{session_id}/chunks/{chunk_id}/cancel",
    response_model=IngestionRunResponse,
    responses=_SESSION_ERRORS,
    summary="Leave edit mode without saving",
)
async def cancel_chunk_edit(
    session_id: str, chunk_id: str, pipeline: PipelineDep
) -> IngestionRunResponse:
    run = pipeline.cancel_edit(pipeline.sessions.get(session_id), chunk_id)
    return IngestionRunResponse.from_run(run)


@router.delete(
    "/ingest/sessions/{session_id}/chunks/{chunk_id}",
    response_model=IngestionRunResponse,
    responses=_SESSION_ERRORS,
    summary="Remove a staged chunk",
)
async def delete_chunk(
    session_id: str, chunk_id: str, pipeline: PipelineDep
) -> IngestionRunResponse:
    run = pipeline.delete_chunk(pipeline.sessions.get(session_id), chunk_id)
    return IngestionRunResponse.from_run(run)


@router.post(
    "/ingest/sessions/{session_id}/commit",
    response_model=CommitResponse,
    responses=_SESSION_ERRORS,
    summary="Add every staged chunk to the document store",
)
async def commit_session(session_id: str, pipeline: PipelineDep) -> CommitResponse:
    run, count = await pipeline.commit(pipeline.sessions.get(session_id))
    return CommitResponse(
        documents_added=count,
        message=f"Successfully added {count} document(s)",
        run=IngestionRunResponse.from_run(run),
    )


@router.delete(
    "/ingest/sessions/{session_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
    summary="Discard an ingestion run",
)
async def discard_session(session_id: str, pipeline: PipelineDep) -> None:
    pipeline.discard(session_id)
    _logger.info("ingestion_session_closed", session_id=session_id)
