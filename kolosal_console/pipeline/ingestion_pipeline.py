"""Orchestrator for the parse → chunk → review → commit ingestion flow.

Each command takes the current :class:`IngestionRun`, performs one step
and returns a new run built with ``model_copy(update={...})``.  Every
transition is written to the session store, including the in-flight
phases, so a second command for the same run while a request is
outstanding sees PARSING/CHUNKING/COMMITTING and is rejected.

Phase flow::

    IDLE → CONFIGURING → PARSING → PARSED → CHUNKING → REVIEWING
         → COMMITTING → IDLE (success) | REVIEWING (failure)

Failures do not lose work: a failed parse returns to CONFIGURING with the
upload kept so the same request can be re-issued; a failed chunk returns
to PARSED; a failed commit returns to REVIEWING with every chunk intact.
The error message is recorded on ``last_error`` before re-raising.
A cancelled request or an unexpected exception takes the same way back,
so a run is never left stuck in an in-flight phase.  A run discarded
while its request was outstanding is not written back to the store.
"""

from __future__ import annotations

import uuid
from collections.abc import Collection
from datetime import datetime, timezone
from typing import Any

import structlog

from kolosal_console.models.ingestion import (
    ChunkingMethod,
    DocumentSource,
    DocumentType,
    IngestionPhase,
    IngestionRun,
    ParserType,
)
from kolosal_console.pipeline.session_store import IngestionSessionStore
from kolosal_console.services import chunk_staging
from kolosal_console.services.chunker import (
    DEFAULT_SIMILARITY_THRESHOLD,
    ChunkerService,
    coerce_chunking_method,
)
from kolosal_console.services.document_committer import DocumentCommitter
from kolosal_console.services.parser_dispatcher import (
    ParserDispatcher,
    coerce_document_type,
    coerce_parser_type,
)
from kolosal_console.utils.errors import (
    IngestionStateError,
    InvalidMetadataError,
    KolosalConsoleError,
)
from kolosal_console.utils.logging import get_logger

_CONFIGURABLE = frozenset(
    {
        IngestionPhase.IDLE,
        IngestionPhase.CONFIGURING,
        IngestionPhase.PARSED,
        IngestionPhase.REVIEWING,
    }
)
_PARSEABLE = frozenset({IngestionPhase.CONFIGURING, IngestionPhase.PARSED})
_CHUNKABLE = frozenset({IngestionPhase.PARSED, IngestionPhase.REVIEWING})
_REVIEWING = frozenset({IngestionPhase.REVIEWING})

_INTERRUPTED = "{step} was interrupted before it finished; try again"


class IngestionPipeline:
    """Drives one ingestion run at a time through its phases.

    Parameters
    ----------
    dispatcher:
        Routes the parse step to the configured backend.
    chunker:
        Splits the parsed text into staged chunks.
    committer:
        Sends the reviewed chunks to ``/add_documents``.
    session_store:
        Registry that receives every new run state.  A private in-memory
        store is created when omitted.
    default_similarity_threshold:
        Threshold given to new runs for semantic chunking.
    """

    def __init__(
        self,
        dispatcher: ParserDispatcher,
        chunker: ChunkerService,
        committer: DocumentCommitter,
        session_store: IngestionSessionStore | None = None,
        default_similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> None:
        self._dispatcher = dispatcher
        self._chunker = chunker
        self._committer = committer
        self._sessions = session_store if session_store is not None else IngestionSessionStore()
        self._default_threshold = default_similarity_threshold
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def sessions(self) -> IngestionSessionStore:
        return self._sessions

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def new_run(self) -> IngestionRun:
        """Open a fresh IDLE run and register it."""
        run = IngestionRun(
            run_id=uuid.uuid4().hex,
            similarity_threshold=self._default_threshold,
        )
        self._sessions.save(run)
        self._logger.info("ingestion_run_created", run_id=run.run_id)
        return run

    def discard(self, run_id: str) -> None:
        self._sessions.discard(run_id)

    def configure(
        self,
        run: IngestionRun,
        *,
        document_type: DocumentType | str | None = None,
        parser_type: ParserType | str | None = None,
        chunking_method: ChunkingMethod | str | None = None,
        similarity_threshold: float | None = None,
        source: DocumentSource | None = None,
    ) -> IngestionRun:
        """Record the user's choices; arguments left as ``None`` keep their value.

        Changing the document type, parser or input throws away the parse
        result and any chunks.  Changing only the chunking method or
        threshold keeps the parse and drops back to PARSED.
        """
        self._require_phase(run, _CONFIGURABLE, "configure")

        update: dict[str, Any] = {}
        if document_type is not None:
            update["document_type"] = coerce_document_type(document_type)
        if parser_type is not None:
            update["parser_type"] = coerce_parser_type(parser_type)
        if chunking_method is not None:
            update["chunking_method"] = coerce_chunking_method(chunking_method)
        if similarity_threshold is not None:
            update["similarity_threshold"] = similarity_threshold
        if source is not None:
            update["source"] = source

        parse_inputs_changed = any(
            key in update and update[key] != getattr(run, key)
            for key in ("document_type", "parser_type", "source")
        )
        chunk_inputs_changed = any(
            key in update and update[key] != getattr(run, key)
            for key in ("chunking_method", "similarity_threshold")
        )

        if parse_inputs_changed or run.parsed_document is None:
            update.update(
                phase=IngestionPhase.CONFIGURING,
                parsed_document=None,
                chunks=[],
            )
        elif chunk_inputs_changed:
            update.update(phase=IngestionPhase.PARSED, chunks=[])

        update["last_error"] = None
        configured = self._transition(run, **update)
        self._logger.info(
            "ingestion_run_configured",
            run_id=run.run_id,
            phase=configured.phase.value,
            document_type=_value(configured.document_type),
            parser_type=_value(configured.parser_type),
            chunking_method=_value(configured.chunking_method),
        )
        return configured

    # ------------------------------------------------------------------
    # Parse / chunk
    # ------------------------------------------------------------------

    async def parse(self, run: IngestionRun, source: DocumentSource | None = None) -> IngestionRun:
        """Parse the run's input and move to PARSED.

        When *source* is given it replaces the stored input.  Without it
        the stored input is parsed again, which is how a failed or
        not-ready parse is retried.
        """
        self._require_phase(run, _PARSEABLE, "parse")
        if source is not None:
            run = run.model_copy(update={"source": source})

        parsing = self._transition(
            run,
            phase=IngestionPhase.PARSING,
            parsed_document=None,
            chunks=[],
            last_error=None,
        )
        try:
            parsed = await self._dispatcher.dispatch(
                parsing.source or DocumentSource(),
                parsing.document_type,
                parsing.parser_type,
            )
        except KolosalConsoleError as exc:
            self._logger.warning(
                "ingestion_parse_failed",
                run_id=run.run_id,
                error=exc.message,
                retryable=exc.retryable,
            )
            self._recover(parsing, IngestionPhase.CONFIGURING, exc.message)
            raise
        except BaseException:
            self._logger.warning("ingestion_parse_interrupted", run_id=run.run_id)
            self._recover(parsing, IngestionPhase.CONFIGURING, _INTERRUPTED.format(step="Parse"))
            raise

        self._logger.info(
            "ingestion_parse_complete",
            run_id=run.run_id,
            filename=parsed.filename,
            characters=len(parsed.text),
        )
        return self._transition(parsing, phase=IngestionPhase.PARSED, parsed_document=parsed)

    async def chunk(self, run: IngestionRun) -> IngestionRun:
        """Chunk the parsed text and move to REVIEWING.

        Re-chunking from REVIEWING replaces the staged chunks, edits
        included.
        """
        self._require_phase(run, _CHUNKABLE, "chunk")
        if run.parsed_document is None:
            raise IngestionStateError(message="Parse a document before chunking")

        chunking = self._transition(
            run, phase=IngestionPhase.CHUNKING, chunks=[], last_error=None
        )
        try:
            chunks = await self._chunker.chunk(
                run.parsed_document,
                run.chunking_method,
                run.similarity_threshold,
            )
        except KolosalConsoleError as exc:
            self._logger.warning("ingestion_chunk_failed", run_id=run.run_id, error=exc.message)
            self._recover(chunking, IngestionPhase.PARSED, exc.message)
            raise
        except BaseException:
            self._logger.warning("ingestion_chunk_interrupted", run_id=run.run_id)
            self._recover(chunking, IngestionPhase.PARSED, _INTERRUPTED.format(step="Chunking"))
            raise

        self._logger.info("ingestion_chunk_complete", run_id=run.run_id, chunks=len(chunks))
        return self._transition(chunking, phase=IngestionPhase.REVIEWING, chunks=chunks)

    async def process(self, run: IngestionRun, source: DocumentSource | None = None) -> IngestionRun:
        """Parse then chunk in one call, stopping in REVIEWING."""
        parsed = await self.parse(run, source)
        return await self.chunk(parsed)

    # ------------------------------------------------------------------
    # Review / edit
    # ------------------------------------------------------------------

    def begin_edit(self, run: IngestionRun, chunk_id: str) -> IngestionRun:
        self._require_phase(run, _REVIEWING, "edit chunks")
        return self._transition(run, chunks=chunk_staging.begin_edit(run.chunks, chunk_id))

    def save_edit(
        self,
        run: IngestionRun,
        chunk_id: str,
        text: str,
        metadata: str | dict[str, Any],
    ) -> IngestionRun:
        """Save an edited chunk.  Invalid metadata leaves the chunk untouched."""
        self._require_phase(run, _REVIEWING, "edit chunks")
        try:
            chunks = chunk_staging.save_edit(run.chunks, chunk_id, text, metadata)
        except InvalidMetadataError as exc:
            self._transition(run, last_error=exc.message)
            raise
        return self._transition(run, chunks=chunks, last_error=None)

    def cancel_edit(self, run: IngestionRun, chunk_id: str) -> IngestionRun:
        self._require_phase(run, _REVIEWING, "edit chunks")
        return self._transition(run, chunks=chunk_staging.cancel_edit(run.chunks, chunk_id))

    def delete_chunk(self, run: IngestionRun, chunk_id: str) -> IngestionRun:
        self._require_phase(run, _REVIEWING, "delete chunks")
        updated = self._transition(run, chunks=chunk_staging.delete_chunk(run.chunks, chunk_id))
        self._logger.info(
            "chunk_deleted",
            run_id=run.run_id,
            chunk_id=chunk_id,
            remaining=len(updated.chunks),
        )
        return updated

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def commit(self, run: IngestionRun) -> tuple[IngestionRun, int]:
        """Commit every staged chunk.

        Returns the reset IDLE run (same id, every other field cleared)
        and the number of documents added.  On failure the run goes back
        to REVIEWING with all chunks kept.
        """
        self._require_phase(run, _REVIEWING, "commit")

        committing = self._transition(run, phase=IngestionPhase.COMMITTING, last_error=None)
        try:
            await self._committer.commit(run.chunks)
        except KolosalConsoleError as exc:
            self._logger.warning("ingestion_commit_failed", run_id=run.run_id, error=exc.message)
            self._recover(committing, IngestionPhase.REVIEWING, exc.message)
            raise
        except BaseException:
            self._logger.warning("ingestion_commit_interrupted", run_id=run.run_id)
            self._recover(committing, IngestionPhase.REVIEWING, _INTERRUPTED.format(step="Commit"))
            raise

        count = len(run.chunks)
        # The documents are stored either way; a run discarded meanwhile stays gone.
        reset = IngestionRun(run_id=run.run_id, similarity_threshold=self._default_threshold)
        if run.run_id in self._sessions:
            self._sessions.replace(reset)
        self._logger.info("ingestion_commit_complete", run_id=run.run_id, documents=count)
        return reset, count

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_phase(
        self,
        run: IngestionRun,
        allowed: Collection[IngestionPhase],
        command: str,
    ) -> None:
        if run.in_flight:
            raise IngestionStateError(
                message=f"Run {run.run_id} is busy ({run.phase.value}); wait for it to finish"
            )
        if run.phase not in allowed:
            raise IngestionStateError(
                message=f"Cannot {command} while run {run.run_id} is {run.phase.value}"
            )

    def _transition(self, run: IngestionRun, **update: Any) -> IngestionRun:
        update["updated_at"] = datetime.now(tz=timezone.utc)  # noqa: UP017
        return self._sessions.replace(run.model_copy(update=update))

    def _recover(self, run: IngestionRun, phase: IngestionPhase, error: str) -> None:
        """Put an in-flight run back into *phase* unless it was discarded meanwhile."""
        if run.run_id not in self._sessions:
            self._logger.info("ingestion_run_discarded_in_flight", run_id=run.run_id)
            return
        self._transition(run, phase=phase, last_error=error)


def _value(choice: Any) -> str | None:
    return choice.value if choice is not None else None
