"""Commit step: sends the staged chunk set to ``/add_documents`` in one batch."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from kolosal_console.models.ingestion import Chunk
from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient
from kolosal_console.utils.errors import CommitFailedError, NothingToCommitError, RemoteServiceError
from kolosal_console.utils.logging import get_logger


class DocumentCommitter:
    """Submits ``{text, metadata}`` pairs for every staged chunk."""

    def __init__(self, client: KolosalServerClient) -> None:
        self._client = client
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def commit(self, chunks: Sequence[Chunk]) -> dict[str, Any]:
        """Add *chunks* to the retrieval store and return the server's answer.

        Raises
        ------
        NothingToCommitError
            If *chunks* is empty; no request is sent.
        CommitFailedError
            If the server call fails.  Nothing is retried here.
        """
        if not chunks:
            raise NothingToCommitError()

        documents = [chunk.to_document() for chunk in chunks]
        try:
            result = await self._client.add_documents(documents)
        except RemoteServiceError as exc:
            self._logger.error("commit_failed", documents=len(documents), error=exc.message)
            raise CommitFailedError(message=exc.message, provider_name=exc.provider_name) from exc

        self._logger.info("commit_complete", documents=len(documents))
        return result
