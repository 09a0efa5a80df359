"""Similarity search proxied to the kolosal ``/retrieve`` endpoint."""

from __future__ import annotations

import time

import structlog

from kolosal_console.models.documents import RetrievalResult
from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient
from kolosal_console.utils.logging import get_logger


class RetrievalService:
    """Runs a retrieval query and reports how long the round trip took."""

    def __init__(
        self,
        client: KolosalServerClient,
        default_limit: int = 10,
        default_score_threshold: float = 0.5,
    ) -> None:
        self._client = client
        self._default_limit = default_limit
        self._default_score_threshold = default_score_threshold
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def retrieve(
        self,
        query: str,
        limit: int | None = None,
        score_threshold: float | None = None,
    ) -> RetrievalResult:
        """Query the store; zero or missing ``limit``/``score_threshold`` use the defaults."""
        if not query or not query.strip():
            raise ValueError("Query is required")

        effective_limit = limit or self._default_limit
        effective_threshold = score_threshold or self._default_score_threshold

        start = time.perf_counter()
        result = await self._client.retrieve(query, effective_limit, effective_threshold)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)

        documents = list(result.get("documents") or [])
        self._logger.info(
            "retrieve_complete",
            results=len(documents),
            limit=effective_limit,
            score_threshold=effective_threshold,
            elapsed_ms=elapsed_ms,
        )
        return RetrievalResult(
            documents=documents,
            query=query,
            total_results=len(documents),
            elapsed_time_ms=elapsed_ms,
        )
