"""Chunker invocation: splits parsed text via the kolosal ``/chunking`` endpoint.

The segmentation algorithm lives on the server.  This service only picks
the request parameters, defends against an empty answer, and turns the
returned spans into staged :class:`Chunk` records.
"""

from __future__ import annotations

from typing import Any

import structlog

from kolosal_console.models.ingestion import Chunk, ChunkingMethod, ParsedDocument
from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient
from kolosal_console.utils.errors import IngestionConfigError
from kolosal_console.utils.logging import get_logger

DEFAULT_SIMILARITY_THRESHOLD = 0.6


def coerce_chunking_method(value: ChunkingMethod | str | None) -> ChunkingMethod:
    if value is None or value == "":
        raise IngestionConfigError(message="Please select a chunking type")
    try:
        return ChunkingMethod(value)
    except ValueError as exc:
        raise IngestionConfigError(message=f"Unsupported chunking type: {value}") from exc


def normalize_chunks(result: Any, original_text: str) -> list[str]:
    """Extract chunk texts from a ``/chunking`` response.

    Chunks may be plain strings or objects carrying ``text`` (or
    ``content``).  A missing or empty list yields the original text as
    the only chunk.
    """
    raw = result.get("chunks") if isinstance(result, dict) else None
    if not raw:
        return [original_text]

    texts: list[str] = []
    for item in raw:
        if isinstance(item, str):
            texts.append(item)
        elif isinstance(item, dict):
            value = item.get("text") or item.get("content")
            texts.append(value if isinstance(value, str) else str(item))
        else:
            texts.append(str(item))
    return texts


class ChunkerService:
    """Calls the remote chunker and builds staged chunks."""

    def __init__(
        self,
        client: KolosalServerClient,
        default_similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> None:
        self._client = client
        self._default_threshold = default_similarity_threshold
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def split(
        self,
        text: str,
        method: ChunkingMethod | str,
        similarity_threshold: float | None = None,
    ) -> list[str]:
        """Return the ordered text spans for *text*.

        ``none`` never touches the network.  ``semantic`` always sends a
        threshold (the default when none is given); the value is forwarded
        unclamped.
        """
        chunking = coerce_chunking_method(method)
        if chunking is ChunkingMethod.NONE:
            return [text]

        threshold: float | None = None
        if chunking is ChunkingMethod.SEMANTIC:
            threshold = (
                similarity_threshold
                if similarity_threshold is not None
                else self._default_threshold
            )
            if not 0.0 <= threshold <= 1.0:
                self._logger.warning("similarity_threshold_out_of_range", threshold=threshold)

        self._logger.info(
            "chunking_started",
            method=chunking.value,
            similarity_threshold=threshold,
            characters=len(text),
        )
        result = await self._client.chunk(text, chunking.value, threshold)
        spans = normalize_chunks(result, text)
        self._logger.info("chunking_complete", method=chunking.value, chunks=len(spans))
        return spans

    async def chunk(
        self,
        document: ParsedDocument,
        method: ChunkingMethod | str,
        similarity_threshold: float | None = None,
    ) -> list[Chunk]:
        """Split *document* and return staged chunks.

        ``none`` produces one chunk with id ``"1"`` and the document's own
        metadata.  Remote chunks get ids ``chunk-1``, ``chunk-2``, … and the
        document metadata plus a 1-based ``chunk_index``.
        """
        chunking = coerce_chunking_method(method)
        if chunking is ChunkingMethod.NONE:
            return [Chunk(id="1", text=document.text, metadata=dict(document.metadata))]

        spans = await self.split(document.text, chunking, similarity_threshold)
        return [
            Chunk(
                id=f"chunk-{index}",
                text=span,
                metadata={**document.metadata, "chunk_index": index},
            )
            for index, span in enumerate(spans, start=1)
        ]
