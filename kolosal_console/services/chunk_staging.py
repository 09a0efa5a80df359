"""Review/edit staging for chunks awaiting commit.

Pure functions over an immutable chunk list: each returns a new list and
never touches the network.  A rejected edit raises before anything is
built, so the caller's list is left exactly as it was.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from kolosal_console.models.ingestion import Chunk
from kolosal_console.utils.errors import ChunkNotFoundError, InvalidMetadataError


def parse_metadata(metadata: str | dict[str, Any]) -> dict[str, Any]:
    """Parse edited metadata text into a dict.

    Raises
    ------
    InvalidMetadataError
        If *metadata* is not valid JSON or does not decode to an object.
    """
    if isinstance(metadata, dict):
        return dict(metadata)
    try:
        parsed = json.loads(metadata)
    except (TypeError, ValueError) as exc:
        raise InvalidMetadataError(message=f"Invalid JSON in metadata: {exc}") from exc
    if not isinstance(parsed, dict):
        raise InvalidMetadataError(
            message=f"Metadata must be a JSON object, got {type(parsed).__name__}"
        )
    return parsed


def _index_of(chunks: Sequence[Chunk], chunk_id: str) -> int:
    for index, chunk in enumerate(chunks):
        if chunk.id == chunk_id:
            return index
    raise ChunkNotFoundError(message=f"No staged chunk with id {chunk_id}")


def _replace(chunks: Sequence[Chunk], index: int, chunk: Chunk) -> list[Chunk]:
    updated = list(chunks)
    updated[index] = chunk
    return updated


def begin_edit(chunks: Sequence[Chunk], chunk_id: str) -> list[Chunk]:
    index = _index_of(chunks, chunk_id)
    return _replace(chunks, index, chunks[index].model_copy(update={"editing": True}))


def save_edit(
    chunks: Sequence[Chunk],
    chunk_id: str,
    text: str,
    metadata: str | dict[str, Any],
) -> list[Chunk]:
    """Apply edited text and metadata, leaving edit mode.

    Metadata is validated first; on :class:`InvalidMetadataError` the
    chunk keeps its previous text, metadata and editing flag.
    """
    index = _index_of(chunks, chunk_id)
    parsed = parse_metadata(metadata)
    edited = chunks[index].model_copy(
        update={"text": text, "metadata": parsed, "editing": False}
    )
    return _replace(chunks, index, edited)


def cancel_edit(chunks: Sequence[Chunk], chunk_id: str) -> list[Chunk]:
    index = _index_of(chunks, chunk_id)
    return _replace(chunks, index, chunks[index].model_copy(update={"editing": False}))


def delete_chunk(chunks: Sequence[Chunk], chunk_id: str) -> list[Chunk]:
    # No undo: the removed chunk is gone for the rest of the run.
    _index_of(chunks, chunk_id)
    return [chunk for chunk in chunks if chunk.id != chunk_id]
