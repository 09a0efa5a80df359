"""Unit tests for DocumentCommitter."""

from __future__ import annotations

import json

import httpx
import pytest

from kolosal_console.services.document_committer import DocumentCommitter
from kolosal_console.utils.errors import CommitFailedError, NothingToCommitError


class TestDocumentCommitter:
    @pytest.mark.asyncio
    async def test_batched_add(self, make_kolosal, staged_chunks) -> None:
        client, transport = make_kolosal(
            lambda request: httpx.Response(200, json={"successful_count": 2})
        )
        committer = DocumentCommitter(client)

        result = await committer.commit(staged_chunks)

        assert result == {"successful_count": 2}
        assert len(transport.requests) == 1
        assert json.loads(transport.requests[0].content) == {
            "documents": [
                {"text": "First paragraph.", "metadata": {"chunk_index": 1}},
                {"text": "Second paragraph.", "metadata": {"chunk_index": 2}},
            ]
        }

    @pytest.mark.asyncio
    async def test_nothing_to_commit_sends_nothing(self, make_kolosal) -> None:
        client, transport = make_kolosal(lambda request: httpx.Response(200, json={}))
        committer = DocumentCommitter(client)
        with pytest.raises(NothingToCommitError):
            await committer.commit([])
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_remote_failure(self, make_kolosal, staged_chunks) -> None:
        client, _ = make_kolosal(
            lambda request: httpx.Response(500, json={"error": {"message": "embedding failed"}})
        )
        committer = DocumentCommitter(client)
        with pytest.raises(CommitFailedError) as exc_info:
            await committer.commit(staged_chunks)
        assert "embedding failed" in exc_info.value.message
        assert exc_info.value.retryable is True
