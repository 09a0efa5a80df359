"""Document browser operations proxied to the kolosal server."""

from __future__ import annotations

from typing import Any

import structlog

from kolosal_console.models.documents import DOCUMENTS_PER_PAGE, DocumentPage, page_document_ids
from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient
from kolosal_console.utils.logging import get_logger


class DocumentService:
    """List, inspect, page through and delete stored documents."""

    def __init__(self, client: KolosalServerClient) -> None:
        self._client = client
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def list_documents(self) -> dict[str, Any]:
        return await self._client.list_documents()

    async def info_documents(self, document_ids: list[str]) -> dict[str, Any]:
        return await self._client.info_documents(document_ids)

    async def remove_documents(self, document_ids: list[str]) -> dict[str, Any]:
        result = await self._client.remove_documents(document_ids)
        self._logger.info("documents_removed", count=len(document_ids))
        return result

    async def add_documents(self, documents: list[dict[str, Any]]) -> dict[str, Any]:
        result = await self._client.add_documents(documents)
        self._logger.info("documents_added", count=len(documents))
        return result

    async def get_page(self, page: int = 1, page_size: int = DOCUMENTS_PER_PAGE) -> DocumentPage:
        """Return one page of document records.

        Lists every id, slices out the requested page and fetches full
        records only for that slice.  An out-of-range page falls back to
        page 1; an empty collection skips the info request entirely.
        """
        listing = await self._client.list_documents()
        document_ids = [str(doc_id) for doc_id in listing.get("document_ids") or []]
        total_count = int(listing.get("total_count") or len(document_ids))

        page_ids, page, total_pages = page_document_ids(document_ids, page, page_size)

        documents: list[dict[str, Any]] = []
        if page_ids:
            info = await self._client.info_documents(page_ids)
            documents = list(info.get("documents") or [])

        return DocumentPage(
            collection_name=listing.get("collection_name") or "",
            page=page,
            page_size=page_size,
            total_count=total_count,
            total_pages=total_pages,
            document_ids=page_ids,
            documents=documents,
        )
