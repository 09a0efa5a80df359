"""Document browser and retrieval models."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DOCUMENTS_PER_PAGE = 10


class DocumentPage(BaseModel):
    """One page of the document browser.

    ``page`` is 1-based.  ``documents`` holds the ``/info_documents``
    records for the ids on this page.
    """

    model_config = ConfigDict(frozen=True)

    collection_name: str = ""
    page: int = 1
    page_size: int = DOCUMENTS_PER_PAGE
    total_count: int = 0
    total_pages: int = 0
    document_ids: list[str] = Field(default_factory=list)
    documents: list[dict[str, Any]] = Field(default_factory=list)


class RetrievalResult(BaseModel):
    """Reshaped ``/retrieve`` response with client-side timing."""

    model_config = ConfigDict(frozen=True)

    documents: list[dict[str, Any]] = Field(default_factory=list)
    query: str
    total_results: int = 0
    elapsed_time_ms: float = 0.0


def page_bounds(
    total_count: int, page: int, page_size: int = DOCUMENTS_PER_PAGE
) -> tuple[int, int, int, int]:
    """Return ``(page, start, end, total_pages)`` for a 1-based *page*.

    Pages past the end clamp back to page 1, which is what the browser
    does after deletions shrink the collection.
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    total_pages = math.ceil(total_count / page_size) if total_count else 0
    if page < 1 or (total_pages and page > total_pages):
        page = 1
    start = (page - 1) * page_size
    end = min(start + page_size, total_count)
    return page, start, end, total_pages


def page_document_ids(
    document_ids: list[str], page: int, page_size: int = DOCUMENTS_PER_PAGE
) -> tuple[list[str], int, int]:
    """Slice *document_ids* for one page; returns ``(ids, page, total_pages)``."""
    page, start, end, total_pages = page_bounds(len(document_ids), page, page_size)
    return document_ids[start:end], page, total_pages
