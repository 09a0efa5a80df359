"""Batched status fetch for the dashboard.

Checks the kolosal server, both parser services and the document list
concurrently.  Each check degrades on its own: a service that cannot be
reached is reported as ``"unavailable"`` and a failed document listing as
``None``, so one outage never blanks the whole dashboard.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from pydantic import ValidationError

from kolosal_console.interfaces.document_parser import IDocumentParser
from kolosal_console.models.status import (
    UNAVAILABLE,
    DashboardStatus,
    DocumentsSummary,
    InferenceStatus,
    ServiceStatus,
)
from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient
from kolosal_console.utils.errors import KolosalConsoleError
from kolosal_console.utils.logging import get_logger


class StatusService:
    """Aggregates health of every upstream service."""

    def __init__(
        self,
        kolosal_client: KolosalServerClient,
        markitdown: IDocumentParser,
        docling: IDocumentParser,
    ) -> None:
        self._kolosal = kolosal_client
        self._markitdown = markitdown
        self._docling = docling
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def _inference_status(self) -> InferenceStatus:
        try:
            payload = await self._kolosal.status()
            return InferenceStatus.model_validate(payload)
        except (KolosalConsoleError, ValidationError) as exc:
            self._logger.warning("inference_status_unavailable", error=str(exc))
            return InferenceStatus(status=UNAVAILABLE)

    async def _parser_status(self, parser: IDocumentParser, service_name: str) -> ServiceStatus:
        try:
            payload: dict[str, Any] = await parser.health()
            return ServiceStatus.model_validate({"service": service_name, **payload})
        except (KolosalConsoleError, ValidationError, TypeError) as exc:
            self._logger.warning(
                "parser_status_unavailable",
                service=service_name,
                error=str(exc),
            )
            return ServiceStatus(status=UNAVAILABLE, service=service_name)

    async def _documents(self) -> DocumentsSummary | None:
        try:
            payload = await self._kolosal.list_documents()
            return DocumentsSummary.model_validate(payload)
        except (KolosalConsoleError, ValidationError) as exc:
            self._logger.warning("document_list_unavailable", error=str(exc))
            return None

    async def fetch_all(self) -> DashboardStatus:
        """Run every check concurrently and assemble the dashboard payload."""
        inference, markitdown, docling, documents = await asyncio.gather(
            self._inference_status(),
            self._parser_status(self._markitdown, "markitdown-api"),
            self._parser_status(self._docling, "docling-api"),
            self._documents(),
        )
        self._logger.info(
            "status_fetched",
            inference=inference.status,
            markitdown=markitdown.status,
            docling=docling.status,
            documents=documents.total_count if documents else None,
        )
        return DashboardStatus(
            inference_status=inference,
            markitdown_status=markitdown,
            docling_status=docling,
            documents_data=documents,
        )
