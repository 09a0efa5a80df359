"""Dashboard status models.

The upstream payloads are loosely specified, so these models only pin
down the fields the console reads and let everything else pass through
(``extra="allow"``).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

UNAVAILABLE = "unavailable"


class ServiceStatus(BaseModel):
    """Health payload of a parser service (markitdown / docling)."""

    model_config = ConfigDict(frozen=True, extra="allow")

    status: str
    service: str | None = None

    @property
    def available(self) -> bool:
        return self.status != UNAVAILABLE


class InferenceStatus(BaseModel):
    """``GET /status`` payload of the kolosal server.

    ``engines`` lists ``{engine_id, status}`` records; ``node_manager`` and
    ``server`` are passed through untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    status: str
    engines: list[dict[str, Any]] = Field(default_factory=list)
    node_manager: dict[str, Any] | None = None
    server: dict[str, Any] | None = None
    timestamp: float | None = None

    @property
    def available(self) -> bool:
        return self.status != UNAVAILABLE


class DocumentsSummary(BaseModel):
    """``GET /list_documents`` payload."""

    model_config = ConfigDict(frozen=True, extra="allow")

    collection_name: str = ""
    document_ids: list[str] = Field(default_factory=list)
    total_count: int = 0


class DashboardStatus(BaseModel):
    """Aggregated status of every external service.

    One service being down never hides the others: a failed check is
    reported as ``status="unavailable"`` and a failed document listing as
    ``None``.
    """

    model_config = ConfigDict(frozen=True)

    inference_status: InferenceStatus
    markitdown_status: ServiceStatus
    docling_status: ServiceStatus
    documents_data: DocumentsSummary | None = None
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
