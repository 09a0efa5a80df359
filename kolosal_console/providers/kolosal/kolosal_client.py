"""Kolosal server adapter.

Thin async wrapper over the inference/document server's HTTP API: status,
document CRUD, retrieval, chunking, fast parsing and model registration.
Every method converts transport errors and non-2xx answers into the
console's typed exceptions at the call site, so callers never see raw
``httpx`` exceptions.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from kolosal_console.config.endpoints import Service, ServiceEndpoints
from kolosal_console.utils.errors import (
    ChunkingFailedError,
    KolosalConsoleError,
    ParseFailedError,
    RemoteServiceError,
    RemoteUnavailableError,
)
from kolosal_console.utils.http import upstream_reason

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER = "kolosal"


class KolosalServerClient:
    """Async client for the kolosal inference/document server.

    Parameters
    ----------
    endpoints:
        Endpoint table bound to the kolosal base URL.
    http_client:
        Shared ``httpx.AsyncClient``.  When omitted the client creates and
        owns one, and :meth:`aclose` closes it.
    embedding_model_name:
        Sent as ``model_name`` on every chunking request.
    """

    def __init__(
        self,
        endpoints: ServiceEndpoints,
        http_client: httpx.AsyncClient | None = None,
        embedding_model_name: str = "qwen3-embedding-4b",
        timeout: float = 120.0,
    ) -> None:
        if endpoints.service is not Service.KOLOSAL:
            raise ValueError("KolosalServerClient needs the kolosal endpoint table")
        self._endpoints = endpoints
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._embedding_model_name = embedding_model_name

    @property
    def embedding_model_name(self) -> str:
        return self._embedding_model_name

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        action: str,
        error_cls: type[KolosalConsoleError] = RemoteServiceError,
        **kwargs: Any,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises *error_cls* with ``"Failed to {action}: {reason}"`` on any
        transport error, non-2xx status, or undecodable body.
        """

        def _fail(reason: str, status_code: int | None = None) -> KolosalConsoleError:
            message = f"Failed to {action}: {reason}"
            if issubclass(error_cls, RemoteServiceError):
                return error_cls(message=message, provider_name=_PROVIDER, status_code=status_code)
            return error_cls(message=message, provider_name=_PROVIDER)

        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("kolosal_request_error", url=url, action=action, error=str(exc))
            raise _fail(str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            reason = upstream_reason(response)
            logger.warning(
                "kolosal_request_rejected",
                url=url,
                action=action,
                status=response.status_code,
                reason=reason,
            )
            raise _fail(reason, response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise _fail("response was not valid JSON", response.status_code) from exc

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def status(self) -> dict[str, Any]:
        """``GET /status``: engines, node manager and server info."""
        try:
            return await self._request(
                "GET", self._endpoints.url("status"), "fetch server status"
            )
        except RemoteServiceError as exc:
            raise RemoteUnavailableError(message=exc.message, provider_name=_PROVIDER) from exc

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def list_documents(self) -> dict[str, Any]:
        """``GET /list_documents``: collection name, ids and total count."""
        return await self._request(
            "GET", self._endpoints.url("list_documents"), "fetch document list"
        )

    async def info_documents(self, document_ids: list[str]) -> dict[str, Any]:
        """``POST /info_documents {ids}``: full records for *document_ids*."""
        return await self._request(
            "POST",
            self._endpoints.url("info_documents"),
            "fetch document info",
            json={"ids": list(document_ids)},
        )

    async def remove_documents(self, document_ids: list[str]) -> dict[str, Any]:
        """``POST /remove_documents {document_ids}``."""
        return await self._request(
            "POST",
            self._endpoints.url("remove_documents"),
            "delete documents",
            json={"document_ids": list(document_ids)},
        )

    async def add_documents(self, documents: list[dict[str, Any]]) -> dict[str, Any]:
        """``POST /add_documents {documents: [{text, metadata}, ...]}``."""
        return await self._request(
            "POST",
            self._endpoints.url("add_documents"),
            "add documents",
            json={"documents": documents},
        )

    async def retrieve(
        self,
        query: str,
        limit: int,
        score_threshold: float,
    ) -> dict[str, Any]:
        """``POST /retrieve {query, limit, score_threshold}``."""
        return await self._request(
            "POST",
            self._endpoints.url("retrieve"),
            "retrieve documents",
            json={"query": query, "limit": limit, "score_threshold": score_threshold},
        )

    # ------------------------------------------------------------------
    # Chunking and fast parsing
    # ------------------------------------------------------------------

    async def chunk(
        self,
        text: str,
        method: str,
        similarity_threshold: float | None = None,
    ) -> dict[str, Any]:
        """``POST /chunking``.

        ``similarity_threshold`` is included only when given; it is not
        range-checked here.
        """
        payload: dict[str, Any] = {
            "text": text,
            "model_name": self._embedding_model_name,
            "method": method,
        }
        if similarity_threshold is not None:
            payload["similarity_threshold"] = similarity_threshold
        return await self._request(
            "POST",
            self._endpoints.url("chunking"),
            "chunk document",
            error_cls=ChunkingFailedError,
            json=payload,
        )

    async def parse_document(self, document_type: str, data_base64: str) -> dict[str, Any]:
        """``POST /parse_{type} {data, method: "fast"}``."""
        endpoint = f"parse_{document_type}"
        url = (
            self._endpoints.url(endpoint)
            if self._endpoints.has_endpoint(endpoint)
            else self._endpoints.custom_url(f"/parse_{document_type}")
        )
        return await self._request(
            "POST",
            url,
            "parse with Kolosal",
            error_cls=ParseFailedError,
            json={"data": data_base64, "method": "fast"},
        )

    # ------------------------------------------------------------------
    # Models / engines
    # ------------------------------------------------------------------

    async def add_model(self, payload: dict[str, Any]) -> dict[str, Any]:
        """``POST /models``: register and optionally load a model."""
        return await self._request(
            "POST", self._endpoints.url("models"), "add model", json=payload
        )

    async def remove_model(self, engine_id: str) -> dict[str, Any]:
        """``DELETE /models/{engine_id}`` (id is URL-encoded)."""
        return await self._request(
            "DELETE",
            self._endpoints.custom_url(f"/models/{quote(engine_id, safe='')}"),
            "remove engine",
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def get_provider_name(self) -> str:
        return _PROVIDER
