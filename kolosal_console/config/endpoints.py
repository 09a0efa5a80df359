"""Endpoint table for the three external services.

Logical endpoint names are resolved against the base URL configured in
:class:`~kolosal_console.config.settings.Settings`.  Adapters never
hard-code paths; they call :meth:`ServiceEndpoints.url` (for named
endpoints) or :meth:`ServiceEndpoints.custom_url` (for templated paths
such as ``/parse_{type}`` or ``/models/{id}``).
"""

from __future__ import annotations

from enum import Enum

from kolosal_console.config.settings import Settings
from kolosal_console.utils.errors import KolosalConsoleError


class Service(str, Enum):  # noqa: UP042
    """External services the console talks to."""

    KOLOSAL = "kolosal"
    MARKITDOWN = "markitdown"
    DOCLING = "docling"


_ENDPOINTS: dict[Service, dict[str, str]] = {
    Service.KOLOSAL: {
        "status": "/status",
        "list_documents": "/list_documents",
        "info_documents": "/info_documents",
        "remove_documents": "/remove_documents",
        "add_documents": "/add_documents",
        "retrieve": "/retrieve",
        "chunking": "/chunking",
        "models": "/models",
        "parse_pdf": "/parse_pdf",
        "parse_docx": "/parse_docx",
        "parse_xlsx": "/parse_xlsx",
        "parse_pptx": "/parse_pptx",
        "parse_html": "/parse_html",
    },
    Service.MARKITDOWN: {
        "health": "/health",
        "parse_pdf": "/parse_pdf",
        "parse_docx": "/parse_docx",
        "parse_xlsx": "/parse_xlsx",
        "parse_pptx": "/parse_pptx",
        "parse_html": "/parse_html",
    },
    Service.DOCLING: {
        "health": "/health",
        "process_file": "/processFile",
    },
}


class ServiceEndpoints:
    """URL builder bound to one service's configured base URL."""

    def __init__(self, service: Service, base_url: str) -> None:
        self._service = service
        self._base_url = base_url.rstrip("/")

    @property
    def service(self) -> Service:
        return self._service

    @property
    def base_url(self) -> str:
        return self._base_url

    def url(self, endpoint: str) -> str:
        """Return the full URL for a named endpoint of this service."""
        try:
            path = _ENDPOINTS[self._service][endpoint]
        except KeyError as exc:
            raise KolosalConsoleError(
                message=f"Unknown endpoint '{endpoint}' for service {self._service.value}",
                provider_name=self._service.value,
            ) from exc
        return f"{self._base_url}{path}"

    def custom_url(self, path: str) -> str:
        """Return the full URL for an arbitrary path on this service."""
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self._base_url}{path}"

    def has_endpoint(self, endpoint: str) -> bool:
        return endpoint in _ENDPOINTS[self._service]


def endpoints_for(settings: Settings, service: Service) -> ServiceEndpoints:
    """Build the endpoint table for *service* from *settings*."""
    base_urls = {
        Service.KOLOSAL: settings.kolosal_server_url,
        Service.MARKITDOWN: settings.markitdown_server_url,
        Service.DOCLING: settings.docling_server_url,
    }
    return ServiceEndpoints(service, base_urls[service])
