"""Configuration module: exports Settings, the endpoint table, and a module-level singleton."""

from kolosal_console.config.endpoints import Service, ServiceEndpoints, endpoints_for
from kolosal_console.config.settings import Settings

settings = Settings()

__all__ = ["Service", "ServiceEndpoints", "Settings", "endpoints_for", "settings"]
