"""Kolosal inference/document server adapter."""

from kolosal_console.providers.kolosal.kolosal_client import KolosalServerClient

__all__ = ["KolosalServerClient"]
