"""Shared helpers for reading upstream HTTP responses."""

from __future__ import annotations

import httpx


def upstream_reason(response: httpx.Response) -> str:
    """Best human-readable reason for a failed response.

    Prefers an ``{"error": {"message": ...}}`` or ``{"error": "..."}`` body,
    then a string ``detail``, then the HTTP reason phrase.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        detail = body.get("detail")
        if isinstance(detail, str) and detail:
            return detail
    return response.reason_phrase or f"HTTP {response.status_code}"
