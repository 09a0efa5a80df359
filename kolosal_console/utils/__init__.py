"""Utility modules for the Kolosal console.

- **errors** -- Domain exception hierarchy rooted at KolosalConsoleError;
  each ingestion stage raises its own subclass so callers can handle
  failures granularly without broad ``except Exception`` blocks.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **http** -- Reads a human-readable failure reason out of an upstream
  response body.
"""

from kolosal_console.utils.errors import (
    ChunkingFailedError,
    ChunkNotFoundError,
    CommitFailedError,
    IngestionConfigError,
    IngestionStateError,
    InvalidMetadataError,
    KolosalConsoleError,
    NothingToCommitError,
    ParseFailedError,
    ParseNotReadyError,
    RemoteServiceError,
    RemoteUnavailableError,
    SessionNotFoundError,
    UnsupportedParserError,
)
from kolosal_console.utils.logging import configure_logging, get_logger

__all__ = [
    "ChunkNotFoundError",
    "ChunkingFailedError",
    "CommitFailedError",
    "IngestionConfigError",
    "IngestionStateError",
    "InvalidMetadataError",
    "KolosalConsoleError",
    "NothingToCommitError",
    "ParseFailedError",
    "ParseNotReadyError",
    "RemoteServiceError",
    "RemoteUnavailableError",
    "SessionNotFoundError",
    "UnsupportedParserError",
    "configure_logging",
    "get_logger",
]
