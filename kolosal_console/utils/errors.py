"""Custom exception hierarchy for the Kolosal console.

All application exceptions inherit from :class:`KolosalConsoleError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "kolosal", "markitdown", "docling") caused the failure.

The hierarchy is organized by ingestion stage:

    KolosalConsoleError  (base -- catch-all for any console error)
    +-- UnsupportedParserError   (parser/document-type combination rejected)
    +-- ParseFailedError         (parse backend unreachable or non-2xx)
    +-- ParseNotReadyError       (OCR backend still processing -- retryable)
    +-- ChunkingFailedError      (remote chunking call failed)
    +-- InvalidMetadataError     (edited chunk metadata is not a JSON object)
    +-- ChunkNotFoundError       (staged chunk id unknown)
    +-- NothingToCommitError     (commit attempted with no staged chunks)
    +-- CommitFailedError        (add_documents call failed)
    +-- IngestionStateError      (command issued in the wrong phase)
    +-- IngestionConfigError     (missing document type / file / text)
    +-- SessionNotFoundError     (unknown ingestion session id)
    +-- RemoteUnavailableError   (status / health check failed)
    +-- RemoteServiceError       (any other proxied call failed)

Every class exposes ``retryable`` so the API layer can tell the caller
whether re-issuing the same request makes sense.
"""


class KolosalConsoleError(Exception):
    """Base exception for all console errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[docling] Document still processing``.
    """

    retryable: bool = False

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Parse stage
# ---------------------------------------------------------------------------

class UnsupportedParserError(KolosalConsoleError):
    """Raised before any network call when a parser cannot handle the request."""

    def __init__(
        self,
        message: str = "Unsupported parser for this document type",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ParseFailedError(KolosalConsoleError):
    """Raised when a parse backend is unreachable or answers with a non-2xx status."""

    def __init__(
        self,
        message: str = "Document parsing failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ParseNotReadyError(KolosalConsoleError):
    """Raised when the OCR backend reports the conversion as still pending.

    The same request can be re-issued later; nothing was lost.
    """

    retryable = True

    def __init__(
        self,
        message: str = "Document conversion is still pending",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Chunk / staging stage
# ---------------------------------------------------------------------------

class ChunkingFailedError(KolosalConsoleError):
    """Raised when the remote chunking endpoint fails."""

    def __init__(
        self,
        message: str = "Document chunking failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidMetadataError(KolosalConsoleError):
    """Raised when edited chunk metadata does not parse to a JSON object."""

    def __init__(
        self,
        message: str = "Invalid JSON in metadata",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ChunkNotFoundError(KolosalConsoleError):
    """Raised when a staging command references an unknown chunk id."""

    def __init__(
        self,
        message: str = "Chunk not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Commit stage
# ---------------------------------------------------------------------------

class NothingToCommitError(KolosalConsoleError):
    """Raised when a commit is attempted with an empty chunk list."""

    def __init__(
        self,
        message: str = "No documents to add",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CommitFailedError(KolosalConsoleError):
    """Raised when ``add_documents`` fails; staged chunks are kept for a retry."""

    retryable = True

    def __init__(
        self,
        message: str = "Failed to add documents",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration errors
# ---------------------------------------------------------------------------

class IngestionStateError(KolosalConsoleError):
    """Raised when a command is not valid in the run's current phase."""

    def __init__(
        self,
        message: str = "Invalid ingestion state transition",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IngestionConfigError(KolosalConsoleError):
    """Raised when the run is missing a choice or input it needs."""

    def __init__(
        self,
        message: str = "Ingestion run is not fully configured",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SessionNotFoundError(KolosalConsoleError):
    """Raised when an ingestion session id is unknown or already discarded."""

    def __init__(
        self,
        message: str = "Ingestion session not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class RemoteUnavailableError(KolosalConsoleError):
    """Raised when a status or health check cannot reach its service.

    The status service catches this and reports the service as
    ``"unavailable"`` instead of failing the whole dashboard.
    """

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RemoteServiceError(KolosalConsoleError):
    """Raised when a proxied call (list, info, retrieve, models...) fails.

    ``status_code`` holds the upstream HTTP status when one was received,
    or ``None`` for transport failures.
    """

    def __init__(
        self,
        message: str = "External service call failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self._status_code = status_code
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status_code(self) -> int | None:
        return self._status_code
