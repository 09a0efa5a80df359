"""Unit tests for the KolosalConsoleError hierarchy."""

from __future__ import annotations

import pytest

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

_ALL_ERRORS = [
    ChunkingFailedError,
    ChunkNotFoundError,
    CommitFailedError,
    IngestionConfigError,
    IngestionStateError,
    InvalidMetadataError,
    NothingToCommitError,
    ParseFailedError,
    ParseNotReadyError,
    RemoteServiceError,
    RemoteUnavailableError,
    SessionNotFoundError,
    UnsupportedParserError,
]


class TestKolosalConsoleError:
    def test_message_and_provider(self) -> None:
        exc = KolosalConsoleError(message="boom", provider_name="docling")
        assert exc.message == "boom"
        assert exc.provider_name == "docling"

    def test_str_prefixes_provider(self) -> None:
        assert str(KolosalConsoleError(message="boom", provider_name="docling")) == "[docling] boom"

    def test_str_without_provider(self) -> None:
        assert str(KolosalConsoleError(message="boom")) == "boom"

    def test_not_retryable_by_default(self) -> None:
        assert KolosalConsoleError().retryable is False


class TestSubclasses:
    @pytest.mark.parametrize("error_cls", _ALL_ERRORS)
    def test_subclass_of_base(self, error_cls: type[KolosalConsoleError]) -> None:
        exc = error_cls()
        assert isinstance(exc, KolosalConsoleError)
        assert exc.message

    def test_retryable_errors(self) -> None:
        assert ParseNotReadyError().retryable is True
        assert CommitFailedError().retryable is True
        assert ParseFailedError().retryable is False

    def test_default_messages(self) -> None:
        assert NothingToCommitError().message == "No documents to add"
        assert InvalidMetadataError().message == "Invalid JSON in metadata"

    def test_remote_service_error_status_code(self) -> None:
        exc = RemoteServiceError(message="nope", provider_name="kolosal", status_code=404)
        assert exc.status_code == 404
        assert RemoteServiceError().status_code is None
