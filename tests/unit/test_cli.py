"""Unit tests for the ingestion CLI (kolosal_console.cli.ingest)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from kolosal_console.cli.ingest import _build_parser, main
from kolosal_console.models.ingestion import Chunk, IngestionPhase, IngestionRun
from kolosal_console.models.status import (
    UNAVAILABLE,
    DashboardStatus,
    InferenceStatus,
    ServiceStatus,
)
from kolosal_console.utils.errors import CommitFailedError

_BUILD = "kolosal_console.cli.ingest._build_components"


# ======================================================================
# Shared helpers
# ======================================================================


def _reviewing_run() -> IngestionRun:
    return IngestionRun(
        run_id="cli-run",
        phase=IngestionPhase.REVIEWING,
        chunks=[
            Chunk(id="chunk-1", text="First paragraph."),
            Chunk(id="chunk-2", text="Second paragraph " * 10),
        ],
    )


def _components() -> dict:
    run = _reviewing_run()
    pipeline = MagicMock()
    pipeline.new_run.return_value = IngestionRun(run_id="cli-run")
    pipeline.configure.return_value = IngestionRun(
        run_id="cli-run", phase=IngestionPhase.CONFIGURING
    )
    pipeline.process = AsyncMock(return_value=run)
    pipeline.commit = AsyncMock(return_value=(IngestionRun(run_id="cli-run"), 2))

    http_client = MagicMock()
    http_client.aclose = AsyncMock()
    return {"pipeline": pipeline, "http_client": http_client}


def _exit_code(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


# ======================================================================
# Argument parsing
# ======================================================================


class TestArgumentParser:
    def test_file_defaults(self) -> None:
        args = _build_parser().parse_args(["file", "--path", "report.pdf"])
        assert args.command == "file"
        assert args.parser == "fast-parse"
        assert args.chunking == "regular"
        assert args.type is None
        assert args.threshold is None
        assert args.dry_run is False

    def test_text_requires_a_source(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["text", "--chunking", "none"])

    def test_unknown_chunking_rejected(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["text", "--text", "x", "--chunking", "fancy"])

    def test_no_command_exits_nonzero(self) -> None:
        assert _exit_code([]) == 1


# ======================================================================
# Commands
# ======================================================================


class TestFileCommand:
    def test_commits_and_closes_client(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF-1.7 fake")
        components = _components()

        with patch(_BUILD, return_value=components):
            code = _exit_code(
                ["file", "--path", str(path), "--parser", "ocr-conversion", "--threshold", "0.7"]
            )

        assert code == 0
        pipeline = components["pipeline"]
        kwargs = pipeline.configure.call_args.kwargs
        assert kwargs["document_type"] == "pdf"
        assert kwargs["parser_type"] == "ocr-conversion"
        assert kwargs["similarity_threshold"] == 0.7
        source = pipeline.process.await_args.args[1]
        assert source.filename == "report.pdf"
        assert source.data == b"%PDF-1.7 fake"
        pipeline.commit.assert_awaited_once()
        components["http_client"].aclose.assert_awaited_once()

        out = capsys.readouterr().out
        assert "Chunks staged: 2" in out
        assert "2 document(s) added" in out

    def test_dry_run_skips_commit(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "deck.pptx"
        path.write_bytes(b"pptx")
        components = _components()

        with patch(_BUILD, return_value=components):
            code = _exit_code(["file", "--path", str(path), "--dry-run"])

        assert code == 0
        assert components["pipeline"].configure.call_args.kwargs["document_type"] == "pptx"
        components["pipeline"].commit.assert_not_awaited()
        assert "Dry run" in capsys.readouterr().out

    def test_missing_file(self, tmp_path: Path) -> None:
        with patch(_BUILD) as build:
            code = _exit_code(["file", "--path", str(tmp_path / "missing.pdf")])
        assert code == 1
        build.assert_not_called()

    def test_pipeline_error_exits_nonzero(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF")
        components = _components()
        components["pipeline"].commit.side_effect = CommitFailedError(
            message="Failed to add documents: down"
        )

        with patch(_BUILD, return_value=components):
            code = _exit_code(["file", "--path", str(path)])

        assert code == 1
        assert "Failed to add documents" in capsys.readouterr().err
        components["http_client"].aclose.assert_awaited_once()


class TestTextCommand:
    def test_inline_text(self) -> None:
        components = _components()
        with patch(_BUILD, return_value=components):
            code = _exit_code(["text", "--text", "hello world", "--chunking", "none"])

        assert code == 0
        kwargs = components["pipeline"].configure.call_args.kwargs
        assert kwargs["document_type"] == "text"
        assert kwargs["parser_type"] == "none"
        assert kwargs["chunking_method"] == "none"
        source = components["pipeline"].process.await_args.args[1]
        assert source.text == "hello world"

    def test_text_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("notes body", encoding="utf-8")
        components = _components()
        with patch(_BUILD, return_value=components):
            code = _exit_code(["text", "--file", str(path)])

        assert code == 0
        assert components["pipeline"].process.await_args.args[1].text == "notes body"


class TestStatusCommand:
    def test_prints_json(self, capsys) -> None:
        status_service = MagicMock()
        status_service.fetch_all = AsyncMock(
            return_value=DashboardStatus(
                inference_status=InferenceStatus(status="healthy"),
                markitdown_status=ServiceStatus(service="markitdown-api", status="healthy"),
                docling_status=ServiceStatus(service="docling-api", status=UNAVAILABLE),
            )
        )
        http_client = MagicMock()
        http_client.aclose = AsyncMock()

        with patch(
            _BUILD,
            return_value={"status_service": status_service, "http_client": http_client},
        ):
            code = _exit_code(["status"])

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["markitdown_status"]["status"] == "healthy"
        assert payload["docling_status"]["status"] == "unavailable"
        assert payload["documents_data"] is None
        http_client.aclose.assert_awaited_once()
