# =============================================================================
# kolosal_console/cli/ingest.py - CLI Ingest Command
# =============================================================================
#
# Runs the same parse -> chunk -> commit flow as the dashboard's ingestion
# wizard, without the review step, against the services configured in
# .env / the environment.
#
# Subcommands:
#
#   file    - Parse a document with a chosen parser, chunk it and commit it
#   text    - Chunk and commit literal text (inline or read from a file)
#   status  - Print the status of the kolosal server, parsers and store
#
# Usage examples:
#   python -m kolosal_console.cli.ingest file --path report.pdf --type pdf \
#       --parser ocr-conversion --chunking semantic --threshold 0.7
#   python -m kolosal_console.cli.ingest text --text "hello world" --chunking none
#   python -m kolosal_console.cli.ingest file --path deck.pptx --type pptx \
#       --parser markdown-conversion --chunking regular --dry-run
#   python -m kolosal_console.cli.ingest status
# =============================================================================

"""Command-line ingestion into a kolosal document store.

Usage::

    python -m kolosal_console.cli.ingest file --path report.pdf --type pdf \\
        --parser fast-parse --chunking regular

    python -m kolosal_console.cli.ingest text --text "hello world" --chunking none

    python -m kolosal_console.cli.ingest status
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import httpx

from kolosal_console.config.settings import Settings
from kolosal_console.models.ingestion import (
    ChunkingMethod,
    DocumentSource,
    DocumentType,
    IngestionRun,
    ParserType,
)
from kolosal_console.utils.errors import KolosalConsoleError


def _build_components(app_settings: Settings) -> dict[str, Any]:
    # Imported lazily so --help works without touching the app module.
    from kolosal_console.main import build_components

    return build_components(app_settings)


def _print_chunks(run: IngestionRun) -> None:
    print(f"  Chunks staged: {len(run.chunks)}")
    for chunk in run.chunks:
        preview = chunk.text[:70].replace("\n", " ")
        print(f"    [{chunk.id}] {preview}{'...' if len(chunk.text) > 70 else ''}")


async def _ingest(
    app_settings: Settings,
    source: DocumentSource,
    document_type: str,
    parser_type: str,
    chunking: str,
    threshold: float | None,
    dry_run: bool,
) -> int:
    components = _build_components(app_settings)
    pipeline = components["pipeline"]
    http_client: httpx.AsyncClient = components["http_client"]
    try:
        run = pipeline.configure(
            pipeline.new_run(),
            document_type=document_type,
            parser_type=parser_type,
            chunking_method=chunking,
            similarity_threshold=threshold,
        )
        run = await pipeline.process(run, source)
        _print_chunks(run)

        if dry_run:
            print("\nDry run: nothing committed.")
            return 0

        _, count = await pipeline.commit(run)
        print(f"\nIngestion complete: {count} document(s) added.")
        return 0
    except KolosalConsoleError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await http_client.aclose()


async def _handle_file(args: argparse.Namespace, app_settings: Settings) -> int:
    path = Path(args.path)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    document_type = args.type or path.suffix.lstrip(".").lower()
    print(f"Ingesting {path.name} as {document_type} with {args.parser}, {args.chunking} chunking")
    source = DocumentSource(filename=path.name, data=path.read_bytes())
    return await _ingest(
        app_settings,
        source,
        document_type,
        args.parser,
        args.chunking,
        args.threshold,
        args.dry_run,
    )


async def _handle_text(args: argparse.Namespace, app_settings: Settings) -> int:
    text = Path(args.file).read_text(encoding="utf-8") if args.file else args.text
    print(f"Ingesting {len(text)} characters of text with {args.chunking} chunking")
    return await _ingest(
        app_settings,
        DocumentSource(text=text, content_type="text/plain"),
        DocumentType.TEXT.value,
        ParserType.NONE.value,
        args.chunking,
        args.threshold,
        args.dry_run,
    )


async def _handle_status(app_settings: Settings) -> int:
    components = _build_components(app_settings)
    http_client: httpx.AsyncClient = components["http_client"]
    try:
        status = await components["status_service"].fetch_all()
    finally:
        await http_client.aclose()
    print(json.dumps(status.model_dump(mode="json"), indent=2))
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _add_chunking_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--chunking",
        default=ChunkingMethod.REGULAR.value,
        choices=[method.value for method in ChunkingMethod],
        help="Chunking method (default: regular)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Similarity threshold for semantic chunking (default from settings)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Parse and chunk only; print the chunks without committing",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m kolosal_console.cli.ingest",
        description="Parse, chunk and add documents to a kolosal document store.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Ingestion commands")

    # -- file --
    file_parser = subparsers.add_parser("file", help="Ingest a document file")
    file_parser.add_argument("--path", required=True, help="Path to the document")
    file_parser.add_argument(
        "--type",
        default=None,
        choices=[doc_type.value for doc_type in DocumentType if doc_type is not DocumentType.TEXT],
        help="Document type (default: taken from the file extension)",
    )
    file_parser.add_argument(
        "--parser",
        default=ParserType.FAST_PARSE.value,
        choices=[p.value for p in ParserType if p is not ParserType.NONE],
        help="Parser backend (default: fast-parse)",
    )
    _add_chunking_args(file_parser)

    # -- text --
    text_parser = subparsers.add_parser("text", help="Ingest literal text")
    source_group = text_parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument("--text", help="Text to ingest")
    source_group.add_argument("--file", help="Read the text from this UTF-8 file")
    _add_chunking_args(text_parser)

    # -- status --
    subparsers.add_parser("status", help="Show upstream service status")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point; exits with 0 on success and 1 on any failure."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()

    if args.command == "file":
        exit_code = asyncio.run(_handle_file(args, app_settings))
    elif args.command == "text":
        exit_code = asyncio.run(_handle_text(args, app_settings))
    elif args.command == "status":
        exit_code = asyncio.run(_handle_status(app_settings))
    else:
        parser.print_help()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
