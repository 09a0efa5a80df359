"""Ingestion orchestration: the run state machine and its session registry."""

from kolosal_console.pipeline.ingestion_pipeline import IngestionPipeline
from kolosal_console.pipeline.session_store import IngestionSessionStore

__all__ = [
    "IngestionPipeline",
    "IngestionSessionStore",
]
