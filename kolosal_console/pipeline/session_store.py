"""In-memory registry of ingestion runs keyed by run id.

Runs live only as long as the process: nothing is persisted, and a run is
dropped when it is discarded.  A successful commit keeps the id but
replaces the run with a fresh IDLE one.  Later states go through
``replace``, so a run discarded mid-request stays discarded.

The backing store is any MutableMapping, so tests can pass a plain dict
and inspect it directly.
"""

from __future__ import annotations

from collections.abc import MutableMapping

import structlog

from kolosal_console.models.ingestion import IngestionRun
from kolosal_console.utils.errors import SessionNotFoundError
from kolosal_console.utils.logging import get_logger


class IngestionSessionStore:
    """Holds the latest :class:`IngestionRun` for every open session."""

    def __init__(self, store: MutableMapping[str, IngestionRun] | None = None) -> None:
        self._runs: MutableMapping[str, IngestionRun] = store if store is not None else {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def __contains__(self, run_id: object) -> bool:
        return run_id in self._runs

    def __len__(self) -> int:
        return len(self._runs)

    def save(self, run: IngestionRun) -> IngestionRun:
        self._runs[run.run_id] = run
        return run

    def replace(self, run: IngestionRun) -> IngestionRun:
        """Store a new state for a run that is still registered.

        Raises
        ------
        SessionNotFoundError
            If the run was discarded, for example while a parse was
            outstanding.  The discarded run is not brought back.
        """
        if run.run_id not in self._runs:
            raise SessionNotFoundError(message=f"No ingestion session found for ID: {run.run_id}")
        self._runs[run.run_id] = run
        return run

    def get(self, run_id: str) -> IngestionRun:
        """Return the run for *run_id*.

        Raises
        ------
        SessionNotFoundError
            If no run is registered under *run_id*.
        """
        run = self._runs.get(run_id)
        if run is None:
            self._logger.debug("session_not_found", run_id=run_id)
            raise SessionNotFoundError(message=f"No ingestion session found for ID: {run_id}")
        return run

    def discard(self, run_id: str) -> None:
        if self._runs.pop(run_id, None) is None:
            raise SessionNotFoundError(message=f"No ingestion session found for ID: {run_id}")
        self._logger.info("session_discarded", run_id=run_id)
