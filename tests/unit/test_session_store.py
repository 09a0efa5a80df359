"""Unit tests for the in-memory ingestion session registry."""

from __future__ import annotations

import pytest

from kolosal_console.models.ingestion import IngestionPhase, IngestionRun
from kolosal_console.pipeline.session_store import IngestionSessionStore
from kolosal_console.utils.errors import SessionNotFoundError


class TestIngestionSessionStore:
    def test_save_and_get(self) -> None:
        store = IngestionSessionStore()
        run = IngestionRun(run_id="r1")
        assert store.save(run) is run
        assert store.get("r1") is run
        assert "r1" in store
        assert len(store) == 1

    def test_save_replaces_state(self) -> None:
        store = IngestionSessionStore()
        store.save(IngestionRun(run_id="r1"))
        store.save(IngestionRun(run_id="r1", phase=IngestionPhase.CONFIGURING))
        assert store.get("r1").phase is IngestionPhase.CONFIGURING
        assert len(store) == 1

    def test_missing_run(self) -> None:
        with pytest.raises(SessionNotFoundError, match="No ingestion session found for ID: nope"):
            IngestionSessionStore().get("nope")

    def test_discard(self) -> None:
        store = IngestionSessionStore()
        store.save(IngestionRun(run_id="r1"))
        store.discard("r1")
        assert "r1" not in store
        with pytest.raises(SessionNotFoundError):
            store.discard("r1")

    def test_external_mapping(self) -> None:
        backing: dict[str, IngestionRun] = {}
        store = IngestionSessionStore(backing)
        store.save(IngestionRun(run_id="r1"))
        assert list(backing) == ["r1"]

    def test_replace_registered_run(self) -> None:
        store = IngestionSessionStore()
        store.save(IngestionRun(run_id="r1"))
        updated = IngestionRun(run_id="r1", phase=IngestionPhase.PARSING)
        assert store.replace(updated) is updated
        assert store.get("r1").phase is IngestionPhase.PARSING

    def test_replace_does_not_revive_discarded_run(self) -> None:
        backing: dict[str, IngestionRun] = {}
        store = IngestionSessionStore(backing)
        store.save(IngestionRun(run_id="r1"))
        store.discard("r1")
        with pytest.raises(SessionNotFoundError):
            store.replace(IngestionRun(run_id="r1", phase=IngestionPhase.PARSED))
        assert backing == {}
