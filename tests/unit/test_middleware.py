"""Unit tests for the CORS helper and the error status map."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from kolosal_console.api.middleware import configure_cors, status_code_for
from kolosal_console.utils.errors import (
    CommitFailedError,
    IngestionStateError,
    ParseNotReadyError,
    SessionNotFoundError,
)


def _app(origins: list[str] | None) -> TestClient:
    app = FastAPI()
    configure_cors(app, allowed_origins=origins)

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"status": "ok"}

    return TestClient(app)


def _preflight(client: TestClient, origin: str):
    return client.options(
        "/ping",
        headers={"Origin": origin, "Access-Control-Request-Method": "GET"},
    )


class TestConfigureCors:
    def test_wildcard_without_credentials(self) -> None:
        resp = _preflight(_app(None), "http://anywhere.example")
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "access-control-allow-credentials" not in resp.headers

    def test_explicit_origin_with_credentials(self) -> None:
        resp = _preflight(_app(["http://dash.lan"]), "http://dash.lan")
        assert resp.headers["access-control-allow-origin"] == "http://dash.lan"
        assert resp.headers["access-control-allow-credentials"] == "true"

    def test_unlisted_origin_rejected(self) -> None:
        resp = _preflight(_app(["http://dash.lan"]), "http://evil.example")
        assert resp.status_code == 400

    def test_request_id_exposed(self) -> None:
        resp = _app(["http://dash.lan"]).get("/ping", headers={"Origin": "http://dash.lan"})
        assert "X-Request-ID" in resp.headers["access-control-expose-headers"]


class TestStatusCodeFor:
    def test_mapped_errors(self) -> None:
        assert status_code_for(SessionNotFoundError()) == 404
        assert status_code_for(IngestionStateError()) == 409
        assert status_code_for(ParseNotReadyError()) == 503

    def test_unmapped_error_is_upstream_failure(self) -> None:
        assert status_code_for(CommitFailedError()) == 502
