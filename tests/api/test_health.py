from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from app.api import index as index_module
from app.api.dependencies import get_settings
from app.core.config import Settings
from app.main import app
from tests.conftest import CLIENT_SECRET, TOKEN_ENDPOINT


def test_health_returns_ok(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["checks"]["client_credentials"] == "ok"
    assert data["checks"]["token_endpoint"] == TOKEN_ENDPOINT


def test_health_never_exposes_client_secret(client: TestClient) -> None:
    resp = client.get("/health")
    assert CLIENT_SECRET not in resp.text


def test_health_reports_missing_credentials(
    client: TestClient, settings: Settings
) -> None:
    app.dependency_overrides[get_settings] = lambda: replace(settings, client_secret="")
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["checks"]["client_credentials"] == "not_configured"


def test_ready_returns_200(client: TestClient) -> None:
    resp = client.get("/ready")
    assert resp.status_code == 200


def test_ready_returns_503_without_credentials(
    client: TestClient, settings: Settings
) -> None:
    app.dependency_overrides[get_settings] = lambda: replace(settings, client_id="")
    resp = client.get("/ready")
    assert resp.status_code == 503


# ---- index page ----


def test_index_links_to_authorize(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert 'href="/oauth2/authorize"' in resp.text
    assert "email profile" in resp.text


def test_index_escapes_scopes(client: TestClient, settings: Settings) -> None:
    app.dependency_overrides[get_settings] = lambda: replace(
        settings, scopes=("<script>",)
    )
    resp = client.get("/")
    assert "<script>" not in resp.text
    assert "&lt;script&gt;" in resp.text


def test_index_render_failure_is_500_not_crash(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _broken(scopes: tuple[str, ...]) -> str:
        raise KeyError("missing placeholder")

    monkeypatch.setattr(index_module, "render_index", _broken)
    resp = client.get("/")
    assert resp.status_code == 500
    # The process is still serving.
    assert client.get("/health").status_code == 200
