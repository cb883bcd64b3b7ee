"""Every response carries an X-Request-ID, generated or echoed."""

from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)  # raises ValueError if invalid


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    custom_id = "my-custom-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers.get("x-request-id") == custom_id


def test_request_id_present_on_redirects_and_errors(client: TestClient) -> None:
    assert client.get("/oauth2/authorize").headers.get("x-request-id")
    assert client.get("/oauth2/callback").headers.get("x-request-id")


def test_summary_line_omits_query_string(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="app.middleware.request_context"):
        client.get("/oauth2/callback", params={"code": "should-not-log", "state": "x"})
    summary = [r for r in caplog.records if r.name == "app.middleware.request_context"]
    assert summary
    assert all("should-not-log" not in r.getMessage() for r in summary)
    assert getattr(summary[-1], "path") == "/oauth2/callback"
