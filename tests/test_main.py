from __future__ import annotations

import asyncio
from unittest.mock import patch

import httpx
from click.testing import CliRunner

from app.__main__ import main
from app.main import app, lifespan


def test_cli_runs_uvicorn_with_flags() -> None:
    runner = CliRunner()
    with patch("app.__main__.uvicorn.run") as run:
        result = runner.invoke(
            main, ["--port", "9999", "--host", "0.0.0.0", "--log-level", "info"]
        )

    assert result.exit_code == 0, result.output
    assert "Listening on 0.0.0.0:9999" in result.output
    run.assert_called_once_with(
        "app.main:app", host="0.0.0.0", port=9999, log_level="info"
    )


def test_cli_rejects_non_integer_port() -> None:
    runner = CliRunner()
    with patch("app.__main__.uvicorn.run") as run:
        result = runner.invoke(main, ["--port", "abc"])
    assert result.exit_code != 0
    run.assert_not_called()


def test_lifespan_opens_and_closes_shared_http_client() -> None:
    async def _go() -> httpx.AsyncClient:
        async with lifespan(app):
            http_client = app.state.http_client
            assert isinstance(http_client, httpx.AsyncClient)
            assert not http_client.is_closed
        assert app.state.http_client is None
        return http_client

    http_client = asyncio.run(_go())
    assert http_client.is_closed


def test_routes_registered() -> None:
    paths = {getattr(r, "path", None) for r in app.routes}
    assert {"/", "/oauth2/authorize", "/oauth2/callback", "/health", "/ready", "/metrics"} <= paths
