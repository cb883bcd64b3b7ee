from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, replace
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.api.dependencies import get_http_client, get_settings, get_token_exchanger  # noqa: E402
from app.core.config import SETTINGS, Settings  # noqa: E402
from app.core.errors import ExchangeError  # noqa: E402
from app.main import app  # noqa: E402
from app.models.token import Token  # noqa: E402

CLIENT_ID = "test-client-id"
CLIENT_SECRET = "test-client-s3cret"
AUTHORIZATION_ENDPOINT = "https://auth.example.com/o/oauth2/auth"
TOKEN_ENDPOINT = "https://auth.example.com/o/oauth2/token"
REDIRECT_URI = "http://testserver/oauth2/callback"
STATE_COOKIE = "oauthState"


def make_settings(**overrides: object) -> Settings:
    base = replace(
        SETTINGS,
        app_env="test",
        client_id=CLIENT_ID,
        client_secret=CLIENT_SECRET,
        authorization_endpoint=AUTHORIZATION_ENDPOINT,
        token_endpoint=TOKEN_ENDPOINT,
        redirect_uri=REDIRECT_URI,
        scopes=("email", "profile"),
        token_exchange_timeout_sec=10.0,
        state_cookie_name=STATE_COOKIE,
        state_cookie_ttl_sec=600,
        cookie_secure=False,
    )
    return replace(base, **overrides)  # type: ignore[arg-type]


@dataclass
class FakeExchanger:
    """Stands in for the token endpoint; records every call."""

    token: Token | None = None
    error: ExchangeError | None = None
    calls: list[tuple[str, str, float]] = field(default_factory=list)

    async def exchange(
        self, code: str, redirect_uri: str = "", *, timeout: float = 10.0
    ) -> Token:
        self.calls.append((code, redirect_uri, timeout))
        if self.error is not None:
            raise self.error
        if self.token is None:
            return Token.new(access_token="fake-access-token", token_type="Bearer")
        return self.token


def mock_http_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.AsyncClient:
    """An AsyncClient whose every request is answered by *handler*."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake_exchanger() -> FakeExchanger:
    return FakeExchanger()


@pytest.fixture
def client(settings: Settings, fake_exchanger: FakeExchanger) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_token_exchanger] = lambda: fake_exchanger
    try:
        yield TestClient(app, follow_redirects=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def wire_client(settings: Settings) -> Iterator[Callable[..., TestClient]]:
    """TestClient that runs the real TokenExchangeClient against a mock transport.

    Usage: ``wire_client(handler)`` where handler maps httpx.Request -> Response.
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> TestClient:
        http_client = mock_http_client(handler)
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_http_client] = lambda: http_client
        return TestClient(app, follow_redirects=False)

    try:
        yield _make
    finally:
        app.dependency_overrides.clear()
