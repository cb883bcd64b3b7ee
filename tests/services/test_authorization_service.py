from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest

from app.core.errors import InvalidEndpoint
from app.services.authorization_service import build_authorization_url

ENDPOINT = "https://accounts.example.com/o/oauth2/auth"


def _query(url: str) -> dict[str, list[str]]:
    return parse_qs(urlparse(url).query)


def test_builds_url_with_required_params() -> None:
    url = build_authorization_url(
        ENDPOINT, "cid", "http://localhost:2345/oauth2/callback", ["email"], "st4te"
    )
    parsed = urlparse(url)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == ENDPOINT
    q = _query(url)
    assert q["response_type"] == ["code"]
    assert q["client_id"] == ["cid"]
    assert q["redirect_uri"] == ["http://localhost:2345/oauth2/callback"]
    assert q["state"] == ["st4te"]
    assert q["prompt"] == ["consent"]


def test_scopes_are_space_joined() -> None:
    url = build_authorization_url(ENDPOINT, "cid", "", ["email", "profile"], "s")
    assert _query(url)["scope"] == ["email profile"]
    # urlencode uses '+' for spaces, consistently
    assert "scope=email+profile" in url


def test_scope_order_is_preserved() -> None:
    url = build_authorization_url(ENDPOINT, "cid", "", ["profile", "email"], "s")
    assert _query(url)["scope"] == ["profile email"]


def test_omits_empty_redirect_uri_and_scope() -> None:
    q = _query(build_authorization_url(ENDPOINT, "cid", "", [], "s"))
    assert "redirect_uri" not in q
    assert "scope" not in q


def test_values_are_url_encoded() -> None:
    url = build_authorization_url(
        ENDPOINT,
        "id&evil=1",
        "http://localhost/cb?x=1",
        ["https://www.googleapis.com/auth/gmail.readonly"],
        "a+b/c=",
    )
    q = _query(url)
    assert q["client_id"] == ["id&evil=1"]
    assert "evil" not in q
    assert q["redirect_uri"] == ["http://localhost/cb?x=1"]
    assert q["state"] == ["a+b/c="]


def test_preserves_existing_query_params() -> None:
    url = build_authorization_url(ENDPOINT + "?hd=example.com", "cid", "", [], "s")
    q = _query(url)
    assert q["hd"] == ["example.com"]
    assert q["client_id"] == ["cid"]


@pytest.mark.parametrize(
    "endpoint",
    ["", "not a url", "/o/oauth2/auth", "ftp://example.com/auth", "https://"],
)
def test_rejects_invalid_endpoint(endpoint: str) -> None:
    with pytest.raises(InvalidEndpoint):
        build_authorization_url(endpoint, "cid", "", [], "s")
