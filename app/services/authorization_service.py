from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from app.core.errors import InvalidEndpoint


def build_authorization_url(
    authorization_endpoint: str,
    client_id: str,
    redirect_uri: str,
    scopes: Sequence[str],
    state: str,
) -> str:
    """Build the URL the user agent is redirected to for consent.

    Query parameters already present on the endpoint are kept.  ``prompt=consent``
    is always sent so the server shows the consent screen again instead of
    silently reusing an earlier grant.

    Raises InvalidEndpoint if the endpoint is not an absolute http(s) URL.
    """
    parts = urlsplit(authorization_endpoint)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidEndpoint(
            "authorization endpoint must be an absolute URL "
            f"(got {authorization_endpoint!r})"
        )

    params: list[tuple[str, str]] = parse_qsl(parts.query, keep_blank_values=True)
    params.append(("response_type", "code"))
    params.append(("client_id", client_id))
    if redirect_uri:
        params.append(("redirect_uri", redirect_uri))
    if scopes:
        params.append(("scope", " ".join(scopes)))
    params.append(("state", state))
    params.append(("prompt", "consent"))

    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment)
    )
