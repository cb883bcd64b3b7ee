"""Error taxonomy for the OAuth client.

Every failure the authorization flow can produce is a subclass of
``OAuthClientError``.  Services raise them; the callback orchestrator turns
them into a ``CallbackOutcome``; the HTTP layer turns outcomes into responses.
Messages are safe to show to the user agent: none of them carry the client
secret or the raw token endpoint body.
"""

from __future__ import annotations


class OAuthClientError(Exception):
    """Base class for all OAuth client failures."""


class EntropyUnavailable(OAuthClientError):
    """The OS random source could not supply bytes for a state token."""


class InvalidEndpoint(OAuthClientError):
    """An endpoint URL is not a well-formed absolute http(s) URL."""


# ---------------------------------------------------------------------------
# State (anti-CSRF) failures
# ---------------------------------------------------------------------------


class StateError(OAuthClientError):
    """The callback state could not be matched to an issued state."""


class MissingStoredState(StateError):
    def __init__(self) -> None:
        super().__init__("no stored state for this user agent (cookie missing or expired)")


class StateMismatch(StateError):
    def __init__(self) -> None:
        super().__init__("state doesn't match")


# ---------------------------------------------------------------------------
# Token exchange failures
# ---------------------------------------------------------------------------


class ExchangeError(OAuthClientError):
    """The authorization code could not be exchanged for a token."""


class MissingCode(ExchangeError):
    def __init__(self) -> None:
        super().__init__("code is required")


class ExchangeTimeout(ExchangeError):
    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"token request timed out after {timeout:g}s")


class ExchangeTransportError(ExchangeError):
    """Connection-level failure talking to the token endpoint."""


class ExchangeHTTPError(ExchangeError):
    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        # Kept for diagnostics only; deliberately not part of str(self).
        self.body = body
        super().__init__(f"token request failed: statusCode={status}")


class UnsupportedContentType(ExchangeError):
    def __init__(self, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(
            f"invalid Content-Type in token response: {content_type or '(none)'}"
        )


class MalformedTokenResponse(ExchangeError):
    """The token endpoint body could not be decoded into a token shape."""


class MissingAccessToken(ExchangeError):
    def __init__(self) -> None:
        super().__init__("server response missing access_token")


# ---------------------------------------------------------------------------
# Errors reported by the authorization server on the callback
# ---------------------------------------------------------------------------


class AuthorizationDenied(OAuthClientError):
    def __init__(self) -> None:
        super().__init__("the resource owner denied the request")


class AuthorizationError(OAuthClientError):
    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"error returned in authorization: {code}")
