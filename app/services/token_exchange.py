"""Authorization code -> access token exchange (RFC 6749 §4.1.3).

The client authenticates twice: client_id/client_secret go in
the form body AND in an HTTP Basic header, since authorization servers differ
on which one they read.

The call is bounded by a caller-supplied timeout and never retried here.
Cancelling the calling task cancels the outbound request with it; the
callback route does that when the browser disconnects mid-exchange.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import UTC, datetime
from typing import Protocol
from urllib.parse import parse_qs, quote_plus

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from app.core.errors import (
    ExchangeError,
    ExchangeHTTPError,
    ExchangeTimeout,
    ExchangeTransportError,
    MalformedTokenResponse,
    MissingAccessToken,
    MissingCode,
    UnsupportedContentType,
)
from app.core.metrics import TOKEN_EXCHANGES
from app.models.credentials import ClientCredentials
from app.models.token import Token

logger = logging.getLogger(__name__)

DEFAULT_EXCHANGE_TIMEOUT_SEC = 10.0

FORM_CONTENT_TYPES = frozenset({"application/x-www-form-urlencoded", "text/plain"})
JSON_CONTENT_TYPES = frozenset({"application/json"})


class TokenExchanger(Protocol):
    async def exchange(
        self,
        code: str,
        redirect_uri: str = "",
        *,
        timeout: float = DEFAULT_EXCHANGE_TIMEOUT_SEC,
    ) -> Token: ...


class TokenResponse(BaseModel):
    """Token endpoint body, whichever encoding it arrived in."""

    model_config = ConfigDict(extra="ignore")

    access_token: str | None = None
    token_type: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None

    @field_validator("expires_in", mode="before")
    @classmethod
    def _lenient_expires_in(cls, value: object) -> int | None:
        # Some servers send "3600" as a string; garbage means "unknown", not error.
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)  # type: ignore[call-overload]
        except (TypeError, ValueError, OverflowError):
            # OverflowError: JSON 1e400 decodes to float("inf").
            return None

    def to_token(self, received_at: datetime) -> Token:
        if not self.access_token:
            raise MissingAccessToken()
        return Token.new(
            access_token=self.access_token,
            token_type=self.token_type or "",
            refresh_token=self.refresh_token or "",
            expires_in=self.expires_in,
            received_at=received_at,
        )


def media_type(content_type: str | None) -> str:
    """Strip parameters (charset etc.) and normalize case."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def parse_token_response(content_type: str | None, body: str) -> TokenResponse:
    """Decode a 2xx token endpoint body according to its Content-Type.

    Only an explicit allow-list is accepted; anything else (including a
    missing header) raises UnsupportedContentType rather than guessing.
    """
    mtype = media_type(content_type)

    if mtype in FORM_CONTENT_TYPES:
        values = parse_qs(body, keep_blank_values=True)
        return TokenResponse.model_validate(
            {key: vals[0] for key, vals in values.items() if vals}
        )

    if mtype in JSON_CONTENT_TYPES:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise MalformedTokenResponse(f"token response is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise MalformedTokenResponse("token response JSON is not an object")
        try:
            return TokenResponse.model_validate(payload)
        except ValidationError as e:
            raise MalformedTokenResponse(
                f"token response has unexpected field types: {e.error_count()} error(s)"
            ) from e

    raise UnsupportedContentType(mtype)


class TokenExchangeClient:
    """Exchanges authorization codes at one token endpoint for one client."""

    def __init__(
        self,
        token_endpoint: str,
        credentials: ClientCredentials,
        http_client: httpx.AsyncClient,
    ) -> None:
        self.token_endpoint = token_endpoint
        self._credentials = credentials
        self._http = http_client

    def _basic_auth(self) -> httpx.BasicAuth:
        # RFC 6749 §2.3.1: form-urlencode id and secret before Basic encoding.
        return httpx.BasicAuth(
            quote_plus(self._credentials.client_id),
            quote_plus(self._credentials.client_secret),
        )

    async def exchange(
        self,
        code: str,
        redirect_uri: str = "",
        *,
        timeout: float = DEFAULT_EXCHANGE_TIMEOUT_SEC,
    ) -> Token:
        try:
            token = await self._exchange(code, redirect_uri, timeout)
        except ExchangeError as e:
            TOKEN_EXCHANGES.labels(result=_result_label(e)).inc()
            raise
        TOKEN_EXCHANGES.labels(result="success").inc()
        return token

    async def _exchange(self, code: str, redirect_uri: str, timeout: float) -> Token:
        if not code:
            raise MissingCode()

        form = {
            "grant_type": "authorization_code",
            "code": code,
        }
        if redirect_uri:
            form["redirect_uri"] = redirect_uri
        form["client_id"] = self._credentials.client_id
        form["client_secret"] = self._credentials.client_secret

        logger.info(
            "OAUTH FLOW [exchange] POST token endpoint  url=%s client_id=%s",
            self.token_endpoint,
            self._credentials.client_id,
        )

        try:
            # httpx's timeout covers each phase (connect, read...); the outer
            # guard bounds the whole call including a slow trickling body.
            async with asyncio.timeout(timeout):
                response = await self._http.post(
                    self.token_endpoint,
                    data=form,
                    headers={
                        "Content-Type": "application/x-www-form-urlencoded",
                        "Accept": "application/json",
                    },
                    auth=self._basic_auth(),
                    timeout=timeout,
                )
        except (TimeoutError, httpx.TimeoutException) as e:
            logger.warning(
                "OAUTH FLOW [exchange] FAIL: token request timed out  timeout=%ss",
                timeout,
            )
            raise ExchangeTimeout(timeout) from e
        except httpx.RequestError as e:
            logger.warning(
                "OAUTH FLOW [exchange] FAIL: cannot reach token endpoint  error=%s",
                type(e).__name__,
            )
            raise ExchangeTransportError(f"cannot fetch token: {type(e).__name__}") from e

        received_at = datetime.now(UTC)
        body = response.text

        if not response.is_success:
            raise ExchangeHTTPError(response.status_code, body)

        parsed = parse_token_response(response.headers.get("content-type"), body)
        token = parsed.to_token(received_at)
        logger.info(
            "OAUTH FLOW [exchange] token received  token_type=%s expires_in=%s",
            token.token_type,
            token.expires_in,
        )
        return token


def _result_label(error: ExchangeError) -> str:
    if isinstance(error, ExchangeTimeout):
        return "timeout"
    if isinstance(error, ExchangeTransportError):
        return "transport_error"
    if isinstance(error, ExchangeHTTPError):
        return "http_error"
    if isinstance(error, UnsupportedContentType):
        return "unsupported_content_type"
    if isinstance(error, MalformedTokenResponse):
        return "malformed_response"
    if isinstance(error, MissingAccessToken):
        return "missing_access_token"
    if isinstance(error, MissingCode):
        return "missing_code"
    return "error"
