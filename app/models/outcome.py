"""Result of one pass through the OAuth callback.

The callback never raises for protocol failures; it returns one of these.
The HTTP layer switches on ``kind`` to pick a response.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.core.errors import OAuthClientError
from app.models.token import Token


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    AUTHORIZATION_DENIED = "authorization_denied"
    AUTHORIZATION_ERROR = "authorization_error"
    STATE_MISMATCH = "state_mismatch"
    EXCHANGE_FAILED = "exchange_failed"


@dataclass(frozen=True, slots=True)
class CallbackOutcome:
    kind: OutcomeKind
    token: Token | None = None
    error_code: str | None = None
    reason: OAuthClientError | None = None

    @staticmethod
    def success(token: Token) -> CallbackOutcome:
        return CallbackOutcome(kind=OutcomeKind.SUCCESS, token=token)

    @staticmethod
    def denied(reason: OAuthClientError | None = None) -> CallbackOutcome:
        return CallbackOutcome(
            kind=OutcomeKind.AUTHORIZATION_DENIED,
            error_code="access_denied",
            reason=reason,
        )

    @staticmethod
    def authorization_error(
        code: str, reason: OAuthClientError | None = None
    ) -> CallbackOutcome:
        return CallbackOutcome(
            kind=OutcomeKind.AUTHORIZATION_ERROR, error_code=code, reason=reason
        )

    @staticmethod
    def state_mismatch(reason: OAuthClientError) -> CallbackOutcome:
        return CallbackOutcome(kind=OutcomeKind.STATE_MISMATCH, reason=reason)

    @staticmethod
    def exchange_failed(reason: OAuthClientError) -> CallbackOutcome:
        return CallbackOutcome(kind=OutcomeKind.EXCHANGE_FAILED, reason=reason)
