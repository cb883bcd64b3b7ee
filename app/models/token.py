from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta


@dataclass(frozen=True, slots=True)
class Token:
    """Access token as returned by the token endpoint.

    ``expiry`` is receipt time plus ``expires_in``; both are None when the
    server sent no usable lifetime.
    """

    access_token: str = field(repr=False)
    token_type: str
    refresh_token: str = field(repr=False)
    expires_in: int | None
    expiry: datetime | None

    @staticmethod
    def new(
        *,
        access_token: str,
        token_type: str = "",
        refresh_token: str = "",
        expires_in: int | None = None,
        received_at: datetime | None = None,
    ) -> Token:
        # Zero or negative lifetimes mean "no expiry known", not "already expired".
        if expires_in is not None and expires_in <= 0:
            expires_in = None
        expiry = None
        if expires_in is not None:
            now = received_at or datetime.now(UTC)
            try:
                expiry = now + timedelta(seconds=expires_in)
            except OverflowError:
                # Past datetime.max: treated like any other unusable lifetime.
                expires_in = None
        return Token(
            access_token=access_token,
            token_type=token_type,
            refresh_token=refresh_token,
            expires_in=expires_in,
            expiry=expiry,
        )
