from __future__ import annotations

import base64
import hmac
import secrets

from app.core.errors import EntropyUnavailable, MissingStoredState, StateMismatch

# Anti-CSRF state for the authorization redirect.
#
# generate_state creates the per-attempt value that we put in a cookie AND in the
# authorization request. validate_state compares what the authorization server
# echoed back on the callback with what the cookie still holds.

# 64 bytes of entropy before encoding -> 86 chars of unpadded URL-safe base64
STATE_BYTES = 64


def generate_state() -> str:
    try:
        random_bytes = secrets.token_bytes(STATE_BYTES)
    except (OSError, NotImplementedError) as e:
        # Never fall back to `random`: a guessable state defeats the point.
        raise EntropyUnavailable(f"failed to generate state: {e}") from e
    # Padding is dropped: "=" would force the cookie value to be quoted.
    return base64.urlsafe_b64encode(random_bytes).rstrip(b"=").decode("ascii")


def validate_state(presented: str | None, stored: str | None) -> None:
    """Check the callback state against the state stored for this user agent.

    A missing stored value is a hard failure: skipping the check when the
    cookie is gone would turn the CSRF defence off for exactly the requests
    an attacker controls.

    Uses constant-time comparison so response timing does not reveal how
    much of a guessed state was correct.
    """
    if not stored:
        raise MissingStoredState()
    if not presented:
        raise StateMismatch()
    if not hmac.compare_digest(presented.encode("utf-8"), stored.encode("utf-8")):
        raise StateMismatch()
