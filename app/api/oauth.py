from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated, TypeVar

import anyio
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from app.api.dependencies import get_settings, get_token_exchanger
from app.core.config import Settings
from app.core.errors import (
    EntropyUnavailable,
    ExchangeHTTPError,
    ExchangeTimeout,
    InvalidEndpoint,
    MissingCode,
)
from app.models.outcome import CallbackOutcome, OutcomeKind
from app.services.authorization_service import build_authorization_url
from app.services.callback_service import handle_callback
from app.services.state_service import generate_state
from app.services.token_exchange import TokenExchanger

# ---------------------------------------------------------------------------
# OAuth 2.0 client — Authorization Code Grant (confidential client)
#
# Endpoints:
#   GET /oauth2/authorize  — issue state cookie, redirect to authorization server
#   GET /oauth2/callback   — validate state, exchange code, show access token
#
# State lives in ONE short-lived HttpOnly cookie.  Starting a new authorization
# overwrites it, so only the most recent attempt can complete.
# LIMITATION: the server keeps no record of issued states, so an issued but
# unused state cannot be revoked server-side; it just expires with the cookie.
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

router = APIRouter(tags=["oauth"])

# Upstream bodies can be large HTML error pages; keep log lines bounded.
_MAX_LOGGED_BODY = 500

# nginx's status for "client went away before the response was ready".
CLIENT_CLOSED_REQUEST = 499

DISCONNECT_POLL_SEC = 0.1

T = TypeVar("T")


async def run_unless_disconnected(
    request: Request,
    work: Callable[[], Awaitable[T]],
    *,
    poll_interval: float = DISCONNECT_POLL_SEC,
) -> T | None:
    """Await ``work()``, or cancel it and return None once the client is gone.

    Neither uvicorn nor Starlette cancels the endpoint when the browser
    disconnects; the disconnect only shows up on ``receive``.  A watcher task
    polls for it and cancels the whole group, which aborts an in-flight token
    request along with it.
    """
    results: list[T] = []

    async def _watch(scope: anyio.CancelScope) -> None:
        while not await request.is_disconnected():
            await anyio.sleep(poll_interval)
        scope.cancel()

    async with anyio.create_task_group() as tg:
        tg.start_soon(_watch, tg.cancel_scope)
        results.append(await work())
        tg.cancel_scope.cancel()

    return results[0] if results else None


# ========================== GET /oauth2/authorize ===========================


@router.get("/oauth2/authorize")
def authorize(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    try:
        state = generate_state()
        url = build_authorization_url(
            settings.authorization_endpoint,
            settings.client_id,
            settings.redirect_uri,
            settings.scopes,
            state,
        )
    except (EntropyUnavailable, InvalidEndpoint) as e:
        logger.error("OAUTH FLOW [authorize] FAIL: %s", e)
        return JSONResponse(
            {"detail": str(e)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    logger.info(
        "OAUTH FLOW [authorize] redirecting to authorization endpoint  "
        "url=%s client_id=%s scopes=%s",
        settings.authorization_endpoint,
        settings.client_id,
        " ".join(settings.scopes),
    )

    response = RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=settings.state_cookie_name,
        value=state,
        max_age=settings.state_cookie_ttl_sec,
        expires=settings.state_cookie_ttl_sec,
        path="/",
        httponly=True,
        # Lax still sends the cookie on the top-level GET redirect back
        # from the authorization server.
        samesite="lax",
        secure=settings.cookie_secure,
    )
    return response


# ========================== GET /oauth2/callback ============================


@router.get("/oauth2/callback")
async def callback(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    exchanger: Annotated[TokenExchanger, Depends(get_token_exchanger)],
    state: str | None = Query(None),
    code: str | None = Query(None),
    error: str | None = Query(None),
) -> Response:
    # NOTE: never log `code`; it is a bearer credential until exchanged.
    logger.info(
        "OAUTH FLOW [callback] received  has_code=%s has_state=%s error=%s",
        bool(code),
        bool(state),
        error,
    )

    outcome = await run_unless_disconnected(
        request,
        lambda: handle_callback(
            error=error,
            state=state,
            code=code,
            stored_state=request.cookies.get(settings.state_cookie_name),
            exchanger=exchanger,
            redirect_uri=settings.redirect_uri,
            timeout=settings.token_exchange_timeout_sec,
        ),
    )

    if outcome is None:
        logger.info("OAUTH FLOW [callback] client disconnected; token exchange cancelled")
        response: Response = Response(status_code=CLIENT_CLOSED_REQUEST)
    else:
        response = _outcome_response(outcome)
    # Single use: the state is spent whatever happened.
    response.delete_cookie(
        key=settings.state_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )
    return response


def _outcome_response(outcome: CallbackOutcome) -> Response:
    if outcome.kind is OutcomeKind.SUCCESS and outcome.token is not None:
        # Storing the token is out of scope; show it to the user.
        return PlainTextResponse(f"accessToken = {outcome.token.access_token}")

    if outcome.kind is OutcomeKind.AUTHORIZATION_DENIED:
        # The user said no. That is a choice, not a fault: back to the start page.
        return RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)

    reason = outcome.reason
    detail = str(reason) if reason is not None else outcome.kind.value

    if outcome.kind in (OutcomeKind.AUTHORIZATION_ERROR, OutcomeKind.STATE_MISMATCH):
        return JSONResponse({"detail": detail}, status_code=status.HTTP_400_BAD_REQUEST)

    # EXCHANGE_FAILED
    if isinstance(reason, MissingCode):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(reason, ExchangeTimeout):
        code = status.HTTP_504_GATEWAY_TIMEOUT
    else:
        code = status.HTTP_502_BAD_GATEWAY
        if isinstance(reason, ExchangeHTTPError):
            logger.warning(
                "OAUTH FLOW [callback] token endpoint error  statusCode=%d body=%s",
                reason.status,
                reason.body[:_MAX_LOGGED_BODY],
            )
    return JSONResponse({"detail": detail}, status_code=code)
