from __future__ import annotations

import logging

from app.core.errors import (
    AuthorizationDenied,
    AuthorizationError,
    ExchangeError,
    StateError,
)
from app.core.metrics import CALLBACK_OUTCOMES
from app.models.outcome import CallbackOutcome
from app.services.state_service import validate_state
from app.services.token_exchange import DEFAULT_EXCHANGE_TIMEOUT_SEC, TokenExchanger

logger = logging.getLogger(__name__)


async def handle_callback(
    *,
    error: str | None,
    state: str | None,
    code: str | None,
    stored_state: str | None,
    exchanger: TokenExchanger,
    redirect_uri: str = "",
    timeout: float = DEFAULT_EXCHANGE_TIMEOUT_SEC,
) -> CallbackOutcome:
    """Run one callback from the authorization server to a terminal outcome.

    Steps, in order, each of which can end the flow:
      1. error param present   -> AUTHORIZATION_DENIED / AUTHORIZATION_ERROR
      2. state check           -> STATE_MISMATCH
      3. code exchange         -> SUCCESS / EXCHANGE_FAILED

    The exchanger is called at most once and only after the state check
    passed.  Nothing is retried; the user has to start again at /authorize,
    which issues a fresh state.  The caller must clear the stored state
    whatever the outcome.
    """
    outcome = await _run(
        error=error,
        state=state,
        code=code,
        stored_state=stored_state,
        exchanger=exchanger,
        redirect_uri=redirect_uri,
        timeout=timeout,
    )
    CALLBACK_OUTCOMES.labels(outcome=outcome.kind.value).inc()
    return outcome


async def _run(
    *,
    error: str | None,
    state: str | None,
    code: str | None,
    stored_state: str | None,
    exchanger: TokenExchanger,
    redirect_uri: str,
    timeout: float,
) -> CallbackOutcome:
    # --- CheckError ------------------------------------------------------------
    if error:
        if error == "access_denied":
            logger.info("OAUTH FLOW [callback] user denied consent")
            return CallbackOutcome.denied(AuthorizationDenied())
        logger.warning("OAUTH FLOW [callback] FAIL: authorization error=%s", error)
        return CallbackOutcome.authorization_error(error, AuthorizationError(error))
    logger.info("OAUTH FLOW [callback] step 1: no error from authorization server  ✓")

    # --- ValidateState ---------------------------------------------------------
    try:
        validate_state(state, stored_state)
    except StateError as e:
        logger.warning("OAUTH FLOW [callback] FAIL: %s", e)
        return CallbackOutcome.state_mismatch(e)
    logger.info("OAUTH FLOW [callback] step 2: state matches  ✓")

    # --- Exchange --------------------------------------------------------------
    try:
        token = await exchanger.exchange(code or "", redirect_uri, timeout=timeout)
    except ExchangeError as e:
        logger.warning("OAUTH FLOW [callback] FAIL: exchange failed  reason=%s", e)
        return CallbackOutcome.exchange_failed(e)
    logger.info("OAUTH FLOW [callback] step 3: code exchanged for token  ✓")

    return CallbackOutcome.success(token)
