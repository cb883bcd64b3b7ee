from __future__ import annotations

import logging
from typing import Annotated

import httpx
from fastapi import Depends, HTTPException, Request, status

from app.core.config import SETTINGS, Settings
from app.services.token_exchange import TokenExchangeClient, TokenExchanger

logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    """Settings as a dependency so tests can swap them per-app."""
    return SETTINGS


def get_http_client(request: Request) -> httpx.AsyncClient:
    """The shared outbound client created by the app lifespan."""
    http_client: httpx.AsyncClient | None = getattr(
        request.app.state, "http_client", None
    )
    if http_client is None:
        logger.error("Outbound HTTP client not initialized (lifespan did not run)")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready",
        )
    return http_client


def get_token_exchanger(
    settings: Annotated[Settings, Depends(get_settings)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> TokenExchanger:
    return TokenExchangeClient(
        token_endpoint=settings.token_endpoint,
        credentials=settings.credentials,
        http_client=http_client,
    )
