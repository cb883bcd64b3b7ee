"""Health and readiness endpoints.

  /health (liveness):
    "Is this process alive?"  Always 200 while the event loop answers.
    The body reports what the OAuth client is configured against so an
    operator can spot a missing CLIENT_ID without reading env vars.

  /ready (readiness):
    "Can this instance complete an authorization?"  503 until both
    CLIENT_ID and CLIENT_SECRET are set; without them every callback
    would fail at the token endpoint.

No outbound probe of the authorization server is made: a third-party
outage should not pull this instance out of rotation.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from app.api.dependencies import get_settings
from app.core.config import Settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(settings: Annotated[Settings, Depends(get_settings)]) -> dict:
    checks = {
        "client_credentials": "ok" if settings.has_credentials else "not_configured",
        "token_endpoint": settings.token_endpoint,
        "redirect_uri": settings.redirect_uri,
    }
    return {"status": "ok", "checks": checks}


@router.get("/ready")
async def ready(settings: Annotated[Settings, Depends(get_settings)]) -> Response:
    if not settings.has_credentials:
        return Response(status_code=503)
    return Response(status_code=200)
