from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.api.health import router as health_router
from app.api.index import router as index_router
from app.api.metrics_endpoint import router as metrics_router
from app.api.oauth import router as oauth_router
from app.core.config import SETTINGS
from app.core.logging import setup_logging
from app.middleware.metrics import MetricsMiddleware
from app.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(
    SETTINGS.log_level,
    json_format=SETTINGS.log_json,
    redact=(SETTINGS.client_secret,),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # One pooled client for every token exchange; per-call timeouts are
    # passed at request time.
    async with httpx.AsyncClient(follow_redirects=False) as http_client:
        app.state.http_client = http_client
        yield
    app.state.http_client = None


# only app setup + router registration

app = FastAPI(
    title="oauth2-client-sample",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(index_router)
app.include_router(oauth_router)

if not SETTINGS.has_credentials:
    logger.warning(
        "CLIENT_ID/CLIENT_SECRET not set; token exchanges will be rejected upstream"
    )

logger.info(
    "oauth2-client-sample started  env=%s log_level=%s port=%d redirect_uri=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.redirect_uri,
)
