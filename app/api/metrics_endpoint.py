"""Prometheus scrape endpoint.

Returns every metric from app/core/metrics.py in the text exposition
format, e.g.:

  oauth_token_exchanges_total{result="success"} 12.0
  oauth_callback_outcomes_total{outcome="state_mismatch"} 1.0

SECURITY NOTE: restrict /metrics to the scraper in production (separate
port or network policy).  Outcome counts reveal how the flow is used.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
