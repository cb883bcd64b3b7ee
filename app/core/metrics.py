"""Application metrics using the Prometheus client library.

All metrics live here so there is one inventory of what the service
measures.  Other modules import a metric and increment/observe it at the
point of action.

HTTP metrics are fed by MetricsMiddleware for every request.  The OAuth
metrics answer the two questions an operator asks about this client:

  - How are token exchanges going?  oauth_token_exchanges_total{result}
    splits successes from timeouts, upstream 4xx/5xx, and protocol
    violations (wrong content type, missing access_token).

  - What happens to users who come back from the authorization server?
    oauth_callback_outcomes_total{outcome} counts denials, state
    mismatches, and failed exchanges.  A spike in state_mismatch usually
    means cookies are being dropped (wrong domain, Secure over http) or
    someone is replaying callback URLs.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # The callback includes a token endpoint round-trip, so the upper
    # buckets stretch to the 10s exchange timeout.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# OAuth client metrics
# ---------------------------------------------------------------------------

TOKEN_EXCHANGES = Counter(
    "oauth_token_exchanges_total",
    "Authorization code exchanges against the token endpoint by result",
    # "success", "timeout", "transport_error", "http_error",
    # "unsupported_content_type", "malformed_response", "missing_access_token"
    ["result"],
)

CALLBACK_OUTCOMES = Counter(
    "oauth_callback_outcomes_total",
    "OAuth callback requests by outcome",
    ["outcome"],  # OutcomeKind values
)
