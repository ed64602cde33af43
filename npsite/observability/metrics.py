from __future__ import annotations

import time
from collections.abc import Callable

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from npsite.exceptions import (
    AbuseRejected,
    BotDeception,
    ConfigurationError,
    ContactError,
    TransportError,
    ValidationFailed,
)

REQUEST_COUNTER = Counter(
    "npsite_request_total",
    "Total HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "npsite_request_duration_seconds",
    "HTTP request latency",
    ["method", "path"],
)
CONTACT_SUBMISSIONS = Counter(
    "npsite_contact_submissions_total",
    "Contact form submissions by outcome",
    ["outcome"],
)
DEPLOY_TIMESTAMP = Gauge(
    "app_deploy_timestamp_seconds",
    "Unix timestamp of current deployment (set on startup)",
)

DEPLOY_TIMESTAMP.set_to_current_time()

_OUTCOMES: dict[type[ContactError], str] = {
    BotDeception: "bot",
    AbuseRejected: "rate_limited",
    ValidationFailed: "invalid",
    ConfigurationError: "config_error",
    TransportError: "transport_error",
}


def record_contact_outcome(error: ContactError | None) -> None:
    """Count one finished submission; ``None`` means it was delivered."""
    outcome = "sent" if error is None else _OUTCOMES.get(type(error), "error")
    CONTACT_SUBMISSIONS.labels(outcome).inc()


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect Prometheus metrics for each request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start
        route = request.scope.get("route")
        path_template = getattr(route, "path", request.url.path)
        REQUEST_COUNTER.labels(
            request.method, path_template, response.status_code
        ).inc()
        REQUEST_LATENCY.labels(request.method, path_template).observe(duration)
        return response


def metrics_response() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
