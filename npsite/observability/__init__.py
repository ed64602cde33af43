"""Logging and Prometheus metrics."""

from __future__ import annotations

from npsite.observability.logging import configure_logging
from npsite.observability.metrics import (
    CONTACT_SUBMISSIONS,
    MetricsMiddleware,
    metrics_response,
    record_contact_outcome,
)

__all__ = [
    "CONTACT_SUBMISSIONS",
    "MetricsMiddleware",
    "configure_logging",
    "metrics_response",
    "record_contact_outcome",
]
