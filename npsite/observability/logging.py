from __future__ import annotations

import logging
from logging.config import dictConfig

from asgi_correlation_id.context import correlation_id
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "npsite"

# event_action tags contact outcomes (contact_sent, contact_rate_limited, ...)
LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s "
    "%(message)s %(correlation_id)s %(service)s %(event_action)s"
)


class ContactContextFilter(logging.Filter):
    """Stamp request correlation ID, service name and contact event on records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get() or "unknown"
        record.service = SERVICE_NAME
        if not hasattr(record, "event_action"):
            record.event_action = None
        return True


def json_formatter() -> jsonlogger.JsonFormatter:
    return jsonlogger.JsonFormatter(LOG_FORMAT)


def configure_logging(level: str = "INFO") -> None:
    level = level.upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"contact_context": {"()": ContactContextFilter}},
            "formatters": {"json": {"()": json_formatter}},
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "filters": ["contact_context"],
                }
            },
            "root": {"handlers": ["default"], "level": level},
            "loggers": {
                SERVICE_NAME: {"level": level},
                "uvicorn.error": {
                    "handlers": ["default"],
                    "level": level,
                    "propagate": False,
                },
                "uvicorn.access": {
                    "handlers": ["default"],
                    "level": level,
                    "propagate": False,
                },
            },
        }
    )
