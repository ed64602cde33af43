"""Tests for npsite/observability/logging.py — JSON log records."""

from __future__ import annotations

import json
import logging

from npsite.observability.logging import ContactContextFilter, json_formatter


def _render(**extra) -> dict:
    record = logging.LogRecord(
        "npsite.services.contact_pipeline",
        logging.INFO,
        __file__,
        1,
        "Contact submission delivered",
        None,
        None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    ContactContextFilter().filter(record)
    return json.loads(json_formatter().format(record))


def test_event_action_is_emitted():
    payload = _render(event_action="contact_sent")
    assert payload["event_action"] == "contact_sent"
    assert payload["message"] == "Contact submission delivered"


def test_service_and_correlation_defaults():
    payload = _render()
    assert payload["service"] == "npsite"
    assert payload["correlation_id"] == "unknown"
    assert payload["event_action"] is None
