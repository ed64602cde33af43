"""Tests for npsite/services/submission_log.py."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from npsite.services.submission_log import SubmissionLog

WHEN = datetime(2026, 3, 1, 9, 30, 5, tzinfo=UTC)


def test_record_writes_one_line(tmp_path):
    log = SubmissionLog(tmp_path / "contact.log")
    assert log.record("Acme Logistics", WHEN)
    assert (tmp_path / "contact.log").read_text() == (
        "2026-03-01 09:30:05 | SUCCESS | From: Acme Logistics\n"
    )


def test_record_appends(tmp_path):
    log = SubmissionLog(tmp_path / "contact.log")
    log.record("First Co", WHEN)
    log.record("Second Co", WHEN)
    lines = (tmp_path / "contact.log").read_text().splitlines()
    assert [line.rsplit("From: ", 1)[1] for line in lines] == ["First Co", "Second Co"]


def test_record_creates_parent_directory(tmp_path):
    log = SubmissionLog(tmp_path / "data" / "logs" / "contact.log")
    assert log.record("Acme", WHEN)
    assert (tmp_path / "data" / "logs" / "contact.log").exists()


def test_record_defaults_to_now(tmp_path):
    log = SubmissionLog(tmp_path / "contact.log")
    log.record("Acme")
    line = (tmp_path / "contact.log").read_text()
    assert line.startswith(f"{datetime.now(UTC):%Y-%m-%d}")


def test_write_failure_is_swallowed_and_logged(tmp_path, caplog):
    # A directory in place of the file makes open() fail.
    target = tmp_path / "contact.log"
    target.mkdir()
    log = SubmissionLog(target)
    with caplog.at_level(logging.WARNING, logger="npsite.services.submission_log"):
        assert log.record("Acme", WHEN) is False
    assert "Failed to write submission log" in caplog.text
