"""Tests for npsite/security/sanitize.py."""

from __future__ import annotations

import pytest

from npsite.security.sanitize import sanitize, sanitize_fields, strip_markup


class TestSanitize:
    @pytest.mark.parametrize(
        "raw",
        [
            "line one\nline two",
            "line one\r\nline two",
            "Bob\r\n\r\nBcc: victim@example.com",
            "trailing\r",
        ],
    )
    def test_output_has_no_line_breaks(self, raw):
        clean = sanitize(raw, 200)
        assert "\r" not in clean
        assert "\n" not in clean

    def test_line_break_runs_collapse_to_one_space(self):
        assert sanitize("Bob\r\n\r\nBcc: x@y.com", 200) == "Bob Bcc: x@y.com"

    def test_tags_removed(self):
        clean = sanitize("<b>Hello</b> <script>alert(1)</script>there", 200)
        assert "<" not in clean
        assert ">" not in clean
        assert "Hello" in clean
        assert "there" in clean

    def test_comments_removed(self):
        assert sanitize("<!-- tracking -->Acme", 100) == "Acme"

    def test_entities_are_not_left_escaped(self):
        assert sanitize("Smith & Sons", 100) == "Smith & Sons"

    def test_long_value_truncated_to_exact_limit(self):
        assert len(sanitize("x" * 150, 100)) == 100

    def test_short_value_untouched(self):
        assert sanitize("  Acme Logistics  ", 200) == "Acme Logistics"

    def test_none_becomes_empty(self):
        assert sanitize(None) == ""


def test_strip_markup_keeps_text_between_tags():
    assert strip_markup("<p>Hi <em>there</em></p>") == "Hi there"


def test_sanitize_fields_uses_per_field_limits():
    clean = sanitize_fields(
        {"name": "n" * 150, "message": "m" * 150, "other": "o" * 1200},
        {"name": 100, "message": 2000},
    )
    assert len(clean["name"]) == 100
    assert len(clean["message"]) == 150
    assert len(clean["other"]) == 1000


@pytest.mark.parametrize(
    "raw",
    [
        "<<b>script>alert(1)<</b>/script>",
        "&lt;script&gt;alert(1)&lt;/script&gt;",
        "&amp;lt;script&amp;gt;alert(1)&amp;lt;/script&amp;gt;",
    ],
)
def test_reassembled_tags_do_not_survive(raw):
    clean = sanitize(raw, 200)
    assert "<script" not in clean
    assert "</script" not in clean
    assert "alert(1)" in clean
