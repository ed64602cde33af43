"""Input normalization applied before user values reach an email."""

from __future__ import annotations

import html
import re

import bleach

_LINE_BREAKS = re.compile(r"[\r\n]+")


def strip_markup(value: str) -> str:
    """Remove tags, returning plain text.

    bleach escapes what it keeps and the output goes into plain text, so the
    result is unescaped. Unescaping can reassemble a tag from nested or
    entity-encoded pieces, so clean again until nothing changes.
    """
    previous = None
    while value != previous:
        previous = value
        cleaned = bleach.clean(
            value, tags=[], attributes={}, strip=True, strip_comments=True
        )
        value = html.unescape(cleaned)
    return value


def sanitize(raw: str | None, max_length: int = 1000) -> str:
    """Trim, drop tags, truncate, then fold CR/LF runs into one space.

    Line breaks are removed last so nothing can smuggle a header line into
    the subject or body.
    """
    value = (raw or "").strip()
    value = strip_markup(value)
    value = value[:max_length]
    return _LINE_BREAKS.sub(" ", value)


def sanitize_fields(fields: dict[str, str], limits: dict[str, int]) -> dict[str, str]:
    return {
        name: sanitize(value, limits.get(name, 1000)) for name, value in fields.items()
    }
