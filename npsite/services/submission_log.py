from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class SubmissionLog:
    """Append-only record of delivered submissions (organization name only)."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    @staticmethod
    def format_entry(organization: str, timestamp: datetime) -> str:
        return f"{timestamp:%Y-%m-%d %H:%M:%S} | SUCCESS | From: {organization}\n"

    def record(self, organization: str, timestamp: datetime | None = None) -> bool:
        """Append one line; failures are logged and reported as ``False``."""
        entry = self.format_entry(organization, timestamp or datetime.now(UTC))
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(entry)
        except OSError as exc:
            logger.warning("Failed to write submission log: %s", exc)
            return False
        return True
