"""Site copy stored in one JSON document and read by dot-path."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


def get_nested_value(data: Any, path: str, default: Any = None) -> Any:
    """Resolve ``"business.name"`` or ``"services.0.title"`` against ``data``."""
    current = data
    for key in path.split("."):
        if isinstance(current, dict):
            current = current.get(key, _MISSING)
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            current = _MISSING
        if current is _MISSING:
            return default
    return current


class ContentStore:
    """Lazily loads the content file and re-reads it when it changes on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: dict[str, Any] | None = None
        self._mtime: float | None = None

    def load(self) -> dict[str, Any]:
        mtime = self.path.stat().st_mtime
        if self._data is None or mtime != self._mtime:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"{self.path} must contain a JSON object")
            self._data = data
            self._mtime = mtime
            logger.info("Loaded site content from %s", self.path)
        return self._data

    def get(self, path: str, default: Any = None) -> Any:
        return get_nested_value(self.load(), path, default)
