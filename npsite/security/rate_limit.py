"""Rate limiting: slowapi route limits plus the contact form's sliding window."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Protocol

from slowapi import Limiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

# Coarse per-route limits for page and content routes.
limiter = Limiter(key_func=get_remote_address)


class RateDecision(str, Enum):
    ALLOWED = "allowed"
    RATE_LIMITED = "rate_limited"


class RateWindowStore(Protocol):
    """Keyed storage for the timestamps of accepted attempts."""

    def load(self, key: str) -> list[float]: ...

    def save(self, key: str, timestamps: list[float]) -> None: ...

    def evict(self, is_idle: Callable[[list[float]], bool]) -> int: ...


class MemoryRateWindowStore:
    def __init__(self) -> None:
        self._windows: dict[str, list[float]] = {}

    def __len__(self) -> int:
        return len(self._windows)

    def load(self, key: str) -> list[float]:
        return list(self._windows.get(key, []))

    def save(self, key: str, timestamps: list[float]) -> None:
        self._windows[key] = list(timestamps)

    def evict(self, is_idle: Callable[[list[float]], bool]) -> int:
        idle = [key for key, window in self._windows.items() if is_idle(window)]
        for key in idle:
            del self._windows[key]
        return len(idle)


class FileRateWindowStore:
    """One JSON array per caller under ``directory``.

    File names are ``contact_rate_<md5(key)>`` so raw addresses never hit
    the filesystem.
    """

    prefix = "contact_rate_"

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        digest = hashlib.md5(key.encode("utf-8"), usedforsecurity=False).hexdigest()
        return self.directory / f"{self.prefix}{digest}"

    def load(self, key: str) -> list[float]:
        return self._read(self.path_for(key))

    def _read(self, path: Path) -> list[float]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError):
            logger.warning("Discarding unreadable rate window %s", path.name)
            return []
        if not isinstance(data, list):
            return []
        return [float(ts) for ts in data if isinstance(ts, (int, float))]

    def save(self, key: str, timestamps: list[float]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path_for(key).write_text(json.dumps(timestamps), encoding="utf-8")

    def evict(self, is_idle: Callable[[list[float]], bool]) -> int:
        if not self.directory.is_dir():
            return 0
        removed = 0
        for path in self.directory.glob(f"{self.prefix}*"):
            if is_idle(self._read(path)):
                path.unlink(missing_ok=True)
                removed += 1
        return removed


class SlidingWindowRateLimiter:
    """Allow at most ``limit`` accepted attempts per caller per ``period`` seconds.

    Rejected attempts are not recorded. ``check`` holds a process-wide lock
    around the read-compact-append cycle; processes sharing a
    ``FileRateWindowStore`` can still both pass the count check.
    """

    def __init__(
        self,
        store: RateWindowStore,
        limit: int = 5,
        period: float = 3600,
        clock: Callable[[], float] = time.time,
        sweep_every: int = 0,
    ) -> None:
        self.store = store
        self.limit = limit
        self.period = period
        self.clock = clock
        self.sweep_every = sweep_every
        self._lock = threading.Lock()
        self._checks = 0

    def _live(self, timestamps: list[float], now: float) -> list[float]:
        return [ts for ts in timestamps if now - ts < self.period]

    def check(self, caller_id: str, now: float | None = None) -> RateDecision:
        now = self.clock() if now is None else now
        with self._lock:
            window = self._live(self.store.load(caller_id), now)
            if len(window) >= self.limit:
                self.store.save(caller_id, window)
                decision = RateDecision.RATE_LIMITED
            else:
                window.append(now)
                self.store.save(caller_id, window)
                decision = RateDecision.ALLOWED
            self._checks += 1
            due = bool(self.sweep_every) and self._checks % self.sweep_every == 0
        if due:
            self.sweep(now)
        return decision

    def sweep(self, now: float | None = None) -> int:
        """Drop windows with no live entries. Returns how many were removed."""
        now = self.clock() if now is None else now
        with self._lock:
            removed = self.store.evict(lambda window: not self._live(window, now))
        if removed:
            logger.info("Evicted %d idle rate windows", removed)
        return removed
