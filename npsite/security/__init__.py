"""Security façade: rate limiting, abuse screening, sanitizing and headers."""

from npsite.middleware.security import SecurityHeadersMiddleware  # noqa: F401

from .abuse import AbuseGuard, caller_identifier  # noqa: F401
from .rate_limit import (  # noqa: F401
    FileRateWindowStore,
    MemoryRateWindowStore,
    RateDecision,
    SlidingWindowRateLimiter,
    limiter,
)
from .sanitize import sanitize, strip_markup  # noqa: F401

__all__ = [
    "AbuseGuard",
    "caller_identifier",
    "FileRateWindowStore",
    "MemoryRateWindowStore",
    "RateDecision",
    "SlidingWindowRateLimiter",
    "limiter",
    "sanitize",
    "strip_markup",
    "SecurityHeadersMiddleware",
]
