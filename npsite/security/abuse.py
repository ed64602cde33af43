from __future__ import annotations

import logging

from starlette.requests import Request

from npsite.exceptions import AbuseRejected, BotDeception
from npsite.schemas.contact import SubmissionRequest
from npsite.security.rate_limit import RateDecision, SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


def caller_identifier(request: Request, trust_forwarded_for: bool = False) -> str:
    """Key used for rate limiting: the client address, or the first proxy hop."""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class AbuseGuard:
    """Honeypot gate followed by the per-caller sliding window."""

    def __init__(self, limiter: SlidingWindowRateLimiter) -> None:
        self.limiter = limiter

    def screen(self, submission: SubmissionRequest, now: float | None = None) -> None:
        if submission.website:
            logger.info(
                "Honeypot filled, dropping submission",
                extra={"event_action": "contact_honeypot"},
            )
            raise BotDeception()

        decision = self.limiter.check(submission.caller_id, now)
        if decision is RateDecision.RATE_LIMITED:
            logger.warning(
                "Contact rate limit hit",
                extra={"event_action": "contact_rate_limited"},
            )
            raise AbuseRejected()
