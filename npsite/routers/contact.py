from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Request, status

from npsite.config import settings
from npsite.exceptions import ValidationFailed
from npsite.schemas.contact import ContactResponse, SubmissionRequest
from npsite.security.abuse import AbuseGuard, caller_identifier
from npsite.security.rate_limit import (
    FileRateWindowStore,
    MemoryRateWindowStore,
    SlidingWindowRateLimiter,
)
from npsite.services.contact_pipeline import ContactPipeline
from npsite.services.mailer import MailDispatcher, create_transport
from npsite.services.submission_log import SubmissionLog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["contact"])

CONTACT_PATHS = ("/server/send-contact", "/api/contact")


@lru_cache
def get_contact_pipeline() -> ContactPipeline:
    if settings.rate_store == "file":
        store = FileRateWindowStore(settings.rate_store_dir)
    else:
        store = MemoryRateWindowStore()
    limiter = SlidingWindowRateLimiter(
        store,
        limit=settings.rate_limit,
        period=settings.rate_period,
        sweep_every=settings.rate_sweep_every,
    )
    return ContactPipeline(
        settings=settings,
        guard=AbuseGuard(limiter),
        dispatcher=MailDispatcher(
            create_transport(settings), timeout=settings.smtp_timeout
        ),
        submission_log=SubmissionLog(settings.submission_log_path),
    )


@router.post(CONTACT_PATHS[0], response_model=ContactResponse)
@router.post(CONTACT_PATHS[1], response_model=ContactResponse)
async def send_contact(
    request: Request,
    pipeline: ContactPipeline = Depends(get_contact_pipeline),
) -> ContactResponse:
    """Validate, screen and email a contact form submission."""
    try:
        form = await request.form()
    except Exception as exc:
        raise ValidationFailed("Unable to read form data") from exc

    submission = SubmissionRequest.from_form(
        form,
        caller_id=caller_identifier(request, settings.trust_forwarded_for),
        user_agent=request.headers.get("user-agent", ""),
    )
    return await pipeline.handle(submission)


# Claims other methods here so the static site mount never answers them.
@router.api_route(
    CONTACT_PATHS[0],
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
@router.api_route(
    CONTACT_PATHS[1],
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def contact_method_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        headers={"Allow": "POST"},
    )
