"""Server side of a contact submission, from abuse screening to the log line."""

from __future__ import annotations

import logging

from npsite.config import Settings
from npsite.exceptions import (
    GENERIC_SUCCESS,
    ConfigurationError,
    ContactError,
    TransportError,
    ValidationFailed,
)
from npsite.observability.metrics import record_contact_outcome
from npsite.schemas.contact import (
    CONTACT_RULES,
    REQUIRED_FIELDS,
    SANITIZE_LIMITS,
    ContactResponse,
    SubmissionRequest,
)
from npsite.security.abuse import AbuseGuard
from npsite.security.sanitize import sanitize, sanitize_fields
from npsite.services.mailer import MailDispatcher, build_message
from npsite.services.submission_log import SubmissionLog
from npsite.services.validation import is_affirmative, validate_submission

logger = logging.getLogger(__name__)

CONSENT_REQUIRED = "You must acknowledge the B2B-only policy"


def _check_required(submission: SubmissionRequest) -> None:
    fields = submission.fields()
    for name in REQUIRED_FIELDS:
        value = fields[name]
        if isinstance(value, str):
            value = value.strip()
        if not value:
            raise ValidationFailed(f"Missing required field: {name}", field=name)

    if not is_affirmative(submission.consent):
        raise ValidationFailed(CONSENT_REQUIRED, field="consent")

    errors = validate_submission(fields, CONTACT_RULES)
    if errors:
        field, message = next(iter(errors.items()))
        raise ValidationFailed(message, field=field)


def _sanitized(submission: SubmissionRequest) -> SubmissionRequest:
    text_fields = {
        name: value
        for name, value in submission.fields().items()
        if name in SANITIZE_LIMITS and isinstance(value, str)
    }
    clean = sanitize_fields(text_fields, SANITIZE_LIMITS)
    return SubmissionRequest(
        **clean,
        consent=True,
        caller_id=sanitize(submission.caller_id, 64),
        user_agent=sanitize(submission.user_agent, 512),
        received_at=submission.received_at,
    )


def _check_sanitized(submission: SubmissionRequest) -> None:
    # Stripping markup can shrink a value below its minimum or empty it.
    errors = validate_submission(submission.fields(), CONTACT_RULES)
    if errors:
        field, message = next(iter(errors.items()))
        raise ValidationFailed(message, field=field)


class ContactPipeline:
    def __init__(
        self,
        settings: Settings,
        guard: AbuseGuard,
        dispatcher: MailDispatcher,
        submission_log: SubmissionLog,
    ) -> None:
        self.settings = settings
        self.guard = guard
        self.dispatcher = dispatcher
        self.submission_log = submission_log

    async def handle(
        self, submission: SubmissionRequest, now: float | None = None
    ) -> ContactResponse:
        try:
            response = await self._handle(submission, now)
        except ContactError as exc:
            record_contact_outcome(exc)
            raise
        except Exception as exc:
            logger.exception("Unexpected error while handling contact submission")
            error = ContactError(detail=f"{exc.__class__.__name__}: {exc}")
            record_contact_outcome(error)
            raise error from exc
        record_contact_outcome(None)
        return response

    async def _handle(
        self, submission: SubmissionRequest, now: float | None
    ) -> ContactResponse:
        missing = self.settings.missing_mail_settings
        if missing:
            logger.error(
                "Contact endpoint misconfigured, missing %s",
                ", ".join(missing),
                extra={"event_action": "contact_missing_config"},
            )
            raise ConfigurationError(detail=f"missing settings: {', '.join(missing)}")

        self.guard.screen(submission, now)
        _check_required(submission)
        clean = _sanitized(submission)
        _check_sanitized(clean)

        result = await self.dispatcher.send(build_message(clean, self.settings))
        if not result.sent:
            logger.error(
                "Contact form error: %s",
                result.reason,
                extra={"event_action": "contact_email_failed"},
            )
            raise TransportError(detail=result.reason)

        self.submission_log.record(clean.organization)
        logger.info("Contact submission delivered", extra={"event_action": "contact_sent"})
        return ContactResponse(success=True, message=GENERIC_SUCCESS)
