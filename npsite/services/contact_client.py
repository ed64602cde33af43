"""Client-side driver for the contact form.

Mirrors what the browser script does: validate locally, refuse to send
twice at once, post the form and turn the JSON reply into a UI state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum

import httpx

from npsite.schemas.contact import HONEYPOT_FIELD
from npsite.services.validation import validate_submission

logger = logging.getLogger(__name__)

SUCCESS_FALLBACK = "Message sent successfully"
SERVER_ERROR_FALLBACK = "Something went wrong. Please try again."
NETWORK_ERROR = "Unable to send message. Please try again or email us directly."


class FormState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    INVALID = "invalid"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class SubmissionInProgress(RuntimeError):
    pass


@dataclass
class SubmissionOutcome:
    state: FormState
    message: str | None = None
    errors: dict[str, str] = field(default_factory=dict)
    focus: str | None = None


class ContactFormController:
    def __init__(
        self,
        endpoint: str,
        client: httpx.Client | None = None,
        on_state: Callable[[FormState], None] | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.endpoint = endpoint
        self.client = client or httpx.Client(timeout=timeout)
        self.on_state = on_state
        self.state = FormState.IDLE
        self.submit_enabled = True

    def _transition(self, state: FormState) -> None:
        self.state = state
        if self.on_state is not None:
            self.on_state(state)

    def submit(self, fields: Mapping[str, str | bool]) -> SubmissionOutcome:
        if self.state is FormState.SUBMITTING:
            raise SubmissionInProgress("A submission is already in flight")

        self._transition(FormState.VALIDATING)
        errors = validate_submission(fields)
        if errors:
            self._transition(FormState.INVALID)
            self._transition(FormState.IDLE)
            return SubmissionOutcome(
                FormState.INVALID, errors=errors, focus=next(iter(errors))
            )

        if fields.get(HONEYPOT_FIELD):
            self._transition(FormState.SUCCESS)
            self._transition(FormState.IDLE)
            return SubmissionOutcome(FormState.SUCCESS, message=SUCCESS_FALLBACK)

        self.submit_enabled = False
        self._transition(FormState.SUBMITTING)
        try:
            outcome = self._post(fields)
        except Exception:
            self._transition(FormState.ERROR)
            self._transition(FormState.IDLE)
            raise
        finally:
            self.submit_enabled = True
        self._transition(outcome.state)
        self._transition(FormState.IDLE)
        return outcome

    def _post(self, fields: Mapping[str, str | bool]) -> SubmissionOutcome:
        data = {
            key: ("on" if value is True else value)
            for key, value in fields.items()
            if value is not False
        }
        try:
            response = self.client.post(self.endpoint, data=data)
            result = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.error("Form submission error: %s", exc)
            return SubmissionOutcome(FormState.ERROR, message=NETWORK_ERROR)

        if isinstance(result, dict) and result.get("success") is True:
            return SubmissionOutcome(
                FormState.SUCCESS, message=result.get("message") or SUCCESS_FALLBACK
            )
        message = result.get("message") if isinstance(result, dict) else None
        return SubmissionOutcome(
            FormState.ERROR, message=message or SERVER_ERROR_FALLBACK
        )
