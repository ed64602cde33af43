from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel

MAX_NAME_LENGTH = 100
MAX_ORGANIZATION_LENGTH = 200
MAX_ROLE_LENGTH = 100
MAX_EMAIL_LENGTH = 254
MAX_PHONE_LENGTH = 20
MAX_MESSAGE_LENGTH = 2000

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]*$")

HONEYPOT_FIELD = "website"

# Checked in this order; the first absent one is reported.
REQUIRED_FIELDS = ("name", "organization", "role", "email", "message", "consent")

# Truncation limits applied by the sanitizer.
SANITIZE_LIMITS: dict[str, int] = {
    "name": MAX_NAME_LENGTH,
    "organization": MAX_ORGANIZATION_LENGTH,
    "role": MAX_ROLE_LENGTH,
    "email": MAX_EMAIL_LENGTH,
    "phone": MAX_PHONE_LENGTH,
    "message": MAX_MESSAGE_LENGTH,
}


@dataclass(frozen=True)
class ValidationRule:
    required: bool
    message: str
    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | None = None
    kind: Literal["text", "checkbox"] = "text"


CONTACT_RULES: Mapping[str, ValidationRule] = {
    "name": ValidationRule(
        required=True,
        min_length=2,
        max_length=MAX_NAME_LENGTH,
        message="Please enter your full name",
    ),
    "organization": ValidationRule(
        required=True,
        min_length=2,
        max_length=MAX_ORGANIZATION_LENGTH,
        message="Please enter your organization name",
    ),
    "role": ValidationRule(
        required=True,
        min_length=2,
        max_length=MAX_ROLE_LENGTH,
        message="Please enter your role or title",
    ),
    "email": ValidationRule(
        required=True,
        max_length=MAX_EMAIL_LENGTH,
        pattern=EMAIL_PATTERN,
        message="Please enter a valid email address",
    ),
    "phone": ValidationRule(
        required=False,
        max_length=MAX_PHONE_LENGTH,
        pattern=PHONE_PATTERN,
        message="Please enter a valid phone number",
    ),
    "message": ValidationRule(
        required=True,
        min_length=10,
        max_length=MAX_MESSAGE_LENGTH,
        message="Please enter your message (at least 10 characters)",
    ),
    "consent": ValidationRule(
        required=True,
        kind="checkbox",
        message="Please acknowledge that you understand this is B2B only",
    ),
}


@dataclass
class SubmissionRequest:
    """One contact form POST, alive only while the request is handled."""

    name: str = ""
    organization: str = ""
    role: str = ""
    email: str = ""
    phone: str = ""
    message: str = ""
    consent: str | bool = ""
    website: str = ""
    caller_id: str = "unknown"
    user_agent: str = ""
    received_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_form(
        cls,
        form: Mapping[str, object],
        caller_id: str = "unknown",
        user_agent: str = "",
    ) -> SubmissionRequest:
        def _text(key: str) -> str:
            value = form.get(key)
            return value if isinstance(value, str) else ""

        return cls(
            name=_text("name"),
            organization=_text("organization"),
            role=_text("role"),
            email=_text("email"),
            phone=_text("phone"),
            message=_text("message"),
            consent=_text("consent"),
            website=_text(HONEYPOT_FIELD),
            caller_id=caller_id,
            user_agent=user_agent,
        )

    def fields(self) -> dict[str, str | bool]:
        """The user-submitted fields keyed as in ``CONTACT_RULES``."""
        return {
            "name": self.name,
            "organization": self.organization,
            "role": self.role,
            "email": self.email,
            "phone": self.phone,
            "message": self.message,
            "consent": self.consent,
        }


class ContactResponse(BaseModel):
    success: bool
    message: str
