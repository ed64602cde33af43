"""Contact pipeline error taxonomy.

Every error carries the message shown to the submitter and the HTTP status it
maps to. Internal detail (missing settings, SMTP replies) stays in ``detail``
and is only ever logged.
"""

from __future__ import annotations

from fastapi import status

GENERIC_SUCCESS = "Message sent successfully"


class ContactError(Exception):
    """Base class for errors converted to the contact JSON contract."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Something went wrong. Please try again."
    success: bool = False

    def __init__(self, public_message: str | None = None, detail: str | None = None):
        self.public_message = public_message or self.public_message
        self.detail = detail
        super().__init__(detail or self.public_message)


class ValidationFailed(ContactError):
    """User-correctable input problem."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, public_message: str, field: str | None = None):
        super().__init__(public_message)
        self.field = field


class AbuseRejected(ContactError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    public_message = "Too many requests. Please try again later."


class ConfigurationError(ContactError):
    public_message = "Server configuration error"


class TransportError(ContactError):
    public_message = "Failed to send message. Please try again."


class BotDeception(ContactError):
    """Honeypot tripped: answer as if the message went out."""

    status_code = status.HTTP_200_OK
    public_message = GENERIC_SUCCESS
    success = True
