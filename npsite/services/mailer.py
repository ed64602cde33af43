"""Outbound mail for contact submissions.

Two transports are available and one is picked from settings at startup:
``aiosmtplib`` (default) or the standard library ``smtplib`` run in a worker
thread. Both speak authenticated SMTP with implicit TLS or STARTTLS.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, formatdate, make_msgid
from typing import Protocol

import aiosmtplib

from npsite.config import Settings
from npsite.schemas.contact import SubmissionRequest

logger = logging.getLogger(__name__)

BODY_TEMPLATE = """New Contact Form Submission
============================

Name: {name}
Organization: {organization}
Role/Title: {role}
Email: {email}
Phone: {phone}

Message:
---------
{message}

---
Submitted: {submitted}
IP: {caller_id}
User Agent: {user_agent}"""


@dataclass(frozen=True)
class OutboundMessage:
    subject: str
    body: str
    reply_to: str
    from_addr: str
    to_addr: str
    from_name: str = ""

    def to_email(self) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self.from_name, self.from_addr))
        msg["To"] = self.to_addr
        msg["Reply-To"] = self.reply_to
        msg["Subject"] = self.subject
        msg["Date"] = formatdate(localtime=False)
        msg["Message-ID"] = make_msgid()
        msg.set_content(self.body)
        return msg


def build_message(submission: SubmissionRequest, settings: Settings) -> OutboundMessage:
    """Compose the notification for an already sanitized submission."""
    subject = (
        f"New Consultation Request from {submission.name} - {submission.organization}"
    )
    body = BODY_TEMPLATE.format(
        name=submission.name,
        organization=submission.organization,
        role=submission.role,
        email=submission.email,
        phone=submission.phone,
        message=submission.message,
        submitted=submission.received_at.isoformat().replace("+00:00", "Z"),
        caller_id=submission.caller_id,
        user_agent=submission.user_agent,
    )
    return OutboundMessage(
        subject=subject,
        body=body,
        reply_to=submission.email,
        from_addr=settings.smtp_from or "",
        from_name=settings.smtp_from_name,
        to_addr=settings.smtp_to or "",
    )


@dataclass(frozen=True)
class DeliveryResult:
    sent: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> DeliveryResult:
        return cls(sent=True)

    @classmethod
    def failed(cls, reason: str) -> DeliveryResult:
        return cls(sent=False, reason=reason)


class MailTransport(Protocol):
    async def send(self, message: EmailMessage) -> None: ...


class AioSmtpTransport:
    def __init__(self, settings: Settings) -> None:
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.passwd = settings.smtp_pass
        self.use_ssl = settings.smtp_ssl
        self.use_starttls = settings.smtp_starttls and not settings.smtp_ssl
        self.timeout = settings.smtp_timeout

    async def send(self, message: EmailMessage) -> None:
        await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.user or None,
            password=self.passwd if self.user else None,
            use_tls=self.use_ssl,
            start_tls=self.use_starttls,
            timeout=self.timeout,
            tls_context=ssl.create_default_context(),
        )


class SmtpLibTransport:
    def __init__(self, settings: Settings) -> None:
        self.host = settings.smtp_host or ""
        self.port = settings.smtp_port
        self.user = settings.smtp_user
        self.passwd = settings.smtp_pass
        self.use_ssl = settings.smtp_ssl
        self.use_starttls = settings.smtp_starttls
        self.timeout = settings.smtp_timeout

    async def send(self, message: EmailMessage) -> None:
        await asyncio.to_thread(self._send_blocking, message)

    def _send_blocking(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self.use_ssl:
            with smtplib.SMTP_SSL(
                self.host, self.port, context=context, timeout=self.timeout
            ) as smtp:
                if self.user:
                    smtp.login(self.user, self.passwd or "")
                smtp.send_message(message)
            return

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_starttls:
                smtp.starttls(context=context)
            if self.user:
                smtp.login(self.user, self.passwd or "")
            smtp.send_message(message)


def create_transport(settings: Settings) -> MailTransport:
    if settings.mail_transport == "smtplib":
        return SmtpLibTransport(settings)
    return AioSmtpTransport(settings)


class MailDispatcher:
    """Send one message through the configured transport, never raising."""

    def __init__(self, transport: MailTransport, timeout: float = 10.0) -> None:
        self.transport = transport
        self.timeout = timeout

    async def send(self, message: OutboundMessage) -> DeliveryResult:
        try:
            await asyncio.wait_for(
                self.transport.send(message.to_email()), timeout=self.timeout
            )
        except TimeoutError:
            return DeliveryResult.failed("timeout")
        except (aiosmtplib.SMTPException, smtplib.SMTPException, OSError) as exc:
            return DeliveryResult.failed(f"{exc.__class__.__name__}: {exc}")
        return DeliveryResult.ok()
