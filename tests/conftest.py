"""Test fixtures for the contact pipeline and the FastAPI app."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from email.message import EmailMessage
from pathlib import Path

TESTS_ROOT = Path(__file__).parent

# Configure SMTP *before* importing npsite so the module-level settings see a
# complete mail configuration and never touch a real rate-limit directory.
os.environ.setdefault("SMTP_HOST", "smtp.test.invalid")
os.environ.setdefault("SMTP_FROM", "contact@consulting.test")
os.environ.setdefault("SMTP_TO", "owner@consulting.test")
os.environ.setdefault("RATE_STORE", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("PUBLIC_DIR", str(TESTS_ROOT.parent / "public"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from npsite.config import Settings, settings  # noqa: E402
from npsite.main import app  # noqa: E402
from npsite.routers.contact import get_contact_pipeline  # noqa: E402
from npsite.security.abuse import AbuseGuard  # noqa: E402
from npsite.security.rate_limit import (  # noqa: E402
    MemoryRateWindowStore,
    SlidingWindowRateLimiter,
    limiter,
)
from npsite.services.contact_pipeline import ContactPipeline  # noqa: E402
from npsite.services.mailer import MailDispatcher  # noqa: E402
from npsite.services.submission_log import SubmissionLog  # noqa: E402

# Disable slowapi route limits to prevent cross-test 429 flakes
limiter.enabled = False

START_TIME = 1_700_000_000.0

VALID_FORM = {
    "name": "Nadia Park",
    "organization": "Acme Logistics",
    "role": "Head of Operations",
    "email": "user@example.com",
    "phone": "+1 (555) 010-2030",
    "message": "We would like to discuss an operations review.",
    "consent": "on",
    "website": "",
}


class FakeClock:
    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport:
    """Mail transport double that keeps every message it is handed."""

    def __init__(self) -> None:
        self.messages: list[EmailMessage] = []
        self.error: Exception | None = None

    async def send(self, message: EmailMessage) -> None:
        if self.error is not None:
            raise self.error
        self.messages.append(message)


@dataclass
class ContactHarness:
    pipeline: ContactPipeline
    transport: RecordingTransport
    clock: FakeClock
    store: MemoryRateWindowStore
    log_path: Path
    settings: Settings = field(default_factory=lambda: settings)

    def log_lines(self) -> list[str]:
        if not self.log_path.exists():
            return []
        return self.log_path.read_text(encoding="utf-8").splitlines()


def build_harness(
    log_path: Path, app_settings: Settings = settings, limit: int = 5
) -> ContactHarness:
    transport = RecordingTransport()
    clock = FakeClock()
    store = MemoryRateWindowStore()
    rate_limiter = SlidingWindowRateLimiter(store, limit=limit, period=3600, clock=clock)
    pipeline = ContactPipeline(
        settings=app_settings,
        guard=AbuseGuard(rate_limiter),
        dispatcher=MailDispatcher(transport, timeout=1.0),
        submission_log=SubmissionLog(log_path),
    )
    return ContactHarness(
        pipeline=pipeline,
        transport=transport,
        clock=clock,
        store=store,
        log_path=log_path,
        settings=app_settings,
    )


@pytest.fixture
def contact(tmp_path):
    return build_harness(tmp_path / "logs" / "contact.log")


@pytest.fixture
def client(contact):
    app.dependency_overrides[get_contact_pipeline] = lambda: contact.pipeline
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_contact_pipeline, None)


@pytest.fixture
def valid_form() -> dict[str, str]:
    return dict(VALID_FORM)
