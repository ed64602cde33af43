"""Application settings for the site server and contact endpoint."""

from __future__ import annotations

import json
import tempfile
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration entrypoint for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True

    # Server
    allowed_origins: list[str] = [
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]
    trust_forwarded_for: bool = False

    # Observability
    log_level: str = "INFO"
    metrics_username: str = "prometheus"
    metrics_password: str | None = None

    # Static site and content
    public_dir: str = "public"
    content_file: str = "public/content/content.json"

    # SMTP
    smtp_host: str | None = None
    smtp_port: int = 465
    smtp_user: str | None = None
    smtp_pass: str | None = None
    smtp_from: str | None = None
    smtp_from_name: str = "Website Contact Form"
    smtp_to: str | None = None
    smtp_ssl: bool = True
    smtp_starttls: bool = False
    smtp_timeout: float = 10.0
    mail_transport: Literal["aiosmtplib", "smtplib"] = "aiosmtplib"

    # Abuse control
    rate_limit: int = Field(default=5, ge=1)
    rate_period: int = Field(default=3600, ge=1)
    rate_store: Literal["memory", "file"] = "file"
    rate_store_dir: str = Field(default_factory=tempfile.gettempdir)
    rate_sweep_every: int = Field(default=1000, ge=0)

    # Submission log
    submission_log_path: str = "data/contact.log"

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: str | list[str] | None) -> list[str]:
        """Normalize ALLOWED_ORIGINS env input into a list."""
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return []
            if raw.startswith("["):
                try:
                    parsed = json.loads(raw)
                    if isinstance(parsed, list):
                        return parsed
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in raw.split(",") if item.strip()]
        return []

    @property
    def is_production(self) -> bool:
        """Return True when running in production."""
        return self.environment == "production"

    @property
    def cors_origins(self) -> list[str]:
        """Expose allowed CORS origins for middleware wiring."""
        return self.allowed_origins

    @property
    def missing_mail_settings(self) -> list[str]:
        """Names of the SMTP settings the contact endpoint cannot run without."""
        required = {
            "smtp_host": self.smtp_host,
            "smtp_from": self.smtp_from,
            "smtp_to": self.smtp_to,
        }
        return [name for name, value in required.items() if not value]

    @property
    def mail_configured(self) -> bool:
        return not self.missing_mail_settings


settings = Settings()
