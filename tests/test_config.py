"""Tests for npsite/config.py."""

import pytest
from pydantic import ValidationError

from npsite.config import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestAllowedOrigins:
    def test_comma_separated(self):
        s = _settings(allowed_origins="https://a.example, https://b.example,")
        assert s.cors_origins == ["https://a.example", "https://b.example"]

    def test_json_list(self):
        s = _settings(allowed_origins='["https://a.example"]')
        assert s.cors_origins == ["https://a.example"]

    def test_blank_disables_cors(self):
        assert _settings(allowed_origins="  ").cors_origins == []


class TestMailSettings:
    def test_missing_settings_listed(self):
        s = _settings(smtp_host=None, smtp_from=None, smtp_to="owner@consulting.test")
        assert s.missing_mail_settings == ["smtp_host", "smtp_from"]
        assert not s.mail_configured

    def test_complete(self):
        s = _settings(
            smtp_host="smtp.test.invalid",
            smtp_from="contact@consulting.test",
            smtp_to="owner@consulting.test",
        )
        assert s.missing_mail_settings == []
        assert s.mail_configured

    def test_unknown_transport_rejected(self):
        with pytest.raises(ValidationError):
            _settings(mail_transport="sendmail")


def test_rate_limit_must_be_positive():
    with pytest.raises(ValidationError):
        _settings(rate_limit=0)


def test_production_flag():
    assert _settings(environment="production").is_production
    assert not _settings(environment="development").is_production
