"""Tests for npsite/schemas/contact.py — form parsing and the response model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from starlette.datastructures import FormData, UploadFile

from npsite.schemas.contact import (
    CONTACT_RULES,
    REQUIRED_FIELDS,
    ContactResponse,
    SubmissionRequest,
)


class TestSubmissionRequest:
    """SubmissionRequest.from_form parsing."""

    def test_from_form(self, valid_form):
        submission = SubmissionRequest.from_form(
            FormData(valid_form), caller_id="203.0.113.9", user_agent="pytest"
        )
        assert submission.name == "Nadia Park"
        assert submission.consent == "on"
        assert submission.website == ""
        assert submission.caller_id == "203.0.113.9"
        assert submission.received_at.tzinfo is not None

    def test_absent_fields_default_to_empty(self):
        submission = SubmissionRequest.from_form(FormData({"name": "Nadia"}))
        assert submission.email == ""
        assert submission.consent == ""
        assert submission.caller_id == "unknown"

    def test_file_uploads_ignored(self, tmp_path):
        with open(tmp_path / "note.txt", "wb+") as handle:
            upload = UploadFile(handle, filename="note.txt")
            submission = SubmissionRequest.from_form(FormData([("message", upload)]))
        assert submission.message == ""

    def test_fields_follow_rule_order(self, valid_form):
        fields = SubmissionRequest.from_form(FormData(valid_form)).fields()
        assert list(fields) == list(CONTACT_RULES)
        assert "website" not in fields


class TestRules:
    def test_every_required_field_has_rule(self):
        for name in REQUIRED_FIELDS:
            assert CONTACT_RULES[name].required

    def test_phone_optional(self):
        assert not CONTACT_RULES["phone"].required


class TestContactResponse:
    def test_serializes(self):
        body = ContactResponse(success=True, message="Message sent successfully")
        assert body.model_dump() == {"success": True, "message": "Message sent successfully"}

    def test_missing_message_errors(self):
        with pytest.raises(ValidationError):
            ContactResponse(success=False)
