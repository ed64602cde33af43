"""Field validation for the contact form.

The server treats these checks as authoritative; the Python client runs the
same table before it sends anything. ``public/assets/js/form-handler.js``
carries a hand-kept copy of ``CONTACT_RULES`` for browsers and has to be
updated together with it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from npsite.schemas.contact import CONTACT_RULES, ValidationRule

AFFIRMATIVE_VALUES = frozenset({"on", "1", "true"})


@dataclass(frozen=True)
class FieldResult:
    valid: bool
    error_message: str | None = None


def is_affirmative(value: object) -> bool:
    """Checkbox semantics: ``True`` or one of the strings browsers send."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value in AFFIRMATIVE_VALUES


def validate_field(name: str, value: object, rule: ValidationRule) -> FieldResult:
    if rule.kind == "checkbox":
        if rule.required and not is_affirmative(value):
            return FieldResult(False, rule.message)
        return FieldResult(True)

    text = value.strip() if isinstance(value, str) else ""
    if not text:
        if rule.required:
            return FieldResult(False, rule.message)
        return FieldResult(True)

    # All checks run; the last one to fire decides the message.
    error: str | None = None
    if rule.min_length is not None and len(text) < rule.min_length:
        error = rule.message
    if rule.max_length is not None and len(text) > rule.max_length:
        error = f"Maximum {rule.max_length} characters allowed"
    if rule.pattern is not None and not rule.pattern.fullmatch(text):
        error = rule.message

    if error is None:
        return FieldResult(True)
    return FieldResult(False, error)


def validate_submission(
    fields: Mapping[str, object],
    rules: Mapping[str, ValidationRule] = CONTACT_RULES,
) -> dict[str, str]:
    """Validate every ruled field and return ``{field: message}`` for failures.

    Keys follow the rule table order, so the first key is the field a form
    should focus.
    """
    errors: dict[str, str] = {}
    for name, rule in rules.items():
        result = validate_field(name, fields.get(name, ""), rule)
        if not result.valid:
            errors[name] = result.error_message or rule.message
    return errors
