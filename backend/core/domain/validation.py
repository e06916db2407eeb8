"""
core.domain.validation — Flatten DRF serializer errors into full messages.

API clients receive validation failures as a flat, ordered list of
sentences (``["Case number can't be blank", ...]``) rather than DRF's
``{field: [message]}`` mapping.  Serializers opt in by using the shared
``error_messages`` dicts below so the per-field fragments read
naturally after the humanized field name.
"""

from __future__ import annotations

from typing import Any

from rest_framework.settings import api_settings

BLANK = "can't be blank"
INVALID = "is invalid"
TAKEN = "has already been taken"

#: ``error_messages`` for required text fields.
REQUIRED_TEXT_ERRORS: dict[str, str] = {
    "required": BLANK,
    "blank": BLANK,
    "null": BLANK,
}

#: ``error_messages`` for required date fields.
REQUIRED_DATE_ERRORS: dict[str, str] = {
    **REQUIRED_TEXT_ERRORS,
    "invalid": INVALID,
}

#: ``error_messages`` for choice fields.
CHOICE_ERRORS: dict[str, str] = {
    **REQUIRED_TEXT_ERRORS,
    "invalid_choice": INVALID,
}


def humanize(field_name: str) -> str:
    """
    ``"birth_month_year_youth"`` → ``"Birth month year youth"``.

    A trailing ``_id`` is dropped, matching how the field is presented
    to users.
    """
    text = field_name[:-3] if field_name.endswith("_id") else field_name
    text = text.replace("_", " ").strip()
    return text[:1].upper() + text[1:]


def _fragments(detail: Any) -> list[str]:
    if isinstance(detail, str):
        return [str(detail)]
    if isinstance(detail, (list, tuple)) and all(isinstance(item, str) for item in detail):
        return [str(item) for item in detail]
    # Nested serializer / list-field errors collapse to one sentence.
    return [INVALID]


def full_messages(errors: dict[str, Any]) -> list[str]:
    """
    Convert ``serializer.errors`` into an ordered list of sentences.

    Field order follows the serializer's declared field order, which is
    the order DRF collects errors in.  Duplicates are dropped.
    """
    messages: list[str] = []
    for field, detail in errors.items():
        for fragment in _fragments(detail):
            if field == api_settings.NON_FIELD_ERRORS_KEY:
                message = fragment
            else:
                message = f"{humanize(field)} {fragment}"
            if message not in messages:
                messages.append(message)
    return messages
