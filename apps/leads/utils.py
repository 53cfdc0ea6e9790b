"""Utility helpers for lead contact normalization."""

import re

from apps.common.errors import InvalidEmail, InvalidPayload, InvalidPhone

NON_DIGITS = re.compile(r"\D")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PHONE_DIGITS = 10
# E.164 allows at most 15 digits.
MAX_PHONE_DIGITS = 15
MAX_EMAIL_LENGTH = 254
MAX_NAME_LENGTH = 255


def normalize_phone_number(raw: str) -> str:
    """Strip everything but digits and return ``+<digits>``; needs 10-15 digits."""
    digits = NON_DIGITS.sub("", raw or "")
    if not MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS:
        raise InvalidPhone()
    return f"+{digits}"


def normalize_email(raw: str) -> str:
    if not EMAIL_PATTERN.match(raw or "") or len(raw.strip()) > MAX_EMAIL_LENGTH:
        raise InvalidEmail()
    return raw.strip().lower()


def clean_name(raw: str) -> str:
    name = (raw or "").strip()
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidPayload()
    return name
