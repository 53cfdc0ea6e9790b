import pytest

from apps.common.errors import InvalidEmail, InvalidPhone
from apps.leads.utils import normalize_email, normalize_phone_number


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("+44 (7700) 900-123", "+447700900123"),
        ("07700 900123", "+07700900123"),
        ("1234567890", "+1234567890"),
    ],
)
def test_phone_keeps_digits_with_plus(raw, expected):
    assert normalize_phone_number(raw) == expected


@pytest.mark.parametrize("raw", ["", "12345", "+44 77 00", "phone"])
def test_phone_needs_ten_digits(raw):
    with pytest.raises(InvalidPhone):
        normalize_phone_number(raw)


def test_email_lowercased():
    assert normalize_email("John.Doe@Example.COM") == "john.doe@example.com"


@pytest.mark.parametrize("raw", ["", "john", "john@", "john@example", "jo hn@example.com", "a@@b.com", " john@example.com"])
def test_email_shape_enforced(raw):
    with pytest.raises(InvalidEmail):
        normalize_email(raw)


def test_phone_capped_at_fifteen_digits():
    assert normalize_phone_number("1" * 15) == "+" + "1" * 15
    with pytest.raises(InvalidPhone):
        normalize_phone_number("1" * 16)


def test_email_longer_than_column_rejected():
    local = "a" * 64
    domain = "b" * (255 - len(local) - len("@.com")) + ".com"
    raw = f"{local}@{domain}"
    assert len(raw) == 255

    with pytest.raises(InvalidEmail):
        normalize_email(raw)
