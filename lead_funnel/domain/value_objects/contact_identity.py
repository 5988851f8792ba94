"""Contact identity value object and validators."""

import re
from dataclasses import dataclass
from typing import Optional

_PHONE_SEPARATORS = re.compile(r"[\s\-()]")
_LOCAL_PHONE = re.compile(r"^0\d{8,9}$")
_INTERNATIONAL_PHONE = re.compile(r"^(?:\+972|972)\d{8,9}$")
_COUNTRY_PREFIX = re.compile(r"^\+?972")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_phone(value: str) -> str:
    """
    Reduce a phone number to its canonical local form.

    Spaces, dashes and parentheses are stripped, and a `+972`/`972`
    number is rewritten with a leading `0`, so `050-123-4567`,
    `+972501234567` and `972501234567` all become `0501234567`.

    Args:
        value: Raw phone input

    Returns:
        Canonical phone string (unrecognised shapes are only stripped)
    """
    cleaned = _PHONE_SEPARATORS.sub("", value or "")
    if _INTERNATIONAL_PHONE.match(cleaned):
        return "0" + _COUNTRY_PREFIX.sub("", cleaned)
    return cleaned


def is_valid_phone(value: Optional[str]) -> bool:
    """
    Check a phone number against the local or +972 international format.

    Args:
        value: Raw phone input

    Returns:
        True for `0` + 8-9 digits or `+972`/`972` + 8-9 digits
    """
    if not value:
        return False
    cleaned = normalize_phone(value)
    return bool(_LOCAL_PHONE.match(cleaned) or _INTERNATIONAL_PHONE.match(cleaned))


def is_valid_email(value: Optional[str]) -> bool:
    """
    Check an email address has a single-@ `local@domain.tld` shape.

    Args:
        value: Raw email input

    Returns:
        True if the address looks deliverable
    """
    if not value:
        return False
    return bool(_EMAIL.match(value.strip()))


def to_whatsapp_number(phone: Optional[str]) -> str:
    """
    Format a phone number for wa.me links (country code, no leading zero).

    Args:
        phone: Phone number as stored on the lead

    Returns:
        Digits-only international number, or empty string if no phone
    """
    if not phone:
        return ""
    cleaned = normalize_phone(phone).lstrip("+")
    if cleaned.startswith("972"):
        return cleaned
    if cleaned.startswith("0"):
        return f"972{cleaned[1:]}"
    return f"972{cleaned}"


@dataclass(frozen=True)
class ContactIdentity:
    """Name, phone and email collected from a visitor."""

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    def is_complete(self) -> bool:
        """Check all three identity fields are present."""
        return all([self.name, self.phone, self.email])
