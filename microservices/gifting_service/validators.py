"""
Gifting Service Primitive Validators

Total, side-effect-free helpers used by the campaign rules and the claim
form checks. None of them raise: each returns a verdict or a normalized value.
"""

import math
import re
from typing import Any, Dict, Optional

from .models import ContactFields, PhoneCountry

PERSON_NAME_MAX_LENGTH = 50
PHONE_MIN_DIGITS = 5
PHONE_MAX_DIGITS = 15
EMAIL_MAX_LENGTH = 254
EMAIL_LOCAL_MAX_LENGTH = 64
DOMAIN_LABEL_MAX_LENGTH = 63

_EMAIL_LOCAL_RE = re.compile(r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+$")
_DOMAIN_LABEL_RE = re.compile(r"^[A-Za-z0-9-]+$")
_HANDLE_RE = re.compile(r"^[a-zA-Z0-9._]+$")
_ALNUM_RE = re.compile(r"[a-zA-Z0-9]")
_DIGITS_ONLY_RE = re.compile(r"^\d*$")


def normalize_number(value: Any) -> Optional[float]:
    """Parse a number that may arrive as a string; None when missing or not finite"""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def normalize_country_name(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def sanitize_person_name(value: Optional[str]) -> str:
    if not value:
        return ""
    cleaned = re.sub(r"[0-9]", "", value)
    cleaned = re.sub(r"[^a-zA-Z\s'-]", "", cleaned)
    return cleaned[:PERSON_NAME_MAX_LENGTH]


def sanitize_phone_digits(value: Optional[str], previous: Optional[str] = "", max_length: int = PHONE_MAX_DIGITS) -> str:
    """
    Keep only digits, refusing growth once the previous value is at capacity.

    A value longer than ``max_length`` is truncated, unless the previous value
    already filled the mask, in which case the previous value is returned.
    """
    digits = re.sub(r"\D", "", value or "")
    if len(digits) <= max_length:
        return digits
    previous = previous or ""
    if len(previous) >= max_length:
        return previous
    return digits[:max_length]


def is_valid_email_address(value: Optional[str]) -> bool:
    email = (value or "").strip()
    if not email or len(email) > EMAIL_MAX_LENGTH:
        return False

    parts = email.split("@")
    if len(parts) != 2:
        return False
    local, domain = parts
    if not local or not domain:
        return False

    if len(local) > EMAIL_LOCAL_MAX_LENGTH:
        return False
    if local.startswith(".") or local.endswith(".") or ".." in local:
        return False
    if not _EMAIL_LOCAL_RE.match(local):
        return False

    labels = domain.split(".")
    if len(labels) < 2:
        return False
    for label in labels:
        if not label or len(label) > DOMAIN_LABEL_MAX_LENGTH:
            return False
        if not _DOMAIN_LABEL_RE.match(label):
            return False
        if label.startswith("-") or label.endswith("-"):
            return False

    return len(labels[-1]) >= 2


def is_valid_social_handle(value: Optional[str]) -> bool:
    if not value:
        return False
    stripped = re.sub(r"^@+", "", value)
    if not stripped:
        return False
    return bool(_ALNUM_RE.search(stripped)) and bool(_HANDLE_RE.match(stripped))


def ensure_handle_format(value: Optional[str]) -> str:
    """Format a social handle as ``@name``; empty when nothing usable remains"""
    if not value:
        return ""
    compact = re.sub(r"\s+", "", value.strip())
    without_at = re.sub(r"^@+", "", compact)
    sanitized = re.sub(r"[^a-zA-Z0-9._]", "", without_at)
    return f"@{sanitized}" if sanitized else ""


def sanitize_contact(contact: ContactFields) -> ContactFields:
    """Contact with display names stripped to letters and handles in ``@name`` form"""
    return contact.model_copy(update={
        "first_name": sanitize_person_name(contact.first_name),
        "last_name": sanitize_person_name(contact.last_name),
        "email": (contact.email or "").strip(),
        "instagram": ensure_handle_format(contact.instagram),
        "tiktok": ensure_handle_format(contact.tiktok),
    })


def phone_length_rules(country: Optional[PhoneCountry]) -> Dict[str, int]:
    """
    Digit-count bounds for a dial country, each clamped into [5, 15].

    The two bounds are clamped independently and never re-ordered, so a
    country configured with min > max keeps that inversion.
    """
    min_length = (country.min_length if country else None) or PHONE_MIN_DIGITS
    max_length = (country.max_length if country else None) or PHONE_MAX_DIGITS
    return {
        "min_length": min(max(min_length, PHONE_MIN_DIGITS), PHONE_MAX_DIGITS),
        "max_length": min(max(max_length, PHONE_MIN_DIGITS), PHONE_MAX_DIGITS),
    }


def phone_error(digits: Optional[str], country: Optional[PhoneCountry]) -> str:
    """Error message for a phone number, empty when it passes"""
    digits = digits or ""
    rules = phone_length_rules(country)
    if not _DIGITS_ONLY_RE.match(digits):
        return "Phone number must contain digits only."
    min_length, max_length = rules["min_length"], rules["max_length"]
    if len(digits) < min_length or len(digits) > max_length:
        length_range = f"{min_length}" if min_length == max_length else f"{min_length}-{max_length}"
        country_name = (country.name if country else "") or "this country"
        return f"Phone number must be {length_range} digits for {country_name}."
    return ""
