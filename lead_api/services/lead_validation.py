"""Field rules for lead form submissions.

Each rule is evaluated independently so the client gets every problem at
once rather than the first one only.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

BUILDING_TYPES = ("nowy", "istniejący")

MIN_AREA = 20.0
MAX_AREA = 2000.0

MIN_PHONE_DIGITS = 9

REQUIRED_FIELDS = ("buildingType", "area", "location", "email", "phone")
OPTIONAL_FIELDS = (
    "currentHeating",
    "installation",
    "hasPV",
    "pvPower",
    "hasStorage",
    "storageCapacity",
    "notes",
)

MSG_BUILDING_TYPE = "Nieprawidłowy typ budynku"
MSG_AREA = "Nieprawidłowa powierzchnia"
MSG_LOCATION = "Brak województwa"
MSG_EMAIL = "Nieprawidłowy adres email"
MSG_PHONE = "Nieprawidłowy numer telefonu"

VALIDATION_SEPARATOR = ". "

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_NON_DIGIT_RE = re.compile(r"\D", re.ASCII)
_LEADING_NUMBER_RE = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def is_valid_email(email: str) -> bool:
    """Permissive shape check: ``local@domain.tld`` without whitespace.

    Examples:
        >>> is_valid_email("a@b.c")
        True
        >>> is_valid_email("a@b")
        False
        >>> is_valid_email("a b@c.d")
        False
    """
    return _EMAIL_RE.fullmatch(email) is not None


def is_valid_phone(phone: str) -> bool:
    """At least nine digits once spaces, dashes, parentheses etc. are removed.

    Examples:
        >>> is_valid_phone("+48 (12) 345-67-89")
        True
        >>> is_valid_phone("12345678")
        False
    """
    return len(_NON_DIGIT_RE.sub("", phone)) >= MIN_PHONE_DIGITS


def parse_area(value: Any) -> float | None:
    """Parse the heated area in square metres from its leading number.

    Text after the number is ignored, so "150 m2" reads as 150 and the Polish
    "120,5" as 120. Input without a leading decimal number ("m2 150",
    "nan", "_5") and non-string values yield None.

    Examples:
        >>> parse_area("150 m2")
        150.0
        >>> parse_area("1_000")
        1.0
        >>> parse_area("abc") is None
        True
    """
    if not isinstance(value, str):
        return None
    match = _LEADING_NUMBER_RE.match(value)
    if match is None:
        return None
    area = float(match.group(0))
    return area if math.isfinite(area) else None


def is_valid_area(value: Any) -> bool:
    area = parse_area(value)
    return area is not None and MIN_AREA <= area <= MAX_AREA


def _non_blank_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_lead(raw: Mapping[str, Any]) -> list[str]:
    """Run every field rule against a raw submission.

    Args:
        raw: Parsed JSON object, before sanitization.

    Returns:
        list[str]: Human-readable error messages in field order; empty when
            the submission is valid.
    """
    errors: list[str] = []

    if raw.get("buildingType") not in BUILDING_TYPES:
        errors.append(MSG_BUILDING_TYPE)

    if not is_valid_area(raw.get("area")):
        errors.append(MSG_AREA)

    if not _non_blank_string(raw.get("location")):
        errors.append(MSG_LOCATION)

    email = raw.get("email")
    if not isinstance(email, str) or not is_valid_email(email):
        errors.append(MSG_EMAIL)

    phone = raw.get("phone")
    if not isinstance(phone, str) or not is_valid_phone(phone):
        errors.append(MSG_PHONE)

    return errors


def join_errors(errors: list[str]) -> str:
    return VALIDATION_SEPARATOR.join(errors)
