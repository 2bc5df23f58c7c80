# app/utils/phone.py
"""
Phone number normalization to E.164.

Rule:
  - keep digits and one leading '+'
  - '+…'  → already international, kept as is
  - '00…' → international access prefix, replaced by '+'
  - 10-11 digits → bare national number, DEFAULT_COUNTRY_CODE prepended
  - anything else → digits assumed to start with a country code, '+' prepended
The result must match E164_PATTERN.
"""

import re

from app.exceptions import ValidationError

E164_PATTERN = re.compile(r"^\+[1-9]\d{10,14}$")
_NON_DIGITS = re.compile(r"\D")


def is_e164(phone: str) -> bool:
    return bool(phone) and bool(E164_PATTERN.match(phone))


def normalize_phone(raw: str, default_country_code: str) -> str:
    if raw is None or not raw.strip():
        raise ValidationError("Phone number is required")

    stripped = raw.strip()
    has_plus = stripped.startswith("+")
    digits = _NON_DIGITS.sub("", stripped)

    if has_plus:
        candidate = f"+{digits}"
    elif digits.startswith("00"):
        candidate = f"+{digits[2:]}"
    elif 10 <= len(digits) <= 11:
        candidate = f"+{default_country_code}{digits}"
    else:
        candidate = f"+{digits}"

    if not is_e164(candidate):
        raise ValidationError(
            f"Invalid phone number '{raw}'. Use international format (+5511...) "
            f"or a 10-11 digit national number.",
            details={"phone_number": raw},
        )
    return candidate
