# app/utils/plate.py
"""Plate normalization: trimmed, uppercase, no inner whitespace or hyphens."""

import re
from typing import Optional

from app.exceptions import ValidationError

PLATE_MAX_LENGTH = 20   # matches driver_entries.plate

_SEPARATORS = re.compile(r"[\s-]+")


def normalize_plate(raw: str, pattern: Optional[str] = None) -> str:
    """
    Returns the canonical plate, so ABC-1234 and abc 1234 are both ABC1234.
    If `pattern` is given (regex), the canonical plate must match it,
    e.g. ABC1234 or ABC1D23 with the default pattern.
    """
    if raw is None or not raw.strip():
        raise ValidationError("Vehicle plate is required")

    plate = _SEPARATORS.sub("", raw).upper()
    if not plate:
        raise ValidationError("Vehicle plate is required", details={"plate": raw})
    if len(plate) > PLATE_MAX_LENGTH:
        raise ValidationError(
            f"Vehicle plate must be at most {PLATE_MAX_LENGTH} characters",
            details={"plate": raw},
        )
    if pattern and not re.match(pattern, plate):
        raise ValidationError(
            f"Invalid plate format '{plate}' (e.g. ABC1234 or ABC1D23)",
            details={"plate": raw},
        )
    return plate
