"""Normalization helpers.

Centralizes parsing of user-typed form values, so the lifecycle and sync
layers only ever see clean integers and stripped strings.
"""

from __future__ import annotations

import math
from typing import Any

from procivlog.exceptions import ProcivValidationError


def safe_float(value: Any) -> float | None:
    """Parse *value* as a finite float, or return ``None``.

    Only ``.`` is a decimal separator. Commas and digit-group underscores
    are ambiguous in odometer input ("12,345") and are refused.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value or "," in value or "_" in value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    ``round()`` uses banker's rounding (``2.5 -> 2``); odometer readings
    round half-up (``2.5 -> 3``, ``9.999 -> 10``).
    """
    return math.floor(value + 0.5)


def normalize_km(value: Any, *, field: str = "km") -> int:
    """Coerce an odometer reading to a non-negative rounded integer.

    Raises
    ------
    ProcivValidationError
        If *value* is missing, not numeric, or negative.
    """
    parsed = safe_float(value)
    if parsed is None:
        raise ProcivValidationError(f"{field} must be a number, got {value!r}", field=field)
    if parsed < 0:
        raise ProcivValidationError(f"{field} must not be negative, got {value!r}", field=field)
    return round_half_up(parsed)


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def require_text(value: Any, *, field: str) -> str:
    text = clean_text(value)
    if not text:
        raise ProcivValidationError(f"{field} is required", field=field)
    return text
