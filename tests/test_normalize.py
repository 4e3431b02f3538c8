from __future__ import annotations

import pytest

from procivlog.exceptions import ProcivValidationError
from procivlog.normalize import clean_text, normalize_km, require_text, round_half_up, safe_float


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("120.4", 120),
        ("245.6", 246),
        (9.999, 10),
        (2.5, 3),
        ("0", 0),
        (" 87 ", 87),
    ],
)
def test_normalize_km_rounds_to_nearest(raw: object, expected: int) -> None:
    assert normalize_km(raw) == expected


def test_normalize_km_is_idempotent_on_integers() -> None:
    for value in (0, 1, 120, 99999):
        assert normalize_km(value) == value
        assert normalize_km(normalize_km(value)) == value


@pytest.mark.parametrize(
    "raw",
    [None, "", "   ", "abc", "12km", float("nan"), float("inf"), True, "12,345", "1234,6", "1_000"],
)
def test_normalize_km_rejects_malformed(raw: object) -> None:
    with pytest.raises(ProcivValidationError) as excinfo:
        normalize_km(raw, field="start_km")
    assert excinfo.value.field == "start_km"


def test_normalize_km_rejects_negative() -> None:
    with pytest.raises(ProcivValidationError, match="negative"):
        normalize_km("-3")


def test_round_half_up_differs_from_bankers_rounding() -> None:
    assert round(2.5) == 2
    assert round_half_up(2.5) == 3
    assert round_half_up(3.49) == 3


def test_safe_float_handles_placeholders() -> None:
    assert safe_float("") is None
    assert safe_float(None) is None
    assert safe_float("4.5") == 4.5


def test_text_helpers() -> None:
    assert clean_text(None) == ""
    assert clean_text("  Base ") == "Base"
    with pytest.raises(ProcivValidationError):
        require_text("   ", field="destination")


def test_thousands_separators_are_not_read_as_decimals() -> None:
    with pytest.raises(ProcivValidationError):
        normalize_km("12,345", field="end_km")
    assert safe_float("12,345") is None
    assert safe_float("1_000") is None
