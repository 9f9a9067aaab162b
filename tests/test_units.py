"""
Tests for ledger unit conversion (fixed point amounts, dates, integer fields).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from genesis_client.core.exceptions import InvalidAmountError, InvalidDateError
from genesis_client.ledger import units


@pytest.mark.parametrize(
    "value",
    ["0", "1", "2.5", "0.000000000000000001", "123456789.123456789012345678", "1000000000000000"],
)
def test_fixed_point_round_trip(value):
    """fixed_point_to_decimal(decimal_to_fixed_point(v)) == v for up to 18 decimals."""
    assert units.fixed_point_to_decimal(units.decimal_to_fixed_point(value)) == Decimal(value)


def test_decimal_to_fixed_point_scales_by_ether_decimals():
    assert units.decimal_to_fixed_point("2.5") == 2_500_000_000_000_000_000
    assert units.decimal_to_fixed_point(Decimal("1")) == 10**18
    assert units.decimal_to_fixed_point(3) == 3 * 10**18
    assert units.decimal_to_fixed_point(0.1) == 10**17


def test_decimal_to_fixed_point_truncates_extra_digits():
    """Digits past 18 decimals are dropped toward zero, deterministically."""
    assert units.decimal_to_fixed_point("0.0000000000000000019") == 1
    assert units.decimal_to_fixed_point("1.23", decimals=1) == 12


@pytest.mark.parametrize("bad", ["-1", "abc", "", "NaN", "Infinity", None, True, [1], float("inf"), -0.5])
def test_decimal_to_fixed_point_rejects_invalid(bad):
    with pytest.raises(InvalidAmountError):
        units.decimal_to_fixed_point(bad)


def test_decimal_to_fixed_point_bounded_by_uint256():
    assert units.decimal_to_fixed_point(f"{units.MAX_UINT256}e-18") == units.MAX_UINT256
    with pytest.raises(InvalidAmountError):
        units.decimal_to_fixed_point(f"{units.MAX_UINT256 + 1}e-18")
    with pytest.raises(InvalidAmountError):
        units.decimal_to_fixed_point("1e999999999")
    assert units.decimal_to_fixed_point("0E+999999999") == 0
    assert units.decimal_to_fixed_point("1e-999999999") == 0


def test_fixed_point_to_decimal_accepts_wire_forms():
    """int, decimal string, hex string and ethers-style {_hex} all decode the same."""
    raw = 1_500_000_000_000_000_000
    assert units.fixed_point_to_decimal(raw) == Decimal("1.5")
    assert units.fixed_point_to_decimal(str(raw)) == Decimal("1.5")
    assert units.fixed_point_to_decimal(hex(raw)) == Decimal("1.5")
    assert units.fixed_point_to_decimal({"_hex": hex(raw)}) == Decimal("1.5")


def test_fixed_point_to_decimal_beyond_double_precision():
    """Values above 2**53 wei keep every digit."""
    raw = 2**53 + 1
    assert units.fixed_point_to_decimal(raw) == Decimal("0.009007199254740993")
    huge = 10**40 + 7
    assert units.fixed_point_to_decimal(huge) == Decimal("10000000000000000000000.000000000000000007")


def test_fixed_point_to_decimal_rejects_non_integer():
    with pytest.raises(InvalidAmountError):
        units.fixed_point_to_decimal("1.5")
    with pytest.raises(InvalidAmountError):
        units.fixed_point_to_decimal(False)


def test_to_int():
    assert units.to_int(7) == 7
    assert units.to_int("0x1f") == 31
    assert units.to_int(" 42 ") == 42
    with pytest.raises(InvalidAmountError):
        units.to_int(None)


def test_date_to_epoch_seconds():
    assert units.date_to_epoch_seconds("2025-01-01") == 1_735_689_600
    assert units.date_to_epoch_seconds(date(2025, 1, 1)) == 1_735_689_600
    assert units.date_to_epoch_seconds("2025-01-01T00:00:00.900Z") == 1_735_689_600
    plus_two = datetime(2025, 1, 1, 2, 0, tzinfo=timezone(timedelta(hours=2)))
    assert units.date_to_epoch_seconds(plus_two) == 1_735_689_600


@pytest.mark.parametrize("bad", ["", "tomorrow", "2025-13-01", None, 12.5])
def test_date_to_epoch_seconds_invalid(bad):
    with pytest.raises(InvalidDateError):
        units.date_to_epoch_seconds(bad)


def test_epoch_millis_to_date_label_zero_pads():
    assert units.epoch_millis_to_date_label(1_735_689_600_000, tz=timezone.utc) == "2025-01-01"
    assert units.epoch_millis_to_date_label(1_709_251_200_000, tz=timezone.utc) == "2024-03-01"


def test_epoch_millis_to_date_label_uses_given_zone():
    minus_five = timezone(timedelta(hours=-5))
    assert units.epoch_millis_to_date_label(1_735_689_600_000, tz=minus_five) == "2024-12-31"


def test_epoch_seconds_to_datetime_is_utc():
    moment = units.epoch_seconds_to_datetime("0x0")
    assert moment == datetime(1970, 1, 1, tzinfo=timezone.utc)
