"""
Unit conversion between user-entered values and the ledger's wire representation.

- Amounts: Decimal <-> integer scaled by 10**decimals (18 for ether / wei).
- Dates: calendar dates -> Unix seconds; millisecond instants -> YYYY-MM-DD labels.

All money arithmetic uses Decimal with a context wide enough for the operand;
binary floats never carry ledger amounts.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone, tzinfo
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Any

from genesis_client.core.exceptions import InvalidAmountError, InvalidDateError

ETHER_DECIMALS = 18
# Decimal's default precision (28 digits) is too narrow for 18-decimal fixed point
_MIN_PRECISION = 28

# Largest value a uint256 contract argument can carry
MAX_UINT256 = 2**256 - 1
_MAX_UINT256_DIGITS = len(str(MAX_UINT256))


def to_int(raw: Any) -> int:
    """
    Integer-like ledger field to a host int.

    Accepts int, decimal or 0x-hex strings, and BigNumber-like objects
    exposing `_hex` / `hex` (as ethers serializes them).
    """
    if isinstance(raw, bool):
        raise InvalidAmountError(f"Expected an integer, got bool {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, dict):
        raw = raw.get("_hex", raw.get("hex"))
    else:
        raw = getattr(raw, "_hex", raw)
    if isinstance(raw, str):
        s = raw.strip()
        try:
            if s.lower().startswith(("0x", "-0x")):
                return int(s, 16)
            return int(s, 10)
        except ValueError as e:
            raise InvalidAmountError(f"Not an integer: {raw!r}") from e
    raise InvalidAmountError(f"Not an integer: {raw!r}")


def fixed_point_to_decimal(raw: Any, decimals: int = ETHER_DECIMALS) -> Decimal:
    """Convert an integer scaled by 10**decimals to an exact Decimal."""
    value = to_int(raw)
    with localcontext() as ctx:
        ctx.prec = max(_MIN_PRECISION, len(str(abs(value))) + decimals + 1)
        return Decimal(value).scaleb(-decimals)


def _parse_amount(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmountError(f"Amount must be numeric, got {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidAmountError(f"Amount must be finite, got {value!r}")
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation as e:
            raise InvalidAmountError(f"Amount must be numeric, got {value!r}") from e
    else:
        raise InvalidAmountError(f"Amount must be numeric, got {value!r}")
    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    if amount < 0:
        raise InvalidAmountError(f"Amount must not be negative, got {value!r}")
    return amount


def decimal_to_fixed_point(value: Any, decimals: int = ETHER_DECIMALS) -> int:
    """
    Convert a human-entered amount ("2.5", Decimal, int) to its fixed-point integer.

    Digits beyond `decimals` are truncated toward zero. Results that do not fit
    a uint256 raise InvalidAmountError.
    """
    amount = _parse_amount(value)
    if not amount:
        return 0
    if amount.adjusted() + decimals >= _MAX_UINT256_DIGITS:
        raise InvalidAmountError(f"Amount is too large for the ledger, got {value!r}")
    with localcontext() as ctx:
        ctx.prec = max(_MIN_PRECISION, amount.adjusted() + decimals + 2)
        quantum = Decimal(1).scaleb(-decimals)
        fixed = int(amount.quantize(quantum, rounding=ROUND_DOWN).scaleb(decimals))
    if fixed > MAX_UINT256:
        raise InvalidAmountError(f"Amount is too large for the ledger, got {value!r}")
    return fixed


def date_to_epoch_seconds(value: Any) -> int:
    """
    Parse a calendar date and return integer seconds since the Unix epoch.

    "YYYY-MM-DD" and date objects are UTC midnight. Datetimes without tzinfo
    are read as UTC. Sub-second parts are discarded.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        s = value.strip()
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(s)
        except ValueError as e:
            raise InvalidDateError(f"Unparsable date: {value!r}") from e
    else:
        raise InvalidDateError(f"Unparsable date: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return math.floor(parsed.timestamp())


def epoch_seconds_to_datetime(seconds: Any) -> datetime:
    """Ledger seconds (int-like) to an aware UTC datetime."""
    return datetime.fromtimestamp(to_int(seconds), tz=timezone.utc)


def epoch_millis_to_date_label(ms: int, tz: tzinfo | None = None) -> str:
    """Zero-padded YYYY-MM-DD label of a millisecond instant in the host calendar (or tz)."""
    seconds = int(ms) // 1000
    moment = datetime.fromtimestamp(seconds, tz=tz or timezone.utc)
    if tz is None:
        moment = moment.astimezone()
    return f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
