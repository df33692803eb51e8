"""
Small helpers for timestamps and unit conversion.

Monetary values travel as decimal strings; conversions go through ``Decimal``
so no precision is lost before the final float comparison.
"""

from __future__ import annotations

import time
from decimal import Decimal, InvalidOperation
from typing import Any

from tradeai.exceptions import ValidationError

SOL_DECIMALS = 9
ETH_DECIMALS = 18
LAMPORTS_PER_SOL = 10 ** SOL_DECIMALS


def now_ms() -> int:
    return int(time.time() * 1000)


def num_str(value: Any) -> str:
    """Stringify a number from an upstream payload (``1e9`` -> ``"1000000000"``)."""
    if value is None or isinstance(value, bool):
        raise TypeError(f"expected a number, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    try:
        Decimal(str(value))
    except InvalidOperation:
        raise TypeError(f"expected a number, got {value!r}") from None
    return str(value)


def to_base_units(amount: str, decimals: int) -> int:
    """
    Convert a decimal amount to the asset's smallest unit.

    Raises ``ValidationError`` if the amount has more decimals than the asset
    allows, so nothing is silently truncated (down to a zero-value transfer).
    """
    try:
        value = Decimal(str(amount)).scaleb(decimals)
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {amount!r}") from None
    if not value.is_finite() or value != value.to_integral_value():
        raise ValidationError(f"Amount {amount} exceeds {decimals} decimals")
    return int(value)


def lamports_to_sol(lamports: int) -> Decimal:
    return Decimal(int(lamports)) / LAMPORTS_PER_SOL


def sol_to_lamports(amount: str) -> int:
    return to_base_units(amount, SOL_DECIMALS)
