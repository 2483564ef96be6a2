"""
Exact fixed-point conversion and display of on-chain amounts.

Balances arrive from the node as integers in base units (wei for the native
currency, 10^-6 token units for gavcoin). These helpers move them into
``Decimal`` whole units without any context rounding, and render them the
way the wallet UI shows them.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

WEI_DECIMALS = 18

Number = Union[int, str, Decimal]


def to_base_units(value: Number) -> int:
    """
    Coerce a raw amount returned by the node into an integer.

    Accepts ints, decimal strings, ``0x``-prefixed hex strings and integral
    Decimals.

    Raises:
        ValueError: If the value is negative, fractional or not a number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")

    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        text = value.strip()
        result = int(text, 16) if text.lower().startswith("0x") else int(text)
    elif isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValueError(f"Fractional base-unit amount: {value}")
        result = int(value)
    else:
        raise ValueError(f"Not an amount: {value!r}")

    if result < 0:
        raise ValueError(f"Negative amount: {value!r}")
    return result


def scale_down(raw: int, decimals: int) -> Decimal:
    """
    Convert an integer amount in base units to whole units.

    The result is built from its digit tuple, so it is exact regardless of
    the active decimal context precision.
    """
    sign = 1 if raw < 0 else 0
    digits = tuple(int(d) for d in str(abs(raw)))
    return Decimal((sign, digits, -decimals))


def sum_scaled(raws: Iterable[int], decimals: int) -> Decimal:
    """Sum base-unit amounts as integers, then scale the total once."""
    return scale_down(sum(raws), decimals)


def format_amount(value: Decimal, places: int) -> str:
    """
    Render an amount with thousands separators and a fixed number of places.

    Rounds half-up, e.g. ``format_amount(Decimal("1234.5675"), 3)`` is
    ``"1,234.568"``.
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{rounded:,.{places}f}"
