from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any


def to_float(x: Any) -> float:
    """Coerce a quantity-like value to a finite float, 0.0 when it isn't one.

    Only plain numeric strings count; "1,5", "1,000" and "1_000" are not numbers here.
    """
    if isinstance(x, bool) or x is None:
        return 0.0
    if isinstance(x, (int, float)):
        return float(x) if math.isfinite(x) else 0.0
    s = str(x).strip()
    if not s or "_" in s:
        return 0.0
    try:
        val = float(s)
    except ValueError:
        return 0.0
    return val if math.isfinite(val) else 0.0


def is_finite_number(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)


def has_price(price: Any) -> bool:
    """True for a finite price above zero."""
    return is_finite_number(price) and price > 0


def money(amount: float, symbol: str = "$", places: int = 2, symbol_after: bool = False) -> str:
    q = Decimal(10) ** -places
    val = Decimal(str(amount)).quantize(q, rounding=ROUND_HALF_UP)
    sign = "-" if val < 0 else ""
    whole, _, frac = f"{abs(val):.{places}f}".partition(".")
    body = "{:,}".format(int(whole)) + (f".{frac}" if frac else "")
    if symbol_after:
        return f"{sign}{body} {symbol}"
    return f"{sign}{symbol}{body}"
