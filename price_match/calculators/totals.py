from __future__ import annotations

from typing import Iterable, Optional

from pydantic import BaseModel

from ..models import LineItem
from ..utils import is_finite_number


class TotalsSettings(BaseModel):
    """Account-level pricing settings; labor toggles live on the quote."""

    default_labor_rate: Optional[float] = None
    tax_enabled: bool = False
    tax_rate: float = 0.0  # percent
    tax_inclusive: bool = False


def _finite(x) -> float:
    return float(x) if is_finite_number(x) else 0.0


def items_subtotal(items: Iterable[LineItem]) -> float:
    """Sum of line totals; rows without a usable total count as zero."""
    return round(sum(_finite(i.line_total) for i in items), 2)


def grand_total(
    materials_cost: Optional[float],
    labor_hours: Optional[float] = None,
    labor_rate: Optional[float] = None,
    settings: Optional[TotalsSettings] = None,
    labor_enabled: bool = True,
) -> Optional[float]:
    """Materials plus labor, then tax when it is enabled and exclusive.

    Returns None when there is no materials cost yet. A quote without its
    own labor rate falls back to settings.default_labor_rate.
    """
    if materials_cost is None:
        return None
    settings = settings or TotalsSettings()

    materials = _finite(materials_cost)
    hours = _finite(labor_hours)
    rate = _finite(labor_rate if labor_rate is not None else settings.default_labor_rate)
    labor = hours * rate if labor_enabled and hours > 0 and rate > 0 else 0.0
    subtotal = materials + labor

    tax_rate = _finite(settings.tax_rate)
    if not settings.tax_enabled or tax_rate <= 0 or settings.tax_inclusive:
        return subtotal
    return subtotal + subtotal * (tax_rate / 100.0)
