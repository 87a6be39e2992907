from __future__ import annotations

from typing import Dict, Mapping, Optional

from .text import normalize_text


# Keys are normalized, space-free spellings; values are canonical units.
UNIT_ALIASES: Dict[str, str] = {
    "ea": "each",
    "each": "each",
    "piece": "each",
    "pieces": "each",
    "pc": "each",
    "pcs": "each",
    "unit": "each",
    "units": "each",
    "hr": "hour",
    "hrs": "hour",
    "hour": "hour",
    "hours": "hour",
    "m": "meter",
    "meter": "meter",
    "meters": "meter",
    "metre": "meter",
    "metres": "meter",
    "ft": "foot",
    "foot": "foot",
    "feet": "foot",
    "sqm": "sqm",
    "m2": "sqm",
    "sqmeter": "sqm",
    "sqmeters": "sqm",
    "squaremeter": "sqm",
    "squaremeters": "sqm",
    "l": "liter",
    "lt": "liter",
    "liter": "liter",
    "liters": "liter",
    "litre": "liter",
    "litres": "liter",
    "kg": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
}


def unit_key(raw: str) -> str:
    return normalize_text(raw).replace(" ", "")


def normalize_unit(raw: Optional[str], aliases: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Resolve a free-text unit to its canonical form.

    Unknown units come back normalized rather than None so two entries
    sharing an unusual unit ('bag', 'roll') still agree with each other.
    """
    if not raw:
        return None
    key = unit_key(raw)
    if not key:
        return None
    if aliases and key in aliases:
        return aliases[key]
    return UNIT_ALIASES.get(key, key)


def merge_aliases(extra: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Built-in table overlaid with user aliases, both sides normalized."""
    merged = dict(UNIT_ALIASES)
    for raw, canonical in (extra or {}).items():
        key = unit_key(str(raw))
        value = unit_key(str(canonical))
        if key and value:
            merged[key] = UNIT_ALIASES.get(value, value)
    return merged
