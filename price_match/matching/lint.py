from __future__ import annotations

from typing import Any, Iterable, List, Tuple

from rapidfuzz import fuzz, process

from ..models import CatalogEntry
from ..normalize.text import normalize_text
from .index import build_search_keys, validate_entries


def rejected_rows(catalog: Iterable[Any]) -> List[Tuple[int, str]]:
    """(position, reason) for every row the index builder would drop."""
    out: List[Tuple[int, str]] = []
    for pos, raw in enumerate(catalog or []):
        kept = validate_entries([raw])
        if not kept:
            name = raw.get("name") if isinstance(raw, dict) else getattr(raw, "name", None)
            if not isinstance(name, str) or not name.strip():
                out.append((pos, "blank name"))
            else:
                out.append((pos, f"'{name}': missing, negative or non-numeric price"))
            continue
        entry = kept[0]
        if not build_search_keys(entry.name, entry.aliases):
            out.append((pos, f"'{entry.name}': nothing left to match on after normalization"))
    return out


def near_duplicates(entries: List[CatalogEntry], threshold: int = 90) -> List[Tuple[str, str, int]]:
    """Pairs of entry names similar enough to compete for the same line items.

    Uses token_set_ratio on normalized names, so word order and extra
    filler words do not hide a duplicate.
    """
    names = [normalize_text(e.name) for e in entries]
    choices = {i: n for i, n in enumerate(names) if n}
    pairs: List[Tuple[str, str, int]] = []
    for i, norm in choices.items():
        results = process.extract(norm, choices, scorer=fuzz.token_set_ratio, limit=None, score_cutoff=threshold)
        # results: list of (matched_norm, score, key)
        for _, score, j in results:
            if j > i:
                pairs.append((entries[i].name, entries[j].name, int(score)))
    return pairs
