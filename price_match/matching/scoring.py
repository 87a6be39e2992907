from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional

from ..config import DEFAULT_SETTINGS, MatchSettings
from ..models import IndexedEntry
from ..normalize.text import tokenize


def clamp01(x: float) -> float:
    if x < 0:
        return 0.0
    if x > 1:
        return 1.0
    return x


def _bigrams(s: str) -> List[str]:
    return [s[i : i + 2] for i in range(len(s) - 1)]


def dice_coefficient(a: str, b: str) -> float:
    """Sorensen-Dice over character bigram multisets."""
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0
    remaining = Counter(_bigrams(a))
    overlap = 0
    for gram in _bigrams(b):
        if remaining[gram] > 0:
            remaining[gram] -= 1
            overlap += 1
    return (2.0 * overlap) / ((len(a) - 1) + (len(b) - 1))


def count_common_tokens(a: List[str], b: List[str]) -> int:
    """Tokens of `a` (repeats included) that also occur in `b`."""
    if not a or not b:
        return 0
    in_b = set(b)
    return sum(1 for t in a if t in in_b)


def score_name(query: str, candidate: str, min_contained_length: int = DEFAULT_SETTINGS.min_contained_length) -> float:
    """Similarity of two normalized strings in [0, 1].

    Exact equality scores 1. Containment either way scores 0.94 minus a
    point per character of length difference (at most ten). Anything else
    blends token overlap/coverage with bigram Dice; a query whose every
    token appears in the candidate never drops below 0.9.
    """
    if not query or not candidate:
        return 0.0
    if query == candidate:
        return 1.0

    if query in candidate or candidate in query:
        if min(len(query), len(candidate)) >= min_contained_length:
            penalty = min(abs(len(query) - len(candidate)), 10) * 0.01
            return clamp01(0.94 - penalty)

    q_toks = tokenize(query)
    c_toks = tokenize(candidate)
    common = count_common_tokens(q_toks, c_toks)
    longest = max(len(q_toks), len(c_toks))
    overlap = common / longest if longest else 0.0
    coverage = common / len(q_toks) if q_toks else 0.0
    dice = dice_coefficient(query, candidate)

    score = max(dice * 0.9, overlap * 0.8 + coverage * 0.2)
    if q_toks and coverage == 1:
        score = max(score, 0.9)
    return clamp01(score)


def score_keys(query: str, query_sorted: str, keys: Iterable[str], settings: MatchSettings = DEFAULT_SETTINGS) -> float:
    best = 0.0
    try_sorted = bool(query_sorted) and query_sorted != query
    for key in keys:
        best = max(best, score_name(query, key, settings.min_contained_length))
        if try_sorted:
            best = max(best, score_name(query_sorted, key, settings.min_contained_length))
        if best >= 1:
            return 1.0
    return best


def unit_delta(query_unit: Optional[str], entry_unit: Optional[str], settings: MatchSettings = DEFAULT_SETTINGS) -> float:
    if not query_unit or not entry_unit:
        return 0.0
    if query_unit == entry_unit:
        return settings.unit_match_bonus
    return -settings.unit_mismatch_penalty


def score_entry(
    query: str,
    query_sorted: str,
    query_unit: Optional[str],
    entry: IndexedEntry,
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> Optional[float]:
    """Name score over all of the entry's keys, adjusted for unit agreement.

    Returns None for entries without any lexical signal, whatever the unit;
    a positive name score pushed below zero by a unit mismatch stays listed at 0.
    """
    base = score_keys(query, query_sorted, entry.search_keys, settings)
    if base <= 0:
        return None
    return clamp01(base + unit_delta(query_unit, entry.normalized_unit, settings))
