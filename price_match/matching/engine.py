from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence

from loguru import logger

from ..config import DEFAULT_SETTINGS, MatchSettings
from ..models import ApplyOptions, ApplyResult, CandidateOptions, IndexedEntry, LineItem, MatchCandidate
from ..normalize.text import Singularizer, normalize_text, singularize_ascii_words, sort_tokens
from ..normalize.units import normalize_unit
from ..utils import has_price, to_float
from .index import build_index
from .scoring import score_entry


def _score_all(
    name: Optional[str],
    unit: Optional[str],
    index: Sequence[IndexedEntry],
    settings: MatchSettings,
) -> List[MatchCandidate]:
    """Score every indexed entry against the query, catalog order preserved."""
    query = normalize_text(name)
    if not query or not index:
        return []
    query_sorted = sort_tokens(query)
    query_unit = normalize_unit(unit, settings.resolved_aliases())
    scored: List[MatchCandidate] = []
    for entry in index:
        score = score_entry(query, query_sorted, query_unit, entry, settings)
        if score is not None:
            scored.append(MatchCandidate(entry=entry, score=score))
    return scored


def best_in_index(
    name: Optional[str],
    unit: Optional[str],
    index: Sequence[IndexedEntry],
    settings: MatchSettings = DEFAULT_SETTINGS,
) -> Optional[MatchCandidate]:
    best: Optional[MatchCandidate] = None
    for cand in _score_all(name, unit, index, settings):
        # strict comparison keeps the earliest entry on ties
        if best is None or cand.score > best.score:
            best = cand
    if best is None or best.score < settings.accept_score:
        return None
    return best


def find_best_match(
    name: Optional[str],
    unit: Optional[str],
    catalog: Optional[Iterable[Any]],
    settings: MatchSettings = DEFAULT_SETTINGS,
    singularize: Singularizer = singularize_ascii_words,
) -> Optional[MatchCandidate]:
    """Highest-scoring catalog entry if it clears the accept threshold, else None."""
    if not normalize_text(name):
        return None
    index = build_index(catalog, settings, singularize)
    return best_in_index(name, unit, index, settings)


def get_candidates(
    name: Optional[str],
    unit: Optional[str],
    catalog: Optional[Iterable[Any]],
    options: Optional[CandidateOptions] = None,
    settings: MatchSettings = DEFAULT_SETTINGS,
    singularize: Singularizer = singularize_ascii_words,
) -> List[MatchCandidate]:
    """Ranked suggestions above the suggestion threshold, best first.

    Equal scores keep catalog order. Blank queries and empty or fully
    invalid catalogs give an empty list.
    """
    if options is None:
        options = CandidateOptions(max_results=settings.max_results, min_score=settings.suggest_min_score)
    if not normalize_text(name):
        return []
    index = build_index(catalog, settings, singularize)
    scored = [c for c in _score_all(name, unit, index, settings) if c.score >= options.min_score]
    scored.sort(key=lambda c: -c.score)
    return scored[: options.max_results]


def _needs_price(item: LineItem, opts: ApplyOptions) -> bool:
    if opts.only_missing_price and has_price(item.price):
        return False
    return bool(item.name and item.name.strip())


def _priced(item: LineItem, match: MatchCandidate, opts: ApplyOptions) -> LineItem:
    entry = match.item
    unit = item.unit
    if opts.fill_empty_unit and not (unit or "").strip() and entry.unit:
        unit = entry.unit
    return item.model_copy(
        update={
            "price": entry.price,
            "unit": unit,
            "line_total": to_float(item.quantity) * entry.price,
        }
    )


def apply_to_line_items(
    items: Optional[Sequence[LineItem]],
    catalog: Optional[Iterable[Any]],
    options: Optional[ApplyOptions] = None,
    settings: MatchSettings = DEFAULT_SETTINGS,
    singularize: Singularizer = singularize_ascii_words,
) -> ApplyResult:
    """Fill price, unit and line total from the catalog where a confident match exists.

    Returned items that were skipped or unmatched are the same objects that
    came in. With only_missing_price set, running this on its own output is
    a no-op because every filled row now carries a positive price.
    """
    opts = options or ApplyOptions()
    items = list(items or [])
    if not items:
        return ApplyResult(items=items, matched_count=0)
    index = build_index(catalog, settings, singularize)
    if not index:
        return ApplyResult(items=items, matched_count=0)

    out: List[LineItem] = []
    matched = 0
    for item in items:
        if not _needs_price(item, opts):
            out.append(item)
            continue
        match = best_in_index(item.name, item.unit, index, settings)
        if match is None:
            out.append(item)
            continue
        logger.debug("Matched '{}' -> '{}' ({:.2f})", item.name, match.item.name, match.score)
        out.append(_priced(item, match, opts))
        matched += 1

    logger.debug("Applied saved prices to {}/{} line items", matched, len(items))
    return ApplyResult(items=out, matched_count=matched)


def apply_saved_prices_to_items(
    items: Optional[Sequence[LineItem]],
    price_list: Optional[Iterable[Any]],
    options: Optional[ApplyOptions] = None,
) -> ApplyResult:
    return apply_to_line_items(items, price_list, options)


def get_price_match_candidates(
    name: Optional[str],
    unit: Optional[str],
    price_list: Optional[Iterable[Any]],
    options: Optional[CandidateOptions] = None,
) -> List[MatchCandidate]:
    return get_candidates(name, unit, price_list, options)
