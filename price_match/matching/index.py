from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from loguru import logger
from pydantic import ValidationError

from ..config import DEFAULT_SETTINGS, MatchSettings
from ..models import CatalogEntry, IndexedEntry
from ..normalize.text import Singularizer, normalize_text, singularize_ascii_words, sort_tokens
from ..normalize.units import normalize_unit
from ..utils import is_finite_number

CatalogInput = Union[CatalogEntry, Mapping[str, Any]]


def _clean_aliases(raw: Any) -> List[str]:
    if not isinstance(raw, (list, tuple)):
        return []
    return [a.strip() for a in raw if isinstance(a, str) and a.strip()]


def _coerce(raw: Any) -> Optional[CatalogEntry]:
    if isinstance(raw, CatalogEntry):
        aliases = _clean_aliases(raw.aliases)
        if aliases == raw.aliases:
            return raw
        return raw.model_copy(update={"aliases": aliases})
    if not isinstance(raw, Mapping):
        return None
    data: Dict[str, Any] = dict(raw)
    data["aliases"] = _clean_aliases(data.get("aliases"))
    try:
        return CatalogEntry.model_validate(data)
    except ValidationError:
        return None


def validate_entries(catalog: Optional[Iterable[Any]]) -> List[CatalogEntry]:
    """Keep entries with a non-blank name and a finite, non-negative price.

    Anything else (including rows that are not entries at all) is dropped
    without error so the scorer only ever sees well-formed data.
    """
    valid: List[CatalogEntry] = []
    dropped = 0
    for raw in catalog or []:
        entry = _coerce(raw)
        if (
            entry is None
            or not entry.name.strip()
            or not is_finite_number(entry.price)
            or entry.price < 0
        ):
            dropped += 1
            continue
        valid.append(entry)
    if dropped:
        logger.debug("Dropped {} invalid price-list entries", dropped)
    return valid


def build_search_keys(
    name: str,
    aliases: Sequence[str] = (),
    singularize: Singularizer = singularize_ascii_words,
) -> tuple[str, ...]:
    """Normalized name and aliases plus their token-sorted and singular forms."""
    keys: Dict[str, None] = {}

    def add(raw: str) -> None:
        norm = normalize_text(raw)
        if not norm:
            return
        keys[norm] = None
        ordered = sort_tokens(norm)
        if ordered:
            keys[ordered] = None
        singular = singularize(norm)
        if singular:
            keys[singular] = None

    add(name)
    for alias in aliases:
        add(alias)
    return tuple(keys)


def build_index(
    catalog: Optional[Iterable[Any]],
    settings: MatchSettings = DEFAULT_SETTINGS,
    singularize: Singularizer = singularize_ascii_words,
) -> List[IndexedEntry]:
    aliases = settings.resolved_aliases()
    index: List[IndexedEntry] = []
    for entry in validate_entries(catalog):
        keys = build_search_keys(entry.name, entry.aliases, singularize)
        if not keys:
            continue
        index.append(
            IndexedEntry(
                source=entry,
                normalized_unit=normalize_unit(entry.unit, aliases),
                search_keys=keys,
            )
        )
    return index
