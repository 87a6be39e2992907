from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class CatalogEntry(BaseModel):
    """One saved price-list entry.

    Fields are deliberately loose: a blank name or a bad price is not a
    construction error, the index builder drops such entries later.
    """

    name: str = ""
    price: Optional[float] = None
    unit: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)


class LineItem(BaseModel):
    name: str = ""
    quantity: Union[float, str, None] = 0
    unit: str = ""
    price: Optional[float] = None
    line_total: Optional[float] = None


class ApplyOptions(BaseModel):
    only_missing_price: bool = True
    fill_empty_unit: bool = True


class CandidateOptions(BaseModel):
    max_results: int = Field(default=3, ge=1)
    min_score: float = Field(default=0.5, ge=0.0, le=1.0)


class ApplyResult(BaseModel):
    items: List[LineItem] = Field(default_factory=list)
    matched_count: int = Field(default=0, ge=0)


@dataclass(frozen=True)
class IndexedEntry:
    source: CatalogEntry
    normalized_unit: Optional[str]
    search_keys: tuple[str, ...]


@dataclass(frozen=True)
class MatchCandidate:
    entry: IndexedEntry
    score: float

    @property
    def item(self) -> CatalogEntry:
        return self.entry.source
