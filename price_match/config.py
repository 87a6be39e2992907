from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field

from .normalize.units import merge_aliases


MATCH_ACCEPT_SCORE = 0.62
SUGGEST_MIN_SCORE = 0.5
DEFAULT_MAX_RESULTS = 3
UNIT_MATCH_BONUS = 0.08
UNIT_MISMATCH_PENALTY = 0.12
MIN_CONTAINED_LENGTH = 3

SETTINGS_FILE = "matching.yaml"


class MatchSettings(BaseModel):
    """Scoring thresholds shared by the auto-apply and suggestion paths."""

    accept_score: float = Field(default=MATCH_ACCEPT_SCORE, ge=0.0, le=1.0)
    suggest_min_score: float = Field(default=SUGGEST_MIN_SCORE, ge=0.0, le=1.0)
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=1)
    unit_match_bonus: float = Field(default=UNIT_MATCH_BONUS, ge=0.0, le=1.0)
    unit_mismatch_penalty: float = Field(default=UNIT_MISMATCH_PENALTY, ge=0.0, le=1.0)
    min_contained_length: int = Field(default=MIN_CONTAINED_LENGTH, ge=1)
    # extra unit spellings, e.g. {"sheets": "each"}; merged over the built-in table
    unit_aliases: Dict[str, str] = Field(default_factory=dict)

    def resolved_aliases(self) -> Dict[str, str]:
        return merge_aliases(self.unit_aliases)


DEFAULT_SETTINGS = MatchSettings()


def _load_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(path: Optional[Path]) -> MatchSettings:
    """Read settings from a YAML file or a configs directory holding matching.yaml.

    A missing file yields the defaults; bad values raise pydantic's ValidationError.
    """
    if path is None:
        return DEFAULT_SETTINGS
    path = Path(path)
    if path.is_dir():
        path = path / SETTINGS_FILE
    if not path.exists():
        logger.debug("No settings at {}, using defaults", path)
        return DEFAULT_SETTINGS
    data = _load_yaml(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping of settings")
    settings = MatchSettings.model_validate(data.get("matching", data))
    logger.debug("Loaded match settings from {}: {}", path, settings)
    return settings
