"""Tunable projection constants and environment-driven settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dfsproj.models import Category, CategoryEstimate, PlayerRole


logger = logging.getLogger(__name__)

_ESTIMATOR_TIMEOUT_ENV = "DFSPROJ_ESTIMATOR_TIMEOUT"
_MATCH_THRESHOLD_ENV = "DFSPROJ_MATCH_THRESHOLD"
_STRICT_MATCH_THRESHOLD_ENV = "DFSPROJ_STRICT_MATCH_THRESHOLD"
_REGISTRY_PATH_ENV = "DFSPROJ_REGISTRY_PATH"
_SEASON_ENV = "DFSPROJ_SEASON"

# Fuzzy acceptance bars. Opportunistic lookups use the looser value; merging
# salary rows into scoring records uses the stricter one.
DEFAULT_MATCH_THRESHOLD = 0.7
STRICT_MATCH_THRESHOLD = 0.8

# Floor/ceiling multipliers applied to total points. Not derived from variance.
BATTER_CEILING_MULTIPLIER = 1.5
BATTER_FLOOR_MULTIPLIER = 0.5
PITCHER_CEILING_MULTIPLIER = 1.2
PITCHER_FLOOR_MULTIPLIER = 0.75

DEFAULT_ESTIMATOR_TIMEOUT = 10.0
DEFAULT_REGISTRY_PATH = Path("data") / "identity_registry.sqlite"

FALLBACK_CONFIDENCE = 20.0


@dataclass(frozen=True)
class RangeMultipliers:
    floor: float
    ceiling: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.floor <= 1.0:
            raise ValueError(f"floor multiplier must be within [0, 1], got {self.floor}")
        if self.ceiling < 1.0:
            raise ValueError(f"ceiling multiplier must be >= 1, got {self.ceiling}")


_RANGES: Dict[PlayerRole, RangeMultipliers] = {
    PlayerRole.BATTER: RangeMultipliers(floor=BATTER_FLOOR_MULTIPLIER, ceiling=BATTER_CEILING_MULTIPLIER),
    PlayerRole.PITCHER: RangeMultipliers(floor=PITCHER_FLOOR_MULTIPLIER, ceiling=PITCHER_CEILING_MULTIPLIER),
}


def get_range(role: PlayerRole) -> RangeMultipliers:
    return _RANGES[role]


# Roughly league-average single-game outcomes under DraftKings scoring.
DEFAULT_ESTIMATES: Mapping[Category, CategoryEstimate] = {
    # ~0.6 singles, 0.17 doubles, 0.015 triples
    Category.HITS: CategoryEstimate(expected=0.85, points=2.8, confidence=FALLBACK_CONFIDENCE),
    Category.HOME_RUNS: CategoryEstimate(expected=0.12, points=1.2, confidence=FALLBACK_CONFIDENCE),
    Category.STOLEN_BASES: CategoryEstimate(expected=0.07, points=0.35, confidence=FALLBACK_CONFIDENCE),
    Category.RUNS: CategoryEstimate(expected=0.5, points=1.0, confidence=FALLBACK_CONFIDENCE),
    Category.RBIS: CategoryEstimate(expected=0.5, points=1.0, confidence=FALLBACK_CONFIDENCE),
    Category.WALKS_HBP: CategoryEstimate(expected=0.35, points=0.7, confidence=FALLBACK_CONFIDENCE),
    Category.STRIKEOUTS: CategoryEstimate(expected=5.0, points=10.0, confidence=FALLBACK_CONFIDENCE),
    # five innings
    Category.INNINGS: CategoryEstimate(expected=5.0, points=11.25, confidence=FALLBACK_CONFIDENCE),
    Category.WIN: CategoryEstimate(expected=0.35, points=1.4, confidence=FALLBACK_CONFIDENCE),
    # 5 hits, 1.5 walks/HBP, 2.5 earned runs
    Category.HITS_RUNS_ALLOWED: CategoryEstimate(expected=9.0, points=-8.9, confidence=FALLBACK_CONFIDENCE),
    Category.RARE_EVENTS: CategoryEstimate(expected=0.01, points=0.05, confidence=FALLBACK_CONFIDENCE),
}


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


@dataclass(frozen=True)
class ProjectionSettings:
    estimator_timeout: float = DEFAULT_ESTIMATOR_TIMEOUT
    match_threshold: float = DEFAULT_MATCH_THRESHOLD
    strict_match_threshold: float = STRICT_MATCH_THRESHOLD
    registry_path: Path = DEFAULT_REGISTRY_PATH
    season: Optional[int] = None

    @classmethod
    def from_env(cls) -> "ProjectionSettings":
        season = _env_int(_SEASON_ENV, 0, min_value=0)
        registry_raw = os.getenv(_REGISTRY_PATH_ENV)
        return cls(
            estimator_timeout=_env_float(_ESTIMATOR_TIMEOUT_ENV, DEFAULT_ESTIMATOR_TIMEOUT, clamp_min=0.1),
            match_threshold=_env_float(_MATCH_THRESHOLD_ENV, DEFAULT_MATCH_THRESHOLD, clamp_min=0.0, clamp_max=1.0),
            strict_match_threshold=_env_float(
                _STRICT_MATCH_THRESHOLD_ENV, STRICT_MATCH_THRESHOLD, clamp_min=0.0, clamp_max=1.0
            ),
            registry_path=Path(registry_raw) if registry_raw else DEFAULT_REGISTRY_PATH,
            season=season or None,
        )
