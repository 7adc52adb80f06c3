"""Configuration helpers for scoring values and projection tuning."""

from .projection import (
    BATTER_CEILING_MULTIPLIER,
    BATTER_FLOOR_MULTIPLIER,
    DEFAULT_ESTIMATOR_TIMEOUT,
    DEFAULT_ESTIMATES,
    DEFAULT_MATCH_THRESHOLD,
    DEFAULT_REGISTRY_PATH,
    FALLBACK_CONFIDENCE,
    PITCHER_CEILING_MULTIPLIER,
    PITCHER_FLOOR_MULTIPLIER,
    STRICT_MATCH_THRESHOLD,
    ProjectionSettings,
    RangeMultipliers,
    get_range,
)
from .scoring import DRAFTKINGS_MLB, ScoringRules, get_scoring, iter_scoring

__all__ = [
    "BATTER_CEILING_MULTIPLIER",
    "BATTER_FLOOR_MULTIPLIER",
    "DEFAULT_ESTIMATOR_TIMEOUT",
    "DEFAULT_ESTIMATES",
    "DEFAULT_MATCH_THRESHOLD",
    "DEFAULT_REGISTRY_PATH",
    "DRAFTKINGS_MLB",
    "FALLBACK_CONFIDENCE",
    "PITCHER_CEILING_MULTIPLIER",
    "PITCHER_FLOOR_MULTIPLIER",
    "ProjectionSettings",
    "RangeMultipliers",
    "STRICT_MATCH_THRESHOLD",
    "ScoringRules",
    "get_range",
    "get_scoring",
    "iter_scoring",
]
