"""Per-category projection estimators."""

from __future__ import annotations

from dfsproj.config import DRAFTKINGS_MLB, ScoringRules
from dfsproj.models import Category
from dfsproj.stats import StatsClient

from .base import CategoryEstimator, EstimatorSet, sample_confidence
from .batters import BatterEstimators
from .pitchers import PitcherEstimators


def build_baseline_estimators(stats: StatsClient, scoring: ScoringRules = DRAFTKINGS_MLB) -> EstimatorSet:
    """Wire the season-rate estimators for every category."""

    batters = BatterEstimators(stats, scoring)
    pitchers = PitcherEstimators(stats, scoring)
    return EstimatorSet(
        {
            Category.HITS: batters.hits,
            Category.HOME_RUNS: batters.home_runs,
            Category.STOLEN_BASES: batters.stolen_bases,
            Category.RUNS: batters.runs,
            Category.RBIS: batters.rbis,
            Category.WALKS_HBP: batters.walks_hbp,
            Category.STRIKEOUTS: pitchers.strikeouts,
            Category.INNINGS: pitchers.innings,
            Category.WIN: pitchers.win,
            Category.HITS_RUNS_ALLOWED: pitchers.hits_runs_allowed,
            Category.RARE_EVENTS: pitchers.rare_events,
        }
    )


__all__ = [
    "BatterEstimators",
    "CategoryEstimator",
    "EstimatorSet",
    "PitcherEstimators",
    "build_baseline_estimators",
    "sample_confidence",
]
