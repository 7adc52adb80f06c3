"""Category estimator protocol and the registry of estimators per category."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Awaitable, Callable, Dict, Iterator

from dfsproj.models import Category, CategoryEstimate, GameContext, ResolvedPlayer
from dfsproj.stats import StatsNotFoundError


CategoryEstimator = Callable[[ResolvedPlayer, GameContext], Awaitable[CategoryEstimate]]

MIN_CONFIDENCE = 25.0
MAX_CONFIDENCE = 90.0


class EstimatorSet(Mapping):
    """Immutable ``Category -> CategoryEstimator`` mapping."""

    def __init__(self, estimators: Mapping[Category, CategoryEstimator] | None = None):
        self._estimators: Dict[Category, CategoryEstimator] = dict(estimators or {})

    def __getitem__(self, category: Category) -> CategoryEstimator:
        return self._estimators[category]

    def __iter__(self) -> Iterator[Category]:
        return iter(self._estimators)

    def __len__(self) -> int:
        return len(self._estimators)

    def __repr__(self) -> str:
        names = ", ".join(category.value for category in self._estimators)
        return f"EstimatorSet({names})"

    def with_override(self, category: Category, estimator: CategoryEstimator) -> "EstimatorSet":
        updated = dict(self._estimators)
        updated[category] = estimator
        return EstimatorSet(updated)

    def without(self, category: Category) -> "EstimatorSet":
        updated = dict(self._estimators)
        updated.pop(category, None)
        return EstimatorSet(updated)


def stats_player_id(player: ResolvedPlayer) -> int:
    """Return the stats-provider id, refusing provisional identities."""

    if player.identity.is_provisional:
        raise StatsNotFoundError(f"{player.name} has no canonical id")
    return player.canonical_id


def sample_confidence(sample: float, full_sample: float) -> float:
    """Scale confidence linearly with sample size up to ``full_sample``."""

    if full_sample <= 0:
        return MIN_CONFIDENCE
    share = min(1.0, max(0.0, sample) / full_sample)
    return round(MIN_CONFIDENCE + (MAX_CONFIDENCE - MIN_CONFIDENCE) * share, 1)


def per_game(line: Mapping[str, float], key: str, games: float) -> float:
    if games <= 0:
        return 0.0
    return max(0.0, line.get(key, 0.0)) / games
