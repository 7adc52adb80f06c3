"""Combine independently computed category estimates into player projections."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from statistics import fmean
from typing import Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

from dfsproj.config import DEFAULT_ESTIMATES, DEFAULT_ESTIMATOR_TIMEOUT, get_range
from dfsproj.estimators import CategoryEstimator
from dfsproj.models import (
    Category,
    CategoryEstimate,
    EstimateOutcome,
    GameContext,
    PlayerRole,
    ProjectionDiagnostics,
    ProjectionResult,
    ProjectionTotal,
    ResolvedPlayer,
    categories_for_role,
    role_for_position,
)


logger = logging.getLogger(__name__)

TOP_TIER_RATIO = 1.25
MID_TIER_RATIO = 0.9

_ZERO_POINTS = 1e-9

Tier = Literal["top", "mid", "low"]


def _blend_confidence(estimates: Iterable[CategoryEstimate]) -> float:
    weighted = 0.0
    total_points = 0.0
    for estimate in estimates:
        weighted += estimate.confidence * estimate.points
        total_points += estimate.points
    if abs(total_points) < _ZERO_POINTS:
        return 0.0
    return min(100.0, max(0.0, weighted / total_points))


def combine_estimates(
    player: ResolvedPlayer,
    game_id: int,
    role: PlayerRole,
    per_category: Mapping[Category, EstimateOutcome],
) -> ProjectionResult:
    """Sum category estimates and apply the role's floor/ceiling multipliers."""

    estimates = [outcome.estimate for outcome in per_category.values()]
    raw_points = sum(estimate.points for estimate in estimates)
    expected = sum(estimate.expected for estimate in estimates)
    multipliers = get_range(role)
    raw_floor = raw_points * multipliers.floor
    raw_ceiling = raw_points * multipliers.ceiling

    points = max(0.0, raw_points)
    total = ProjectionTotal(
        expected=expected,
        points=points,
        floor=min(points, max(0.0, raw_floor)),
        ceiling=max(points, raw_ceiling),
        confidence=_blend_confidence(estimates),
    )
    diagnostics = ProjectionDiagnostics(
        raw_points=raw_points,
        raw_floor=raw_floor,
        raw_ceiling=raw_ceiling,
        defaulted_categories=[category for category, outcome in per_category.items() if outcome.is_default],
    )
    return ProjectionResult(
        player=player,
        game_id=game_id,
        role=role,
        per_category=dict(per_category),
        total=total,
        diagnostics=diagnostics,
    )


class ProjectionAggregator:
    """Fan a player out to the category estimators for their role.

    Every estimator runs concurrently under its own timeout. A failing,
    missing or slow estimator is replaced by the category default and tagged
    as such; it never aborts the player's projection. The aggregator keeps no
    state between calls.
    """

    def __init__(
        self,
        estimators: Mapping[Category, CategoryEstimator],
        *,
        timeout: float = DEFAULT_ESTIMATOR_TIMEOUT,
        defaults: Mapping[Category, CategoryEstimate] = DEFAULT_ESTIMATES,
    ):
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self._estimators = estimators
        self._timeout = timeout
        self._defaults = defaults

    @property
    def timeout(self) -> float:
        return self._timeout

    def _fallback(self, category: Category, player: ResolvedPlayer, reason: str) -> EstimateOutcome:
        logger.warning("Using default %s estimate for %s: %s", category.value, player.name, reason)
        return EstimateOutcome.default(self._defaults[category], reason)

    async def _estimate(self, category: Category, player: ResolvedPlayer, game: GameContext) -> EstimateOutcome:
        estimator = self._estimators.get(category)
        if estimator is None:
            return self._fallback(category, player, "no estimator registered")
        try:
            estimate = await asyncio.wait_for(estimator(player, game), timeout=self._timeout)
        except asyncio.TimeoutError:
            return self._fallback(category, player, f"timed out after {self._timeout:g}s")
        except Exception as exc:
            return self._fallback(category, player, f"{type(exc).__name__}: {exc}")
        if not isinstance(estimate, CategoryEstimate):
            return self._fallback(category, player, f"invalid estimate {estimate!r}")
        if not (math.isfinite(estimate.points) and math.isfinite(estimate.expected)):
            return self._fallback(category, player, "non-finite estimate")
        return EstimateOutcome.ok(estimate)

    async def project(self, player: ResolvedPlayer, game: GameContext) -> ProjectionResult:
        role = role_for_position(player.position)
        categories = categories_for_role(role)
        outcomes = await asyncio.gather(*(self._estimate(category, player, game) for category in categories))
        return combine_estimates(player, game.game_id, role, dict(zip(categories, outcomes)))

    async def _project_or_skip(self, player: ResolvedPlayer, game: GameContext) -> Optional[ProjectionResult]:
        try:
            return await self.project(player, game)
        except Exception:
            logger.exception("Projection failed for %s in game %s; skipping", player.name, game.game_id)
            return None

    async def project_game(self, players: Sequence[ResolvedPlayer], game: GameContext) -> List[ProjectionResult]:
        results = await asyncio.gather(*(self._project_or_skip(player, game) for player in players))
        return [result for result in results if result is not None]

    async def _project_game_or_skip(
        self, game: GameContext, players: Sequence[ResolvedPlayer]
    ) -> List[ProjectionResult]:
        try:
            return await self.project_game(players, game)
        except Exception:
            logger.exception("Projection failed for game %s; skipping", game.game_id)
            return []

    async def project_slate(
        self, games: Sequence[Tuple[GameContext, Sequence[ResolvedPlayer]]]
    ) -> List[ProjectionResult]:
        per_game = await asyncio.gather(*(self._project_game_or_skip(game, players) for game, players in games))
        results: List[ProjectionResult] = []
        for game_results in per_game:
            results.extend(game_results)
        logger.info("Projected %d players across %d games", len(results), len(games))
        return results


@dataclass(frozen=True)
class RankedProjection:
    rank: int
    result: ProjectionResult
    salary: int
    value: float
    tier: Tier


def _tier(points: float, mean_points: float) -> Tier:
    if points >= mean_points * TOP_TIER_RATIO:
        return "top"
    if points >= mean_points * MID_TIER_RATIO:
        return "mid"
    return "low"


def rank_projections(
    results: Sequence[ProjectionResult],
    salaries: Mapping[str, int] | None = None,
) -> List[RankedProjection]:
    """Order by projected points and attach value per $1000 and a tier.

    ``salaries`` maps salary source ids to salaries and overrides the salary
    carried by each player's salary record.
    """

    if not results:
        return []
    salaries = salaries or {}
    ordered = sorted(results, key=lambda result: result.total.points, reverse=True)
    mean_points = fmean(result.total.points for result in ordered)

    ranked: List[RankedProjection] = []
    for index, result in enumerate(ordered, start=1):
        salary = salaries.get(result.player.salary.source_id, result.player.salary.salary)
        value = result.total.points / (salary / 1000.0) if salary > 0 else 0.0
        ranked.append(
            RankedProjection(
                rank=index,
                result=result,
                salary=salary,
                value=round(value, 2),
                tier=_tier(result.total.points, mean_points),
            )
        )
    return ranked


def summarize_defaults(results: Iterable[ProjectionResult]) -> Dict[Category, int]:
    """Count how often each category fell back to its default."""

    counts: Dict[Category, int] = {}
    for result in results:
        for category in result.diagnostics.defaulted_categories:
            counts[category] = counts.get(category, 0) + 1
    return counts
