"""Season-rate estimators for batter scoring categories."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from dfsproj.config import ScoringRules
from dfsproj.estimators.base import per_game, sample_confidence, stats_player_id
from dfsproj.models import CategoryEstimate, GameContext, ResolvedPlayer
from dfsproj.stats import StatBundle, StatsClient, StatsNotFoundError


logger = logging.getLogger(__name__)

FULL_SAMPLE_GAMES = 100.0
MIN_MATCHUP_AT_BATS = 10.0
MATCHUP_FULL_WEIGHT_AT_BATS = 50.0
MAX_MATCHUP_WEIGHT = 0.5
MATCHUP_FACTOR_BOUNDS = (0.75, 1.25)


def _rate(line: StatBundle, numerator: str, denominator: str) -> float:
    total = line.get(denominator, 0.0)
    if total <= 0:
        return 0.0
    return line.get(numerator, 0.0) / total


def matchup_factor(season: StatBundle, matchup: Optional[StatBundle], stat: str) -> float:
    """Blend the batter-vs-pitcher rate of ``stat`` per at-bat into a multiplier.

    Small samples move the factor little; the weight reaches
    ``MAX_MATCHUP_WEIGHT`` at ``MATCHUP_FULL_WEIGHT_AT_BATS``.
    """

    if not matchup:
        return 1.0
    at_bats = matchup.get("atBats", 0.0)
    season_rate = _rate(season, stat, "atBats")
    if at_bats < MIN_MATCHUP_AT_BATS or season_rate <= 0:
        return 1.0
    low, high = MATCHUP_FACTOR_BOUNDS
    ratio = min(high, max(low, _rate(matchup, stat, "atBats") / season_rate))
    weight = MAX_MATCHUP_WEIGHT * min(1.0, at_bats / MATCHUP_FULL_WEIGHT_AT_BATS)
    return 1.0 + (ratio - 1.0) * weight


class BatterEstimators:
    def __init__(self, stats: StatsClient, scoring: ScoringRules):
        self._stats = stats
        self._scoring = scoring

    async def _season_line(self, player: ResolvedPlayer, game: GameContext) -> Tuple[StatBundle, float]:
        player_id = stats_player_id(player)
        _, line = await self._stats.get_latest_season_stats(player_id, game.season, "hitting")
        games = line.get("gamesPlayed", 0.0)
        if games <= 0:
            raise StatsNotFoundError(f"no games played for {player.name}")
        return line, games

    async def _matchup(self, player: ResolvedPlayer, game: GameContext) -> Optional[StatBundle]:
        pitcher_id = game.opposing_pitcher_id(game.is_home(player))
        if pitcher_id is None:
            return None
        try:
            return await self._stats.get_matchup_history(stats_player_id(player), pitcher_id)
        except StatsNotFoundError:
            logger.debug("No matchup history for %s vs %s", player.name, pitcher_id)
            return None

    async def hits(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, games = await self._season_line(player, game)
        factor = game.park_factor * matchup_factor(line, await self._matchup(player, game), "hits")
        doubles = per_game(line, "doubles", games)
        triples = per_game(line, "triples", games)
        singles = max(0.0, per_game(line, "hits", games) - doubles - triples - per_game(line, "homeRuns", games))
        points = (
            singles * self._scoring.single + doubles * self._scoring.double + triples * self._scoring.triple
        )
        return CategoryEstimate(
            expected=(singles + doubles + triples) * factor,
            points=points * factor,
            confidence=sample_confidence(games, FULL_SAMPLE_GAMES),
        )

    async def home_runs(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, games = await self._season_line(player, game)
        factor = game.home_run_factor * matchup_factor(line, await self._matchup(player, game), "homeRuns")
        expected = per_game(line, "homeRuns", games) * factor
        return CategoryEstimate(
            expected=expected,
            points=expected * self._scoring.home_run,
            confidence=sample_confidence(games, FULL_SAMPLE_GAMES),
        )

    async def stolen_bases(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, games = await self._season_line(player, game)
        expected = per_game(line, "stolenBases", games)
        return CategoryEstimate(
            expected=expected,
            points=expected * self._scoring.stolen_base,
            confidence=sample_confidence(games, FULL_SAMPLE_GAMES),
        )

    async def runs(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, games = await self._season_line(player, game)
        expected = per_game(line, "runs", games) * game.park_factor
        return CategoryEstimate(
            expected=expected,
            points=expected * self._scoring.run,
            confidence=sample_confidence(games, FULL_SAMPLE_GAMES),
        )

    async def rbis(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, games = await self._season_line(player, game)
        expected = per_game(line, "rbi", games) * game.park_factor
        return CategoryEstimate(
            expected=expected,
            points=expected * self._scoring.rbi,
            confidence=sample_confidence(games, FULL_SAMPLE_GAMES),
        )

    async def walks_hbp(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, games = await self._season_line(player, game)
        walks = per_game(line, "baseOnBalls", games)
        hit_by_pitch = per_game(line, "hitByPitch", games)
        return CategoryEstimate(
            expected=walks + hit_by_pitch,
            points=walks * self._scoring.walk + hit_by_pitch * self._scoring.hit_by_pitch,
            confidence=sample_confidence(games, FULL_SAMPLE_GAMES),
        )
