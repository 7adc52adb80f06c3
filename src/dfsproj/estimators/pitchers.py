"""Season-rate estimators for starting pitcher scoring categories."""

from __future__ import annotations

from typing import Tuple

from dfsproj.config import ScoringRules
from dfsproj.estimators.base import per_game, sample_confidence, stats_player_id
from dfsproj.models import CategoryEstimate, GameContext, ResolvedPlayer
from dfsproj.stats import StatBundle, StatsClient, StatsNotFoundError


FULL_SAMPLE_INNINGS = 150.0


class PitcherEstimators:
    def __init__(self, stats: StatsClient, scoring: ScoringRules):
        self._stats = stats
        self._scoring = scoring

    async def _season_line(self, player: ResolvedPlayer, game: GameContext) -> Tuple[StatBundle, float, float]:
        player_id = stats_player_id(player)
        _, line = await self._stats.get_latest_season_stats(player_id, game.season, "pitching")
        starts = line.get("gamesStarted", 0.0) or line.get("gamesPlayed", 0.0)
        if starts <= 0:
            raise StatsNotFoundError(f"no appearances for {player.name}")
        confidence = sample_confidence(line.get("inningsPitched", 0.0), FULL_SAMPLE_INNINGS)
        return line, starts, confidence

    async def strikeouts(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, starts, confidence = await self._season_line(player, game)
        expected = per_game(line, "strikeOuts", starts)
        return CategoryEstimate(
            expected=expected,
            points=expected * self._scoring.strikeout,
            confidence=confidence,
        )

    async def innings(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, starts, confidence = await self._season_line(player, game)
        expected = per_game(line, "inningsPitched", starts)
        return CategoryEstimate(
            expected=expected,
            points=expected * self._scoring.inning_pitched,
            confidence=confidence,
        )

    async def win(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, starts, confidence = await self._season_line(player, game)
        probability = min(1.0, per_game(line, "wins", starts))
        return CategoryEstimate(
            expected=probability,
            points=probability * self._scoring.win,
            confidence=confidence,
        )

    async def hits_runs_allowed(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, starts, confidence = await self._season_line(player, game)
        hits = per_game(line, "hits", starts) * game.park_factor
        walks = per_game(line, "baseOnBalls", starts)
        hit_batsmen = per_game(line, "hitBatsmen", starts)
        earned_runs = per_game(line, "earnedRuns", starts) * game.park_factor
        points = (
            hits * self._scoring.hit_allowed
            + walks * self._scoring.walk_allowed
            + hit_batsmen * self._scoring.hit_batsman
            + earned_runs * self._scoring.earned_run
        )
        return CategoryEstimate(
            expected=hits + walks + hit_batsmen + earned_runs,
            points=points,
            confidence=confidence,
        )

    async def rare_events(self, player: ResolvedPlayer, game: GameContext) -> CategoryEstimate:
        line, starts, confidence = await self._season_line(player, game)
        complete_games = min(1.0, per_game(line, "completeGames", starts))
        shutouts = min(complete_games, per_game(line, "shutouts", starts))
        points = complete_games * self._scoring.complete_game + shutouts * self._scoring.complete_game_shutout
        return CategoryEstimate(
            expected=complete_games,
            points=points,
            confidence=min(confidence, 50.0),
        )
