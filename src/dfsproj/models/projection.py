"""Projection payloads produced by the aggregation engine."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from dfsproj.models.player import ResolvedPlayer


class PlayerRole(str, Enum):
    BATTER = "batter"
    PITCHER = "pitcher"


class Category(str, Enum):
    HITS = "hits"
    HOME_RUNS = "home_runs"
    STOLEN_BASES = "stolen_bases"
    RUNS = "runs"
    RBIS = "rbis"
    WALKS_HBP = "walks_hbp"
    STRIKEOUTS = "strikeouts"
    INNINGS = "innings"
    WIN = "win"
    HITS_RUNS_ALLOWED = "hits_runs_allowed"
    RARE_EVENTS = "rare_events"


BATTER_CATEGORIES: Tuple[Category, ...] = (
    Category.HITS,
    Category.HOME_RUNS,
    Category.STOLEN_BASES,
    Category.RUNS,
    Category.RBIS,
    Category.WALKS_HBP,
)

PITCHER_CATEGORIES: Tuple[Category, ...] = (
    Category.STRIKEOUTS,
    Category.INNINGS,
    Category.WIN,
    Category.HITS_RUNS_ALLOWED,
    Category.RARE_EVENTS,
)

_PITCHER_TOKENS = {"P", "SP", "RP"}


def role_for_position(position: str | None) -> PlayerRole:
    """Classify a slash-separated position string (e.g. ``"SP/RP"``)."""

    tokens = {token.strip().upper() for token in (position or "").split("/") if token.strip()}
    if tokens & _PITCHER_TOKENS:
        return PlayerRole.PITCHER
    return PlayerRole.BATTER


def categories_for_role(role: PlayerRole) -> Tuple[Category, ...]:
    if role is PlayerRole.PITCHER:
        return PITCHER_CATEGORIES
    return BATTER_CATEGORIES


class CategoryEstimate(BaseModel):
    expected: float = Field(..., ge=0.0)
    points: float
    confidence: float = Field(..., ge=0.0, le=100.0)

    model_config = ConfigDict(frozen=True)


class EstimateOutcome(BaseModel):
    """Either a real estimate (``ok``) or a category fallback (``default``)."""

    status: Literal["ok", "default"]
    estimate: CategoryEstimate
    reason: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def ok(cls, estimate: CategoryEstimate) -> "EstimateOutcome":
        return cls(status="ok", estimate=estimate)

    @classmethod
    def default(cls, estimate: CategoryEstimate, reason: str) -> "EstimateOutcome":
        return cls(status="default", estimate=estimate, reason=reason)

    @property
    def is_default(self) -> bool:
        return self.status == "default"


class ProjectionTotal(BaseModel):
    expected: float = Field(..., ge=0.0)
    points: float = Field(..., ge=0.0)
    floor: float = Field(..., ge=0.0)
    ceiling: float = Field(..., ge=0.0)
    confidence: float = Field(..., ge=0.0, le=100.0)

    model_config = ConfigDict(frozen=True)


class ProjectionDiagnostics(BaseModel):
    """Pre-clamp values kept alongside the presented totals."""

    raw_points: float
    raw_floor: float
    raw_ceiling: float
    defaulted_categories: List[Category] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ProjectionResult(BaseModel):
    player: ResolvedPlayer
    game_id: int
    role: PlayerRole
    per_category: Dict[Category, EstimateOutcome]
    total: ProjectionTotal
    diagnostics: ProjectionDiagnostics

    model_config = ConfigDict(frozen=True)


class GameContext(BaseModel):
    """Park, weather and matchup context for one game."""

    game_id: int
    season: int
    home_team: str = ""
    away_team: str = ""
    venue_id: int = 0
    home_team_id: int = 0
    away_team_id: int = 0
    home_pitcher_id: Optional[int] = None
    away_pitcher_id: Optional[int] = None
    home_catcher_id: Optional[int] = None
    away_catcher_id: Optional[int] = None
    temperature: float = 70.0
    wind_speed: float = 0.0
    is_outdoor: bool = True
    park_factor: float = Field(default=1.0, gt=0.0)
    home_run_factor: float = Field(default=1.0, gt=0.0)

    model_config = ConfigDict(frozen=True)

    def is_home(self, player: ResolvedPlayer) -> bool:
        team = player.salary.team_abbrev.upper()
        return bool(team) and team == self.home_team.upper()

    def opposing_pitcher_id(self, is_home: bool) -> Optional[int]:
        return self.away_pitcher_id if is_home else self.home_pitcher_id

    def opposing_catcher_id(self, is_home: bool) -> Optional[int]:
        return self.away_catcher_id if is_home else self.home_catcher_id

    def opposing_team_id(self, is_home: bool) -> int:
        return self.away_team_id if is_home else self.home_team_id


class StartingBattery(BaseModel):
    """Probable pitchers and catchers for a game, by name as the feed prints them."""

    home_pitcher: Optional[str] = None
    away_pitcher: Optional[str] = None
    home_catcher: Optional[str] = None
    away_catcher: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def named(self) -> Dict[str, str]:
        """Non-empty names keyed by the matching ``GameContext`` id field."""

        names = {
            "home_pitcher_id": self.home_pitcher,
            "away_pitcher_id": self.away_pitcher,
            "home_catcher_id": self.home_catcher,
            "away_catcher_id": self.away_catcher,
        }
        return {field: name.strip() for field, name in names.items() if name and name.strip()}
