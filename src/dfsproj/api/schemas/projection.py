from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from dfsproj.aggregation import RankedProjection
from dfsproj.config import DEFAULT_MATCH_THRESHOLD, STRICT_MATCH_THRESHOLD
from dfsproj.models import GameContext, StartingBattery


class PlayerInput(BaseModel):
    name: str
    source_id: str = ""
    position: str = ""
    salary: int = Field(default=0, ge=0)
    team: str = ""


class ProjectionRequest(BaseModel):
    game: GameContext
    players: List[PlayerInput] = Field(..., min_length=1)
    threshold: float = Field(default=STRICT_MATCH_THRESHOLD, ge=0.0, le=1.0)
    battery: StartingBattery | None = None
    battery_threshold: float = Field(default=DEFAULT_MATCH_THRESHOLD, ge=0.0, le=1.0)


class CategoryResponse(BaseModel):
    status: Literal["ok", "default"]
    expected: float
    points: float
    confidence: float
    reason: str | None = None


class ProjectionResponse(BaseModel):
    rank: int
    player_id: int
    name: str
    position: str
    team: str
    role: str
    stage: str
    salary: int
    points: float
    expected: float
    floor: float
    ceiling: float
    confidence: float
    value: float
    tier: Literal["top", "mid", "low"]
    categories: Dict[str, CategoryResponse]
    defaulted_categories: List[str] = Field(default_factory=list)

    @classmethod
    def from_ranked(cls, ranked: RankedProjection) -> "ProjectionResponse":
        result = ranked.result
        player = result.player
        return cls(
            rank=ranked.rank,
            player_id=player.canonical_id,
            name=player.name,
            position=player.position,
            team=player.salary.team_abbrev,
            role=result.role.value,
            stage=player.stage,
            salary=ranked.salary,
            points=round(result.total.points, 2),
            expected=round(result.total.expected, 2),
            floor=round(result.total.floor, 2),
            ceiling=round(result.total.ceiling, 2),
            confidence=round(result.total.confidence, 1),
            value=ranked.value,
            tier=ranked.tier,
            categories={
                category.value: CategoryResponse(
                    status=outcome.status,
                    expected=outcome.estimate.expected,
                    points=outcome.estimate.points,
                    confidence=outcome.estimate.confidence,
                    reason=outcome.reason,
                )
                for category, outcome in result.per_category.items()
            },
            defaulted_categories=[category.value for category in result.diagnostics.defaulted_categories],
        )


class ProjectionBatchResponse(BaseModel):
    game_id: int
    home_pitcher_id: Optional[int] = None
    away_pitcher_id: Optional[int] = None
    projections: List[ProjectionResponse]
