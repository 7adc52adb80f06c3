"""Shared pydantic models."""

from .player import (
    CanonicalId,
    IdentityRecord,
    PlayerIdentity,
    ProvisionalId,
    ResolvedPlayer,
    SalaryRecord,
)
from .projection import (
    BATTER_CATEGORIES,
    PITCHER_CATEGORIES,
    Category,
    CategoryEstimate,
    EstimateOutcome,
    GameContext,
    PlayerRole,
    ProjectionDiagnostics,
    ProjectionResult,
    ProjectionTotal,
    StartingBattery,
    categories_for_role,
    role_for_position,
)

__all__ = [
    "BATTER_CATEGORIES",
    "PITCHER_CATEGORIES",
    "CanonicalId",
    "Category",
    "CategoryEstimate",
    "EstimateOutcome",
    "GameContext",
    "IdentityRecord",
    "PlayerIdentity",
    "PlayerRole",
    "ProjectionDiagnostics",
    "ProjectionResult",
    "ProjectionTotal",
    "ProvisionalId",
    "ResolvedPlayer",
    "SalaryRecord",
    "StartingBattery",
    "categories_for_role",
    "role_for_position",
]
