"""Canonical player models shared across identity resolution and projections."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CanonicalId(BaseModel):
    """Identifier assigned by the statistics provider."""

    kind: Literal["canonical"] = "canonical"
    value: int

    model_config = ConfigDict(frozen=True)


class ProvisionalId(BaseModel):
    """Synthetic identifier for a record nobody could match."""

    kind: Literal["provisional"] = "provisional"
    value: int = Field(..., lt=0)
    source_id: Optional[str] = None

    model_config = ConfigDict(frozen=True)


PlayerIdentity = Union[CanonicalId, ProvisionalId]


class IdentityRecord(BaseModel):
    """Single registry entry linking a display name to an identity."""

    identity: PlayerIdentity = Field(..., discriminator="kind")
    display_name: str
    position: str = ""
    team_id: int = 0
    active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True)

    @property
    def canonical_id(self) -> int:
        """Plain integer id; negative for provisional records."""

        return self.identity.value

    @property
    def is_provisional(self) -> bool:
        return isinstance(self.identity, ProvisionalId)

    @property
    def identity_key(self) -> tuple[str, int]:
        return (self.identity.kind, self.identity.value)


class SalaryRecord(BaseModel):
    """Row from a contest salary export."""

    source_id: str
    raw_name: str
    position: str = ""
    salary: int = Field(default=0, ge=0)
    team_abbrev: str = ""
    avg_points_per_game: float = 0.0
    game_info: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class ResolvedPlayer(BaseModel):
    """Salary row joined with the registry identity it resolved to."""

    salary: SalaryRecord
    identity: IdentityRecord
    stage: Literal["exact", "token", "fuzzy", "provisional"] = "exact"
    score: float = Field(default=1.0, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True)

    @property
    def canonical_id(self) -> int:
        return self.identity.canonical_id

    @property
    def name(self) -> str:
        return self.identity.display_name or self.salary.raw_name

    @property
    def position(self) -> str:
        return self.salary.position or self.identity.position
