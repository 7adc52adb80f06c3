from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from dfsproj.config import DEFAULT_MATCH_THRESHOLD, STRICT_MATCH_THRESHOLD
from dfsproj.identity import Resolution, ResolutionReport
from dfsproj.models import IdentityRecord


class IdentityResponse(BaseModel):
    id: int
    kind: str
    name: str
    position: str
    team_id: int
    active: bool

    @classmethod
    def from_record(cls, record: IdentityRecord) -> "IdentityResponse":
        return cls(
            id=record.canonical_id,
            kind=record.identity.kind,
            name=record.display_name,
            position=record.position,
            team_id=record.team_id,
            active=record.active,
        )


class ResolveRequest(BaseModel):
    names: List[str] = Field(..., min_length=1)
    threshold: float = Field(default=DEFAULT_MATCH_THRESHOLD, ge=0.0, le=1.0)


class ResolvedNameResponse(BaseModel):
    raw_name: str
    stage: str
    score: float
    identity: IdentityResponse

    @classmethod
    def from_resolution(cls, raw_name: str, resolution: Resolution) -> "ResolvedNameResponse":
        return cls(
            raw_name=raw_name,
            stage=resolution.stage,
            score=round(resolution.score, 4),
            identity=IdentityResponse.from_record(resolution.record),
        )


class ResolveResponse(BaseModel):
    results: List[ResolvedNameResponse]


class FuzzyMatchResponse(BaseModel):
    raw_name: str
    matched_name: str
    score: float


class ResolutionPreviewResponse(BaseModel):
    total_records: int
    matched_records: int
    threshold: float = STRICT_MATCH_THRESHOLD
    stage_counts: dict[str, int] = Field(default_factory=dict)
    provisional_names: List[str] = Field(default_factory=list)
    fuzzy_matches: List[FuzzyMatchResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: ResolutionReport, threshold: float) -> "ResolutionPreviewResponse":
        return cls(
            total_records=report.total_records,
            matched_records=report.matched_records,
            threshold=threshold,
            stage_counts=report.stage_counts,
            provisional_names=report.provisional_names,
            fuzzy_matches=[
                FuzzyMatchResponse(raw_name=raw, matched_name=matched, score=round(score, 4))
                for raw, matched, score in report.fuzzy_matches
            ],
        )


class RegistryResponse(BaseModel):
    total: int
    provisional: int
    records: List[IdentityResponse]
