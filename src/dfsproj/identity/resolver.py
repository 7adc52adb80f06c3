"""Resolve free-text player names to registry identities."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Sequence, Tuple

from dfsproj.config.projection import DEFAULT_MATCH_THRESHOLD, STRICT_MATCH_THRESHOLD
from dfsproj.identity.names import normalize_name, normalized_similarity
from dfsproj.identity.registry import IdentityRegistry
from dfsproj.models import GameContext, IdentityRecord, ResolvedPlayer, SalaryRecord, StartingBattery


logger = logging.getLogger(__name__)

MatchStage = Literal["exact", "token", "fuzzy", "provisional"]


@dataclass(frozen=True)
class Resolution:
    record: IdentityRecord
    stage: MatchStage
    score: float


@dataclass(frozen=True)
class ResolutionReport:
    total_records: int
    stage_counts: dict[str, int]
    provisional_names: List[str] = field(default_factory=list)
    fuzzy_matches: List[Tuple[str, str, float]] = field(default_factory=list)

    @property
    def matched_records(self) -> int:
        return self.total_records - self.stage_counts.get("provisional", 0)


class PlayerResolver:
    """Cascading exact → token → fuzzy → provisional name resolution."""

    def __init__(self, registry: IdentityRegistry) -> None:
        self.registry = registry

    def resolve(
        self,
        raw_name: str,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        *,
        source_id: object = None,
        position: str = "",
    ) -> IdentityRecord:
        return self.resolve_detailed(raw_name, threshold, source_id=source_id, position=position).record

    def resolve_detailed(
        self,
        raw_name: str,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        *,
        source_id: object = None,
        position: str = "",
    ) -> Resolution:
        match = self.find(raw_name, threshold)
        if match is not None:
            return match
        record = self.registry.add_provisional(source_id, raw_name, position)
        return Resolution(record, "provisional", 0.0)

    def find(self, raw_name: str, threshold: float = DEFAULT_MATCH_THRESHOLD) -> Optional[Resolution]:
        """Run the exact, token and fuzzy stages without creating a provisional record."""

        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {threshold!r}")

        normalized = normalize_name(raw_name)

        record = self.registry.lookup_exact(normalized)
        if record is not None:
            return Resolution(record, "exact", 1.0)

        indexed = self.registry.indexed()

        token_match = self._match_tokens(normalized, indexed)
        if token_match is not None:
            name, record = token_match
            return Resolution(record, "token", normalized_similarity(normalized, name))

        best = self._best_fuzzy(normalized, indexed)
        if best is not None and best[1] >= threshold:
            return Resolution(best[0], "fuzzy", best[1])

        logger.debug("No identity for %r above %.2f (best %.3f)", raw_name, threshold, best[1] if best else 0.0)
        return None

    @staticmethod
    def _match_tokens(
        normalized: str, indexed: Sequence[Tuple[str, IdentityRecord]]
    ) -> Optional[Tuple[str, IdentityRecord]]:
        tokens = normalized.split()
        if len(tokens) < 2:
            return None
        first, last = tokens[0], tokens[-1]
        for name, record in indexed:
            if first in name and last in name:
                return name, record
        return None

    @staticmethod
    def _best_fuzzy(
        normalized: str, indexed: Sequence[Tuple[str, IdentityRecord]]
    ) -> Optional[Tuple[IdentityRecord, float]]:
        best: Optional[Tuple[IdentityRecord, float]] = None
        for name, record in indexed:
            score = normalized_similarity(normalized, name)
            if best is None or score > best[1]:
                best = (record, score)
        return best

    def resolve_salaries(
        self,
        records: Sequence[SalaryRecord],
        threshold: float = STRICT_MATCH_THRESHOLD,
    ) -> Tuple[List[ResolvedPlayer], ResolutionReport]:
        """Resolve every salary row; each row yields exactly one ResolvedPlayer."""

        resolved: List[ResolvedPlayer] = []
        stages: Counter[str] = Counter()
        provisional_names: List[str] = []
        fuzzy_matches: List[Tuple[str, str, float]] = []
        for row in records:
            resolution = self.resolve_detailed(
                row.raw_name,
                threshold,
                source_id=row.source_id,
                position=row.position,
            )
            stages[resolution.stage] += 1
            if resolution.stage == "provisional":
                provisional_names.append(row.raw_name)
            elif resolution.stage == "fuzzy":
                fuzzy_matches.append((row.raw_name, resolution.record.display_name, resolution.score))
            resolved.append(
                ResolvedPlayer(
                    salary=row,
                    identity=resolution.record,
                    stage=resolution.stage,
                    score=resolution.score,
                )
            )

        report = ResolutionReport(
            total_records=len(resolved),
            stage_counts=dict(stages),
            provisional_names=provisional_names,
            fuzzy_matches=fuzzy_matches,
        )
        if provisional_names:
            logger.info(
                "Resolved %d/%d salary rows; %d provisional",
                report.matched_records,
                report.total_records,
                len(provisional_names),
            )
        return resolved, report

    def resolve_battery(
        self,
        game: GameContext,
        battery: StartingBattery,
        threshold: float = DEFAULT_MATCH_THRESHOLD,
    ) -> GameContext:
        """Fill the game's pitcher and catcher ids from probable-starter names.

        Ids already set on ``game`` are kept. Names that only match a
        provisional record, or nothing at all, leave their id unset.
        """

        updates: dict[str, int] = {}
        for field_name, raw_name in battery.named().items():
            if getattr(game, field_name) is not None:
                continue
            match = self.find(raw_name, threshold)
            if match is None or match.record.is_provisional:
                role = field_name[: -len("_id")].replace("_", " ")
                logger.info("No MLB id found for %s %r in game %s", role, raw_name, game.game_id)
                continue
            updates[field_name] = match.record.canonical_id
        return game.model_copy(update=updates) if updates else game
