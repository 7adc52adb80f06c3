"""REST API for identity resolution and projections."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from dfsproj.aggregation import ProjectionAggregator, rank_projections
from dfsproj.api.schemas import (
    IdentityResponse,
    ProjectionBatchResponse,
    ProjectionRequest,
    ProjectionResponse,
    RegistryResponse,
    ResolutionPreviewResponse,
    ResolvedNameResponse,
    ResolveRequest,
    ResolveResponse,
)
from dfsproj.config import STRICT_MATCH_THRESHOLD, ProjectionSettings
from dfsproj.estimators import build_baseline_estimators
from dfsproj.identity import IdentityRegistry, PlayerResolver, ResolutionReport
from dfsproj.ingest import parse_salary_csv
from dfsproj.models import GameContext, ResolvedPlayer, SalaryRecord
from dfsproj.persistence import RegistryStore
from dfsproj.stats import StatsClient


logger = logging.getLogger(__name__)


def _parse_mapping(mapping_str: str | None) -> dict[str, str]:
    if not mapping_str:
        return {}
    try:
        mapping = json.loads(mapping_str)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid mapping JSON: {exc}") from exc
    if not isinstance(mapping, dict):
        raise HTTPException(status_code=400, detail="Mapping JSON must be an object")
    return {str(key): str(value) for key, value in mapping.items()}


def create_app(
    registry: IdentityRegistry | None = None,
    aggregator: ProjectionAggregator | None = None,
    settings: ProjectionSettings | None = None,
) -> FastAPI:
    settings = settings or ProjectionSettings.from_env()
    if registry is None:
        registry = IdentityRegistry(RegistryStore(settings.registry_path))

    stats: StatsClient | None = None
    if aggregator is None:
        stats = StatsClient()
        aggregator = ProjectionAggregator(build_baseline_estimators(stats), timeout=settings.estimator_timeout)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if stats is not None:
            await stats.aclose()

    app = FastAPI(title="dfsproj projections", lifespan=lifespan)
    resolver = PlayerResolver(registry)
    app.state.registry = registry
    app.state.aggregator = aggregator
    app.state.settings = settings

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/resolve", response_model=ResolveResponse)
    def resolve(request: ResolveRequest) -> ResolveResponse:
        results = [
            ResolvedNameResponse.from_resolution(name, resolver.resolve_detailed(name, request.threshold))
            for name in request.names
        ]
        return ResolveResponse(results=results)

    def _resolve_upload(records: list[SalaryRecord], threshold: float, flush: bool) -> ResolutionReport:
        _, report = resolver.resolve_salaries(records, threshold)
        if flush:
            registry.flush()
        return report

    @app.post("/preview", response_model=ResolutionPreviewResponse)
    async def preview(
        salaries: UploadFile = File(...),
        salary_mapping: str | None = Form(None),
        threshold: float = Form(STRICT_MATCH_THRESHOLD),
        flush: bool = Form(False),
    ) -> ResolutionPreviewResponse:
        if not 0.0 <= threshold <= 1.0:
            raise HTTPException(status_code=400, detail="threshold must be within [0, 1]")
        contents = await salaries.read()
        if not contents:
            raise HTTPException(status_code=400, detail="salary file is empty")
        try:
            text = contents.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise HTTPException(status_code=400, detail="salary file must be UTF-8 encoded") from exc

        records = parse_salary_csv(text, mapping=_parse_mapping(salary_mapping) or None)
        if not records:
            raise HTTPException(status_code=400, detail="salary file has no usable rows")
        try:
            report = await run_in_threadpool(_resolve_upload, records, threshold, flush)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return ResolutionPreviewResponse.from_report(report, threshold)

    @app.get("/registry", response_model=RegistryResponse)
    def list_registry(provisional_only: bool = False, limit: int | None = None) -> RegistryResponse:
        records = registry.all()
        provisional = [record for record in records if record.is_provisional]
        selected = provisional if provisional_only else list(records)
        if limit is not None:
            selected = selected[: max(0, limit)]
        return RegistryResponse(
            total=len(records),
            provisional=len(provisional),
            records=[IdentityResponse.from_record(record) for record in selected],
        )

    def _resolve_request(request: ProjectionRequest) -> tuple[list[ResolvedPlayer], GameContext]:
        salary_rows = [
            SalaryRecord(
                source_id=player.source_id,
                raw_name=player.name,
                position=player.position.upper(),
                salary=player.salary,
                team_abbrev=player.team.upper(),
            )
            for player in request.players
        ]
        players, report = resolver.resolve_salaries(salary_rows, request.threshold)
        if report.provisional_names:
            logger.info(
                "Projecting %d provisional players for game %s", len(report.provisional_names), request.game.game_id
            )
        game = request.game
        if request.battery is not None:
            game = resolver.resolve_battery(game, request.battery, request.battery_threshold)
        return players, game

    @app.post("/projections", response_model=ProjectionBatchResponse)
    async def projections(request: ProjectionRequest) -> ProjectionBatchResponse:
        players, game = await run_in_threadpool(_resolve_request, request)
        results = await aggregator.project_game(players, game)
        ranked = rank_projections(results)
        return ProjectionBatchResponse(
            game_id=game.game_id,
            home_pitcher_id=game.home_pitcher_id,
            away_pitcher_id=game.away_pitcher_id,
            projections=[ProjectionResponse.from_ranked(entry) for entry in ranked],
        )

    return app


__all__ = ["create_app"]
