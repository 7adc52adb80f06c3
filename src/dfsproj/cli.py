"""Command-line interface for resolving salary exports and projecting a game."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import List

from dfsproj.aggregation import ProjectionAggregator, RankedProjection, rank_projections, summarize_defaults
from dfsproj.config import STRICT_MATCH_THRESHOLD, ProjectionSettings
from dfsproj.config_loader import MappingProfile
from dfsproj.estimators import build_baseline_estimators
from dfsproj.identity import IdentityRegistry, PlayerResolver
from dfsproj.ingest import load_salary_csv
from dfsproj.models import GameContext, ResolvedPlayer, StartingBattery
from dfsproj.persistence import JsonRegistryStore, RegistryStore
from dfsproj.stats import StatsClient


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve DFS salary exports and project players")
    parser.add_argument("salaries", type=Path, help="Path to salary export CSV")
    parser.add_argument("--registry", type=Path, default=None, help="SQLite identity registry path")
    parser.add_argument(
        "--json-registry",
        type=Path,
        default=None,
        help="Use a player-mapping.json style registry instead of SQLite",
    )
    parser.add_argument(
        "--column",
        action="append",
        default=[],
        help="Mapping for salary CSV columns (e.g., name=Name)",
    )
    parser.add_argument("--load-profile", type=Path, help="Load column mapping JSON", default=None)
    parser.add_argument("--save-profile", type=Path, help="Save column mapping JSON", default=None)
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help=f"Minimum fuzzy similarity to accept a match (default {STRICT_MATCH_THRESHOLD})",
    )
    parser.add_argument("--flush", action="store_true", help="Persist provisional records to the registry")
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Optional path to write resolution summary JSON",
    )
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write resolved players JSON")
    parser.add_argument(
        "--game",
        type=Path,
        default=None,
        help="Game context JSON; when given, project every resolved player for that game",
    )
    battery = parser.add_argument_group("probable starters", "Names resolved to MLB ids for --game")
    battery.add_argument("--home-pitcher", default=None, help="Home probable pitcher name")
    battery.add_argument("--away-pitcher", default=None, help="Away probable pitcher name")
    battery.add_argument("--home-catcher", default=None, help="Home starting catcher name")
    battery.add_argument("--away-catcher", default=None, help="Away starting catcher name")
    parser.add_argument("--top", type=int, default=20, help="Number of ranked projections to print")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _resolved_to_dict(player: ResolvedPlayer) -> dict:
    return {
        "source_id": player.salary.source_id,
        "raw_name": player.salary.raw_name,
        "player_id": player.canonical_id,
        "name": player.name,
        "position": player.position,
        "team": player.salary.team_abbrev,
        "salary": player.salary.salary,
        "stage": player.stage,
        "score": round(player.score, 4),
    }


async def _project(
    players: List[ResolvedPlayer], game: GameContext, settings: ProjectionSettings
) -> List[RankedProjection]:
    async with StatsClient() as stats:
        aggregator = ProjectionAggregator(build_baseline_estimators(stats), timeout=settings.estimator_timeout)
        results = await aggregator.project_game(players, game)
    return rank_projections(results)


def main() -> None:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = ProjectionSettings.from_env()

    salary_mapping = _parse_mapping(args.column)
    threshold = args.threshold
    if args.load_profile:
        profile = MappingProfile.load(args.load_profile)
        salary_mapping = profile.salary_mapping | salary_mapping
        if threshold is None:
            threshold = profile.threshold
    if threshold is None:
        threshold = settings.strict_match_threshold

    if args.json_registry:
        store = JsonRegistryStore(args.json_registry)
    else:
        store = RegistryStore(args.registry or settings.registry_path)
    registry = IdentityRegistry(store)
    resolver = PlayerResolver(registry)

    records = load_salary_csv(args.salaries, mapping=salary_mapping or None)
    players, report = resolver.resolve_salaries(records, threshold)

    print(f"Resolved {report.matched_records}/{report.total_records} salary rows (threshold {threshold:.2f})")
    for stage in ("exact", "token", "fuzzy", "provisional"):
        print(f"  {stage}: {report.stage_counts.get(stage, 0)}")
    if report.fuzzy_matches:
        print("Fuzzy matches:")
        for raw_name, matched, score in report.fuzzy_matches:
            print(f"  {raw_name} -> {matched} ({score:.3f})")
    if report.provisional_names:
        print("Provisional records:", ", ".join(report.provisional_names))

    if args.flush:
        saved = registry.flush()
        print(f"Saved {saved} identity records")

    if args.report:
        payload = {
            "total_records": report.total_records,
            "matched_records": report.matched_records,
            "threshold": threshold,
            "stage_counts": report.stage_counts,
            "provisional_names": report.provisional_names,
            "fuzzy_matches": [
                {"raw_name": raw, "matched_name": matched, "score": round(score, 4)}
                for raw, matched, score in report.fuzzy_matches
            ],
        }
        args.report.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    if args.output:
        args.output.write_text(json.dumps([_resolved_to_dict(p) for p in players], indent=2), encoding="utf-8")
        print(f"Resolved players saved to {args.output}")

    if args.save_profile:
        MappingProfile(salary_mapping=salary_mapping, threshold=threshold).save(args.save_profile)

    if args.game:
        game = GameContext.model_validate_json(args.game.read_text(encoding="utf-8"))
        battery = StartingBattery(
            home_pitcher=args.home_pitcher,
            away_pitcher=args.away_pitcher,
            home_catcher=args.home_catcher,
            away_catcher=args.away_catcher,
        )
        game = resolver.resolve_battery(game, battery, settings.match_threshold)
        print(f"Probable pitchers: home {game.home_pitcher_id or '-'}, away {game.away_pitcher_id or '-'}")
        ranked = asyncio.run(_project(players, game, settings))
        print(f"Projected {len(ranked)} players for game {game.game_id}")
        for entry in ranked[: max(0, args.top)]:
            total = entry.result.total
            print(
                f"  {entry.rank:>3}. {entry.result.player.name:<24} {total.points:6.2f} pts "
                f"[{total.floor:.1f}-{total.ceiling:.1f}] conf {total.confidence:.0f} "
                f"value {entry.value:.2f} ({entry.tier})"
            )
        defaults = summarize_defaults(entry.result for entry in ranked)
        if defaults:
            summary = ", ".join(f"{category.value}={count}" for category, count in defaults.items())
            print(f"Defaulted categories: {summary}")


if __name__ == "__main__":
    main()
