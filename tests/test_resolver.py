import pytest

from dfsproj.config import DEFAULT_MATCH_THRESHOLD, STRICT_MATCH_THRESHOLD
from dfsproj.identity import IdentityRegistry, PlayerResolver
from dfsproj.models import SalaryRecord, StartingBattery

from tests.conftest import make_record


def test_last_first_with_suffix_resolves_exactly():
    registry = IdentityRegistry(records=[make_record(12345, "Ken Griffey")])
    resolution = PlayerResolver(registry).resolve_detailed("Griffey Jr., Ken")

    assert resolution.stage == "exact"
    assert resolution.record.canonical_id == 12345
    assert resolution.score == 1.0


def test_typo_resolves_through_fuzzy_stage():
    registry = IdentityRegistry(records=[make_record(777, "John Smith")])
    resolution = PlayerResolver(registry).resolve_detailed("Jon Smith", DEFAULT_MATCH_THRESHOLD)

    assert resolution.stage == "fuzzy"
    assert resolution.record.canonical_id == 777
    assert resolution.score == pytest.approx(0.9)


def test_unknown_name_creates_provisional_record(registry):
    before = len(registry)
    record = PlayerResolver(registry).resolve("Zzyzx Player", source_id="88123", position="RP")

    assert record.is_provisional
    assert record.canonical_id < 0
    assert record.position == "RP"
    assert len(registry) == before + 1


def test_token_stage_matches_first_and_last_tokens(registry):
    resolution = PlayerResolver(registry).resolve_detailed("Mookie Markus Betts")

    assert resolution.stage == "token"
    assert resolution.record.canonical_id == 605141
    assert 0.0 < resolution.score < 1.0


def test_nickname_and_accents_resolve_exactly(registry):
    resolver = PlayerResolver(registry)
    assert resolver.resolve("Trout, Mike").canonical_id == 545361
    assert resolver.resolve("Jose Ramirez").canonical_id == 608070
    assert resolver.resolve("Will Contreras").canonical_id == 111111


def test_threshold_is_caller_supplied(registry):
    resolver = PlayerResolver(registry)
    # "aron jduge" is three edits from "aaron judge", about 0.73 similar
    loose = resolver.resolve_detailed("Aron Jduge", 0.7)
    assert loose.stage == "fuzzy"
    assert loose.record.canonical_id == 592450

    strict = resolver.resolve_detailed("Aron Jduge", 0.95)
    assert strict.stage == "provisional"


def test_threshold_outside_unit_interval_is_rejected(registry):
    with pytest.raises(ValueError):
        PlayerResolver(registry).resolve("Mike Trout", 1.5)


def test_resolution_is_deterministic(registry):
    resolver = PlayerResolver(registry)
    first = [resolver.resolve(name) for name in ("Aaron Jugde", "Gerit Cole", "Nobody Known")]
    second = [resolver.resolve(name) for name in ("Aaron Jugde", "Gerit Cole", "Nobody Known")]
    assert [record.identity for record in first] == [record.identity for record in second]


def test_fuzzy_ties_keep_earliest_record():
    registry = IdentityRegistry(
        records=[
            make_record(1, "Luis Garcia"),
            make_record(2, "Luis Garcis"),
        ]
    )
    # equally distant from both names
    assert PlayerResolver(registry).resolve("Luis Garciz").canonical_id == 1


def test_resolve_salaries_reports_stages(registry):
    rows = [
        SalaryRecord(source_id="1", raw_name="Mike Trout", position="OF", salary=6000, team_abbrev="LAA"),
        SalaryRecord(source_id="2", raw_name="Aaron Jugde", position="OF", salary=6400, team_abbrev="NYY"),
        SalaryRecord(source_id="3", raw_name="Zzyzx Player", position="SP", salary=4000, team_abbrev="OAK"),
    ]
    players, report = PlayerResolver(registry).resolve_salaries(rows)

    assert len(players) == len(rows)
    assert [player.stage for player in players] == ["exact", "fuzzy", "provisional"]
    assert players[2].canonical_id == -3
    assert report.total_records == 3
    assert report.matched_records == 2
    assert report.stage_counts == {"exact": 1, "fuzzy": 1, "provisional": 1}
    assert report.provisional_names == ["Zzyzx Player"]
    assert report.fuzzy_matches[0][:2] == ("Aaron Jugde", "Aaron Judge")
    assert report.fuzzy_matches[0][2] >= STRICT_MATCH_THRESHOLD


def test_find_never_creates_provisional_records(registry):
    resolver = PlayerResolver(registry)
    before = len(registry)

    assert resolver.find("Zzyzx Nobody") is None
    assert resolver.find("Aaron Jugde").record.canonical_id == 592450
    assert len(registry) == before


def test_resolve_battery_fills_pitcher_and_catcher_ids(registry, game):
    bare = game.model_copy(update={"home_pitcher_id": None, "away_pitcher_id": None})
    battery = StartingBattery(
        home_pitcher="Cole, Gerrit",
        away_pitcher="Unknown Arm",
        home_catcher="Will Contreras",
    )
    resolved = PlayerResolver(registry).resolve_battery(bare, battery)

    assert resolved.home_pitcher_id == 543037
    assert resolved.away_pitcher_id is None
    assert resolved.home_catcher_id == 111111
    assert resolved.away_catcher_id is None
    assert not any(record.is_provisional for record in registry.all())


def test_resolve_battery_keeps_explicit_ids_and_skips_provisional_matches(registry, game):
    resolver = PlayerResolver(registry)
    resolver.resolve("Zzyzx Player", source_id="30004")
    battery = StartingBattery(home_pitcher="Mike Trout", away_pitcher="Zzyzx Player")

    resolved = resolver.resolve_battery(game, battery, DEFAULT_MATCH_THRESHOLD)

    assert resolved.home_pitcher_id == game.home_pitcher_id
    assert resolved.away_pitcher_id == game.away_pitcher_id
    assert resolver.resolve_battery(game.model_copy(update={"away_pitcher_id": None}), battery).away_pitcher_id is None
