from __future__ import annotations

import pytest

from dfsproj.identity import IdentityRegistry
from dfsproj.models import CanonicalId, GameContext, IdentityRecord, ResolvedPlayer, SalaryRecord


@pytest.fixture(scope="module")
def anyio_backend():
    return "asyncio"


def make_record(player_id: int, name: str, position: str = "OF", team_id: int = 0) -> IdentityRecord:
    return IdentityRecord(
        identity=CanonicalId(value=player_id),
        display_name=name,
        position=position,
        team_id=team_id,
    )


def make_player(
    player_id: int,
    name: str,
    position: str = "OF",
    *,
    team: str = "NYY",
    salary: int = 5000,
) -> ResolvedPlayer:
    return ResolvedPlayer(
        salary=SalaryRecord(
            source_id=str(player_id),
            raw_name=name,
            position=position,
            salary=salary,
            team_abbrev=team,
        ),
        identity=make_record(player_id, name, position),
    )


@pytest.fixture
def registry() -> IdentityRegistry:
    return IdentityRegistry(
        records=[
            make_record(545361, "Mike Trout", "OF", 108),
            make_record(592450, "Aaron Judge", "OF", 147),
            make_record(660271, "Shohei Ohtani", "DH", 119),
            make_record(543037, "Gerrit Cole", "SP", 147),
            make_record(605141, "Mookie Betts", "OF", 119),
            make_record(608070, "José Ramírez", "3B", 114),
            make_record(111111, "William Contreras", "C", 158),
        ]
    )


@pytest.fixture
def game() -> GameContext:
    return GameContext(
        game_id=745001,
        season=2024,
        home_team="NYY",
        away_team="BOS",
        home_team_id=147,
        away_team_id=111,
        home_pitcher_id=543037,
        away_pitcher_id=456034,
    )
