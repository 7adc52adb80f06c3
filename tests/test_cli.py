import json
import sys
from pathlib import Path

from dfsproj import cli
from dfsproj.persistence import RegistryStore

from tests.conftest import make_record


def test_cli_resolves_and_writes_reports(tmp_path: Path, monkeypatch, capsys):
    registry_path = tmp_path / "registry.sqlite"
    RegistryStore(registry_path).save([make_record(12345, "Ken Griffey"), make_record(777, "John Smith")])

    salaries = tmp_path / "DKSalaries.csv"
    salaries.write_text(
        "Position,Name,ID,Salary,TeamAbbrev\n"
        "OF,\"Griffey Jr., Ken\",1,5000,SEA\n"
        "1B,Jon Smith,2,4000,SEA\n"
        "SP,Zzyzx Player,3,7000,OAK\n",
        encoding="utf-8",
    )
    report_path = tmp_path / "report.json"
    output_path = tmp_path / "players.json"
    profile_path = tmp_path / "profile.json"
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "dfsproj",
            str(salaries),
            "--registry",
            str(registry_path),
            "--threshold",
            "0.7",
            "--flush",
            "--report",
            str(report_path),
            "--output",
            str(output_path),
            "--save-profile",
            str(profile_path),
        ],
    )

    cli.main()

    out = capsys.readouterr().out
    assert "Resolved 2/3 salary rows" in out
    assert "Jon Smith -> John Smith" in out
    assert "Saved 3 identity records" in out

    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["stage_counts"] == {"exact": 1, "fuzzy": 1, "provisional": 1}

    players = json.loads(output_path.read_text(encoding="utf-8"))
    assert [player["player_id"] for player in players] == [12345, 777, -3]

    stored = RegistryStore(registry_path).load()
    assert [record.display_name for record in stored][-1] == "Zzyzx Player"
    assert json.loads(profile_path.read_text(encoding="utf-8"))["threshold"] == 0.7


def test_cli_resolves_probable_pitchers_for_game(tmp_path: Path, monkeypatch, capsys):
    registry_path = tmp_path / "registry.sqlite"
    RegistryStore(registry_path).save([make_record(543037, "Gerrit Cole", "SP"), make_record(592450, "Aaron Judge")])
    salaries = tmp_path / "DKSalaries.csv"
    salaries.write_text("Position,Name,ID,Salary,TeamAbbrev\nOF,Aaron Judge,1,6400,NYY\n", encoding="utf-8")
    game_path = tmp_path / "game.json"
    game_path.write_text(json.dumps({"game_id": 745001, "season": 2024, "home_team": "BOS", "away_team": "NYY"}))

    projected = []

    async def fake_project(players, game, settings):
        projected.append(game)
        return []

    monkeypatch.setattr(cli, "_project", fake_project)
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "dfsproj",
            str(salaries),
            "--registry",
            str(registry_path),
            "--game",
            str(game_path),
            "--home-pitcher",
            "Cole, Gerrit",
            "--away-pitcher",
            "Nobody Special",
        ],
    )

    cli.main()

    assert projected[0].home_pitcher_id == 543037
    assert projected[0].away_pitcher_id is None
    assert "Probable pitchers: home 543037, away -" in capsys.readouterr().out
