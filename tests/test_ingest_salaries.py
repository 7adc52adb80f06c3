from pathlib import Path

import pytest

from dfsproj.ingest import SalaryRow, load_salary_csv, parse_salary_csv, rows_to_records


DK_EXPORT = """Position,Name + ID,Name,ID,Roster Position,Salary,Game Info,TeamAbbrev,AvgPointsPerGame
OF,Aaron Judge (30001),Aaron Judge,30001,OF,"$6,400",NYY@BOS 07/04/2024 07:10PM ET,nyy,11.2
SP,Gerrit Cole (30002),Gerrit Cole,30002,P,9800,NYY@BOS 07/04/2024 07:10PM ET,NYY,19.85
1B,,,30003,1B,3000,NYY@BOS 07/04/2024 07:10PM ET,BOS,6.1
2B,Broken Salary (30004),Broken Salary,30004,2B,TBD,NYY@BOS 07/04/2024 07:10PM ET,BOS,4.0
"""


def test_parse_draftkings_export_skips_bad_rows(caplog):
    records = parse_salary_csv(DK_EXPORT)

    assert [record.raw_name for record in records] == ["Aaron Judge", "Gerrit Cole"]
    judge, cole = records
    assert judge.source_id == "30001"
    assert judge.salary == 6400
    assert judge.team_abbrev == "NYY"
    assert judge.avg_points_per_game == pytest.approx(11.2)
    assert judge.game_info.startswith("NYY@BOS")
    assert cole.position == "SP"
    assert "without a player name" in caplog.text
    assert "Broken Salary" in caplog.text


def test_custom_mapping_joins_name_columns():
    text = "pid,First,Last,Pos,Pay,Tm\n9,Mookie,Betts,OF,5800,LAD\n"
    mapping = {
        "player_id": "pid",
        "name": "First|Last",
        "position": "Pos",
        "salary": "Pay",
        "team": "Tm",
        "avg_points": "missing",
        "game_info": "missing",
    }
    records = parse_salary_csv(text, mapping=mapping)

    assert len(records) == 1
    assert records[0].raw_name == "Mookie Betts"
    assert records[0].salary == 5800
    assert records[0].avg_points_per_game == 0.0
    assert records[0].game_info is None


def test_rows_to_records_rejects_non_numeric_points():
    row = SalaryRow(raw_id="1", raw_name="Odd Row", raw_salary="4000", raw_avg_points="n/a")
    assert rows_to_records([row]) == []


def test_load_salary_csv_strips_byte_order_mark(tmp_path: Path):
    path = tmp_path / "DKSalaries.csv"
    path.write_text("\ufeff" + DK_EXPORT, encoding="utf-8")

    records = load_salary_csv(path)
    assert records[0].raw_name == "Aaron Judge"
