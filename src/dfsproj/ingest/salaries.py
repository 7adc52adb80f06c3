"""Helpers to load contest salary exports and emit SalaryRecords."""

from __future__ import annotations

import csv
import io
import logging
import re
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from pydantic import BaseModel, ValidationError

from dfsproj.models import SalaryRecord


logger = logging.getLogger(__name__)


DEFAULT_SALARY_MAPPING = {
    "player_id": "ID",
    "name": "Name",
    "position": "Position",
    "salary": "Salary",
    "game_info": "Game Info",
    "avg_points": "AvgPointsPerGame",
    "team": "TeamAbbrev",
}


class SalaryRow(BaseModel):
    raw_id: Optional[str] = None
    raw_name: str
    raw_team: str = ""
    raw_position: str = ""
    raw_salary: str = "0"
    raw_avg_points: str = "0"
    raw_game_info: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "SalaryRow":
        def extract(spec: Optional[str | Sequence[str]], *, default: Optional[str] = None) -> Optional[str]:
            if spec is None:
                return default
            if isinstance(spec, str):
                value = row.get(spec)
                return value.strip() if value is not None else default
            parts = [row.get(col, "").strip() for col in spec if row.get(col)]
            return " ".join(parts) if parts else default

        def parse_spec(key: str) -> Optional[str | Sequence[str]]:
            spec = mapping.get(key, DEFAULT_SALARY_MAPPING.get(key))
            if isinstance(spec, str) and "|" in spec:
                return tuple(part.strip() for part in spec.split("|"))
            return spec

        return cls(
            raw_id=extract(parse_spec("player_id")),
            raw_name=extract(parse_spec("name"), default="") or "",
            raw_team=extract(parse_spec("team"), default="") or "",
            raw_position=extract(parse_spec("position"), default="") or "",
            raw_salary=extract(parse_spec("salary"), default="0") or "0",
            raw_avg_points=extract(parse_spec("avg_points"), default="0") or "0",
            raw_game_info=extract(parse_spec("game_info")),
        )


def _parse_salary(raw_salary: str) -> int:
    digits = re.sub(r"[^0-9]", "", raw_salary)
    if not digits:
        raise ValueError(f"salary '{raw_salary}' has no digits")
    return int(digits)


def _parse_points(raw_points: str) -> float:
    text = raw_points.strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"average points '{raw_points}' is not numeric") from None


def rows_to_records(rows: Sequence[SalaryRow]) -> List[SalaryRecord]:
    """Convert parsed rows, skipping (and logging) rows that cannot be used."""

    records: List[SalaryRecord] = []
    for index, row in enumerate(rows, start=1):
        if not row.raw_name:
            logger.warning("Skipping salary row %d without a player name", index)
            continue
        try:
            records.append(
                SalaryRecord(
                    source_id=row.raw_id or "",
                    raw_name=row.raw_name,
                    position=row.raw_position.upper(),
                    salary=_parse_salary(row.raw_salary),
                    team_abbrev=row.raw_team.upper(),
                    avg_points_per_game=_parse_points(row.raw_avg_points),
                    game_info=row.raw_game_info or None,
                )
            )
        except (ValueError, ValidationError) as exc:
            logger.warning("Skipping salary row %d (%s): %s", index, row.raw_name, exc)
    return records


def parse_salary_csv(text: str, *, mapping: Mapping[str, str] | None = None) -> List[SalaryRecord]:
    mapping = mapping or DEFAULT_SALARY_MAPPING
    reader = csv.DictReader(io.StringIO(text))
    return rows_to_records([SalaryRow.from_mapping(row, mapping) for row in reader])


def load_salary_csv(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[SalaryRecord]:
    with path.open(newline="", encoding="utf-8-sig") as f:
        return parse_salary_csv(f.read(), mapping=mapping)
