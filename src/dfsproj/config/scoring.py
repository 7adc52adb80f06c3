"""Fantasy scoring values for supported sites."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable


@dataclass(frozen=True)
class ScoringRules:
    site: str
    # hitters
    single: float
    double: float
    triple: float
    home_run: float
    rbi: float
    run: float
    walk: float
    hit_by_pitch: float
    stolen_base: float
    # pitchers
    inning_pitched: float
    strikeout: float
    win: float
    earned_run: float
    hit_allowed: float
    walk_allowed: float
    hit_batsman: float
    complete_game: float
    complete_game_shutout: float
    no_hitter: float


_SCORING_RULES: Dict[str, ScoringRules] = {
    "DK": ScoringRules(
        site="DK",
        single=3.0,
        double=5.0,
        triple=8.0,
        home_run=10.0,
        rbi=2.0,
        run=2.0,
        walk=2.0,
        hit_by_pitch=2.0,
        stolen_base=5.0,
        inning_pitched=2.25,
        strikeout=2.0,
        win=4.0,
        earned_run=-2.0,
        hit_allowed=-0.6,
        walk_allowed=-0.6,
        hit_batsman=-0.6,
        complete_game=2.5,
        complete_game_shutout=2.5,
        no_hitter=5.0,
    ),
}

DRAFTKINGS_MLB = _SCORING_RULES["DK"]


def iter_scoring() -> Iterable[ScoringRules]:
    return _SCORING_RULES.values()


def get_scoring(site: str) -> ScoringRules:
    """Fetch scoring values for a site, raising KeyError if missing."""

    key = site.upper()
    if key not in _SCORING_RULES:
        raise KeyError(f"No scoring rules configured for site={site!r}")
    return _SCORING_RULES[key]
