"""Match context: what each side plays for and whether it is a derby."""

import math
from typing import Optional

from matchlab.etl.base import MatchContext, Stakes, Standing
from matchlab.etl.resolver import TeamResolver, get_resolver


DERBY_PAIRS: list[tuple[str, str]] = [
    # France
    ("Paris Saint-Germain", "Marseille"),
    ("Lyon", "Saint-Etienne"),
    # England
    ("Liverpool", "Everton"),
    ("Manchester United", "Manchester City"),
    ("Arsenal", "Tottenham"),
    ("Chelsea", "Tottenham"),
    # Spain
    ("Real Madrid", "Atletico Madrid"),
    ("Real Madrid", "Barcelona"),
    ("Barcelona", "Espanyol"),
    # Italy
    ("Inter", "Milan"),
    ("Juventus", "Torino"),
    ("Roma", "Lazio"),
    # Germany
    ("Borussia Dortmund", "Schalke"),
    ("Bayern Munich", "Borussia Dortmund"),
]

TITLE_RACE_MAX_RANK = 2
EUROPE_MAX_RANK = 6
EUROPE_TABLE_SHARE = 0.3
RELEGATION_SPOTS = 3


def stakes_for(rank: int, n_teams: int) -> Stakes:
    """
    Stakes tier from a table position.

    Top two fight for the title; up to min(6, ceil(30% of the table)) for
    Europe; the bottom three for survival.
    """
    if rank <= TITLE_RACE_MAX_RANK:
        return Stakes.TITLE
    if rank <= min(EUROPE_MAX_RANK, math.ceil(n_teams * EUROPE_TABLE_SHARE)):
        return Stakes.EUROPE
    if rank > n_teams - RELEGATION_SPOTS:
        return Stakes.RELEGATION
    return Stakes.MIDTABLE


def is_derby(
    home_name: str,
    away_name: str,
    resolver: Optional[TeamResolver] = None,
) -> bool:
    resolver = resolver or get_resolver()
    pair = {resolver.resolve(home_name), resolver.resolve(away_name)}
    return any(
        pair == {resolver.resolve(t1), resolver.resolve(t2)}
        for t1, t2 in DERBY_PAIRS
    )


def match_context(
    home: Standing,
    away: Standing,
    n_teams: int,
    resolver: Optional[TeamResolver] = None,
) -> MatchContext:
    """Stakes for both sides plus derby flag, from point-in-time standings."""
    return MatchContext(
        home_stakes=stakes_for(home.rank, n_teams),
        away_stakes=stakes_for(away.rank, n_teams),
        is_derby=is_derby(home.team_name, away.team_name, resolver),
    )
