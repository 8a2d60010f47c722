"""Supported leagues and their football-data.org competition codes."""

from dataclasses import dataclass


@dataclass(frozen=True)
class League:
    """League configuration."""

    code: str  # football-data.org v4 competition code
    name: str
    country: str
    teams: int = 20


PREMIER_LEAGUE = League(code="PL", name="Premier League", country="England")
LA_LIGA = League(code="PD", name="La Liga", country="Spain")
SERIE_A = League(code="SA", name="Serie A", country="Italy")
BUNDESLIGA = League(code="BL1", name="Bundesliga", country="Germany", teams=18)
LIGUE_1 = League(code="FL1", name="Ligue 1", country="France", teams=18)


LEAGUES: dict[str, League] = {
    league.code: league
    for league in (PREMIER_LEAGUE, LA_LIGA, SERIE_A, BUNDESLIGA, LIGUE_1)
}
