"""ETL module: typed signal contract, entity resolution and providers."""

from matchlab.etl.base import ResultsProvider
from matchlab.etl.competitions import LEAGUES, League
from matchlab.etl.football_data import FootballDataError, FootballDataProvider
from matchlab.etl.resolver import TeamResolver, find_team, match_person

__all__ = [
    "ResultsProvider",
    "FootballDataProvider",
    "FootballDataError",
    "League",
    "LEAGUES",
    "TeamResolver",
    "find_team",
    "match_person",
]
