"""Builders for a tiny three-team double round-robin."""

from datetime import datetime, timedelta, timezone

from matchlab.etl.base import MatchRecord

ALPHA, BETA, GAMMA = 1, 2, 3
NAMES = {ALPHA: "Alpha FC", BETA: "Beta United", GAMMA: "Gamma Town"}
SEASON_START = datetime(2024, 8, 1, 15, 0, tzinfo=timezone.utc)


def make_match(match_id, week, home_id, away_id, home_goals=None, away_goals=None):
    return MatchRecord(
        match_id=match_id,
        utc_date=SEASON_START + timedelta(weeks=week),
        home_id=home_id,
        away_id=away_id,
        home_name=NAMES[home_id],
        away_name=NAMES[away_id],
        home_goals=home_goals,
        away_goals=away_goals,
    )
