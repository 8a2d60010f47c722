"""
Point-in-time league reconstruction.

Replays a chronological match log to rebuild what was known strictly before
a given fixture: the table, recent form, strength of schedule, head to head,
home/away splits and schedule congestion. Nothing here looks at the fixture
being predicted or anything after it.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Mapping, Optional, Sequence

from matchlab.etl.base import (
    HeadToHeadMeeting,
    HeadToHeadRecord,
    MatchRecord,
    Standing,
    StrengthOfSchedule,
    TacticalProfile,
    TeamFatigue,
    VenueRecord,
)

logger = logging.getLogger(__name__)

DEFAULT_FORM_WINDOW = 5
DEFAULT_SOS_WINDOW = 5
DEFAULT_H2H_LIMIT = 10
FATIGUE_LOOKBACK_DAYS = 30


class MatchIndexOutOfRange(IndexError):
    """Raised when a replay index falls outside the match log."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"Match index {index} outside log of {size} matches")


@dataclass
class _Tally:
    team_id: int
    team_name: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    results: list[str] = field(default_factory=list)

    @property
    def points(self) -> int:
        return self.won * 3 + self.drawn

    def add(self, scored: int, conceded: int) -> None:
        self.played += 1
        self.goals_for += scored
        self.goals_against += conceded
        if scored > conceded:
            self.won += 1
            self.results.append("W")
        elif scored < conceded:
            self.lost += 1
            self.results.append("L")
        else:
            self.drawn += 1
            self.results.append("D")


def sort_matches(matches: Sequence[MatchRecord]) -> list[MatchRecord]:
    """Chronological order, match id breaking same-kickoff ties."""
    return sorted(matches, key=lambda m: (m.utc_date, m.match_id))


def build_standings(
    prior_matches: Sequence[MatchRecord],
    roster: Optional[Mapping[int, str]] = None,
    form_window: int = DEFAULT_FORM_WINDOW,
) -> list[Standing]:
    """
    League table from a list of earlier matches.

    Unfinished matches are ignored. Teams in `roster` appear with zero
    counters before their first game; other teams join on first appearance.
    Sorted by points, goal difference, goals scored, then team id.
    """
    tallies: dict[int, _Tally] = {}
    for team_id, name in (roster or {}).items():
        tallies[team_id] = _Tally(team_id=team_id, team_name=name)

    for m in prior_matches:
        if not m.is_finished:
            continue
        home = tallies.setdefault(m.home_id, _Tally(team_id=m.home_id, team_name=m.home_name))
        away = tallies.setdefault(m.away_id, _Tally(team_id=m.away_id, team_name=m.away_name))
        home.add(m.home_goals, m.away_goals)
        away.add(m.away_goals, m.home_goals)

    ordered = sorted(
        tallies.values(),
        key=lambda t: (-t.points, -(t.goals_for - t.goals_against), -t.goals_for, t.team_id),
    )

    table = []
    for rank, t in enumerate(ordered, start=1):
        recent = list(reversed(t.results[-form_window:])) if form_window > 0 else []
        table.append(Standing(
            rank=rank,
            team_id=t.team_id,
            team_name=t.team_name,
            played=t.played,
            won=t.won,
            drawn=t.drawn,
            lost=t.lost,
            goals_for=t.goals_for,
            goals_against=t.goals_against,
            points=t.points,
            form=",".join(recent) or None,
        ))
    logger.debug("[STANDINGS] %d teams from %d prior matches", len(table), len(prior_matches))
    return table


def standings_as_of(
    match_index: int,
    match_log: Sequence[MatchRecord],
    roster: Optional[Mapping[int, str]] = None,
    form_window: int = DEFAULT_FORM_WINDOW,
) -> list[Standing]:
    """
    League table as it stood strictly before match_log[match_index].

    Args:
        match_index: Position in the chronologically sorted log; 0 gives
            the empty (roster-only) table, len(log) the final one.
        match_log: Matches sorted by kickoff.
        roster: team id -> name for teams to list before they play.

    Raises:
        MatchIndexOutOfRange: index < 0 or > len(match_log).
    """
    if match_index < 0 or match_index > len(match_log):
        raise MatchIndexOutOfRange(match_index, len(match_log))
    return build_standings(match_log[:match_index], roster, form_window)


def find_standing(standings: Sequence[Standing], team_id: int) -> Optional[Standing]:
    for s in standings:
        if s.team_id == team_id:
            return s
    return None


def _finished_for(team_id: int, prior_matches: Sequence[MatchRecord]) -> list[MatchRecord]:
    return [m for m in prior_matches if m.is_finished and m.involves(team_id)]


def prior_appearances(team_id: int, prior_matches: Sequence[MatchRecord]) -> int:
    """Finished matches the team has played in the prior log."""
    return len(_finished_for(team_id, prior_matches))


def strength_of_schedule(
    team_id: int,
    prior_matches: Sequence[MatchRecord],
    standings: Sequence[Standing],
    window: int = DEFAULT_SOS_WINDOW,
) -> Optional[StrengthOfSchedule]:
    """
    How hard the team's recent opponents were.

    Averages the current rank and points per game (0-3) of the opponents in
    the team's last `window` finished matches. score = 1 - (avg_rank - 1) /
    (n_teams - 1), so 1.0 means every opponent was the leader.

    Returns:
        None when the team has no finished prior match with a ranked
        opponent.
    """
    recent = _finished_for(team_id, prior_matches)[-window:] if window > 0 else []
    if not recent:
        return None

    by_id = {s.team_id: s for s in standings}
    ranks, ppgs = [], []
    for m in recent:
        opponent = by_id.get(m.away_id if m.home_id == team_id else m.home_id)
        if opponent is None:
            continue
        ranks.append(opponent.rank)
        ppgs.append(opponent.points / opponent.played if opponent.played > 0 else 0.0)

    if not ranks:
        return None

    avg_rank = sum(ranks) / len(ranks)
    avg_ppg = sum(ppgs) / len(ppgs)
    n_teams = len(standings)
    if n_teams > 1:
        score = max(0.0, min(1.0, 1 - (avg_rank - 1) / (n_teams - 1)))
    else:
        score = 0.5

    return StrengthOfSchedule(
        team_id=team_id,
        matches_considered=len(ranks),
        avg_opponent_rank=round(avg_rank, 1),
        avg_opponent_ppm=round(avg_ppg, 2),
        score=round(score, 2),
    )


def head_to_head(
    prior_matches: Sequence[MatchRecord],
    team1_id: int,
    team2_id: int,
    limit: int = DEFAULT_H2H_LIMIT,
) -> HeadToHeadRecord:
    """Most recent `limit` meetings of two teams, from team1's perspective."""
    meetings = [
        m for m in prior_matches
        if m.is_finished and {m.home_id, m.away_id} == {team1_id, team2_id}
    ]
    meetings = meetings[-limit:] if limit > 0 else []

    team1_wins = draws = team2_wins = 0
    for m in meetings:
        if m.home_goals == m.away_goals:
            draws += 1
            continue
        winner = m.home_id if m.home_goals > m.away_goals else m.away_id
        if winner == team1_id:
            team1_wins += 1
        else:
            team2_wins += 1

    return HeadToHeadRecord(
        team1_wins=team1_wins,
        draws=draws,
        team2_wins=team2_wins,
        meetings=tuple(
            HeadToHeadMeeting(
                utc_date=m.utc_date,
                home_name=m.home_name,
                away_name=m.away_name,
                home_goals=m.home_goals,
                away_goals=m.away_goals,
            )
            for m in reversed(meetings)
        ),
    )


def venue_profile(team_id: int, prior_matches: Sequence[MatchRecord]) -> Optional[TacticalProfile]:
    """Home/away records, clean sheets and goals-against averages."""
    played = _finished_for(team_id, prior_matches)
    if not played:
        return None

    counts = {
        True: {"played": 0, "wins": 0, "draws": 0, "losses": 0, "clean": 0, "conceded": 0},
        False: {"played": 0, "wins": 0, "draws": 0, "losses": 0, "clean": 0, "conceded": 0},
    }
    for m in played:
        at_home = m.home_id == team_id
        scored, conceded = (m.home_goals, m.away_goals) if at_home else (m.away_goals, m.home_goals)
        c = counts[at_home]
        c["played"] += 1
        c["conceded"] += conceded
        if conceded == 0:
            c["clean"] += 1
        if scored > conceded:
            c["wins"] += 1
        elif scored < conceded:
            c["losses"] += 1
        else:
            c["draws"] += 1

    def record(c: dict) -> VenueRecord:
        return VenueRecord(played=c["played"], wins=c["wins"], draws=c["draws"], losses=c["losses"])

    def ga_avg(c: dict) -> Optional[float]:
        return round(c["conceded"] / c["played"], 2) if c["played"] else None

    home, away = counts[True], counts[False]
    return TacticalProfile(
        home_record=record(home),
        away_record=record(away),
        clean_sheets_home=home["clean"],
        clean_sheets_away=away["clean"],
        goals_against_avg_home=ga_avg(home),
        goals_against_avg_away=ga_avg(away),
    )


def schedule_fatigue(
    team_id: int,
    prior_matches: Sequence[MatchRecord],
    as_of: datetime,
) -> Optional[TeamFatigue]:
    """Days since the team's last match and its load over the last 30 days."""
    played = [m for m in _finished_for(team_id, prior_matches) if m.utc_date < as_of]
    if not played:
        return None

    last = max(m.utc_date for m in played)
    window_start = as_of - timedelta(days=FATIGUE_LOOKBACK_DAYS)
    return TeamFatigue(
        days_since_last_match=(as_of - last).days,
        matches_last_30_days=sum(1 for m in played if m.utc_date >= window_start),
    )
