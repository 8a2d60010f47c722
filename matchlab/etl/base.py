"""Typed signal contract shared by the adapters and the scoring core."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


# Outcome labels, in the column order used by every probability triple.
OUTCOMES = ("home", "draw", "away")


@dataclass(frozen=True)
class Standing:
    """One row of a league table."""

    rank: int
    team_id: int
    team_name: str
    played: int
    won: int
    drawn: int
    lost: int
    goals_for: int
    goals_against: int
    points: int
    form: Optional[str] = None  # "W,D,L" most recent first, None before the first game

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    @property
    def points_per_match(self) -> float:
        """Points per match normalized by 3 (0.0 before the first game)."""
        if self.played <= 0:
            return 0.0
        return self.points / (self.played * 3)


@dataclass(frozen=True)
class MatchRecord:
    """A fixture from the results feed."""

    match_id: int
    utc_date: datetime
    home_id: int
    away_id: int
    home_name: str
    away_name: str
    home_goals: Optional[int] = None  # None while unfinished
    away_goals: Optional[int] = None

    @property
    def is_finished(self) -> bool:
        return self.home_goals is not None and self.away_goals is not None

    @property
    def result(self) -> Optional[str]:
        """Realized outcome label, or None if the match has no score."""
        if not self.is_finished:
            return None
        if self.home_goals > self.away_goals:
            return "home"
        if self.home_goals < self.away_goals:
            return "away"
        return "draw"

    def involves(self, team_id: int) -> bool:
        return team_id in (self.home_id, self.away_id)


@dataclass(frozen=True)
class TeamRating:
    """Elo-style club rating."""

    team: str
    rating: float
    source: str = "clubelo"


@dataclass(frozen=True)
class TeamXG:
    """Expected-goals profile (per match averages)."""

    team: str
    matches: int
    xg_per_match: float
    xga_per_match: float
    recent_xg_per_match: Optional[float] = None  # last 5 matches
    recent_xga_per_match: Optional[float] = None
    xg_trend: Optional[float] = None  # -1 (falling) .. +1 (rising)


@dataclass(frozen=True)
class MatchOdds:
    """Decimal 1X2 prices from one bookmaker."""

    home_win: float
    draw: float
    away_win: float
    bookmaker: str = "unknown"
    home_team: Optional[str] = None
    away_team: Optional[str] = None


@dataclass(frozen=True)
class TeamFatigue:
    days_since_last_match: Optional[int]
    matches_last_30_days: int
    days_until_next_match: Optional[int] = None


@dataclass(frozen=True)
class VenueRecord:
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0

    @property
    def points_per_match(self) -> Optional[float]:
        if self.played <= 0:
            return None
        return (self.wins * 3 + self.draws) / (self.played * 3)


@dataclass(frozen=True)
class TacticalProfile:
    """Home/away splits and defensive record of a team."""

    home_record: VenueRecord = field(default_factory=VenueRecord)
    away_record: VenueRecord = field(default_factory=VenueRecord)
    clean_sheets_home: int = 0
    clean_sheets_away: int = 0
    goals_against_avg_home: Optional[float] = None
    goals_against_avg_away: Optional[float] = None
    preferred_formation: Optional[str] = None


class Stakes(str, Enum):
    """What a side is playing for, derived from its table position."""

    TITLE = "title"
    EUROPE = "europe"
    MIDTABLE = "midtable"
    RELEGATION = "relegation"


@dataclass(frozen=True)
class MatchContext:
    home_stakes: Stakes
    away_stakes: Stakes
    is_derby: bool = False


@dataclass(frozen=True)
class RefereeProfile:
    name: str
    matches_officiated: int
    avg_yellows_per_match: float
    avg_reds_per_match: float = 0.0
    penalties_awarded: int = 0


@dataclass(frozen=True)
class HeadToHeadMeeting:
    utc_date: datetime
    home_name: str
    away_name: str
    home_goals: int
    away_goals: int


@dataclass(frozen=True)
class HeadToHeadRecord:
    """Meetings between two teams, tallied from team1's perspective."""

    team1_wins: int
    draws: int
    team2_wins: int
    meetings: tuple[HeadToHeadMeeting, ...] = ()

    @property
    def total(self) -> int:
        return self.team1_wins + self.draws + self.team2_wins


@dataclass(frozen=True)
class StrengthOfSchedule:
    team_id: int
    matches_considered: int
    avg_opponent_rank: float
    avg_opponent_ppm: float
    score: float  # 1.0 = hardest possible schedule


@dataclass(frozen=True)
class Injury:
    player: str
    type: str = "Missing Fixture"
    reason: Optional[str] = None


@dataclass(frozen=True)
class KeyPlayer:
    name: str
    goals: int
    assists: int
    appearances: int = 0
    role: str = "scorer"  # "scorer" | "assister" | "both"

    @property
    def contributions(self) -> int:
        return self.goals + self.assists


@dataclass(frozen=True)
class CriticalAbsence:
    player: KeyPlayer
    injury: Injury
    impact: str  # "high" | "medium"


class ResultsProvider(ABC):
    """Abstract source of league tables and finished fixtures."""

    @abstractmethod
    async def get_standings(self, league_code: str) -> list[Standing]:
        """
        Fetch the current total table for a competition.

        Args:
            league_code: Provider competition code (e.g. "PL").

        Returns:
            List of Standing rows ordered by rank.
        """
        pass

    @abstractmethod
    async def get_finished_matches(self, league_code: str) -> list[MatchRecord]:
        """
        Fetch every finished match of the current season.

        Args:
            league_code: Provider competition code.

        Returns:
            List of MatchRecord objects with full-time scores.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release any open connections."""
        pass
