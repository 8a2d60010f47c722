"""
Per-factor transforms: typed signal -> [0, 1] goodness score.

Every transform is pure and returns NEUTRAL (0.5) when its signal is absent;
the venue prior (0.55 home / 0.45 away) is the only side-specific neutral.
Non-finite numbers count as absent.
"""

import math
from typing import Optional, Sequence

from matchlab.etl.base import (
    CriticalAbsence,
    HeadToHeadRecord,
    Injury,
    MatchContext,
    MatchOdds,
    RefereeProfile,
    Stakes,
    StrengthOfSchedule,
    TacticalProfile,
    TeamFatigue,
    TeamRating,
    TeamXG,
)
from matchlab.features.squad import is_critical_player
from matchlab.ml.devig import devig_proportional

NEUTRAL = 0.5

# Rating
RATING_FLOOR = 1350.0
RATING_SPAN = 750.0

# Expected goals
XG_FALLBACK = 1.2
XG_CEILING = 2.5
XG_ATTACK_SHARE = 0.4
XG_DEFENSE_SHARE = 0.6

# Form
FORM_WEIGHTS = (0.30, 0.25, 0.20, 0.15, 0.10)
FORM_POINTS = {"W": 1.0, "D": 0.4, "L": 0.0}

# Venue
HOME_VENUE_PRIOR = 0.55
AWAY_VENUE_PRIOR = 0.45

# Injuries
ROLE_PENALTY = {"both": 0.20, "scorer": 0.15, "assister": 0.10}
FULL_PRODUCTIVITY = 15
OTHER_ABSENCE_PENALTY = 0.03
MAX_INJURY_PENALTY = 0.8

# Fatigue
LOAD_FALLBACK = 4
LOAD_CEILING = 12
REST_SHARE = 0.6
LOAD_SHARE = 0.4

# Defense
GOALS_AGAINST_FALLBACK = 1.5
GOALS_AGAINST_CEILING = 3.0

# Context
STAKES_VALUE = {
    Stakes.TITLE: 0.65,
    Stakes.EUROPE: 0.58,
    Stakes.MIDTABLE: 0.50,
    Stakes.RELEGATION: 0.55,
}
DERBY_SHRINK = 0.15

# Referee
REFEREE_MIN_MATCHES = 3
YELLOWS_FALLBACK = 3.5
PENALTY_RATE_CEILING = 0.4


def safe_num(value: Optional[float], fallback: float) -> float:
    """`value` unless it is None or not finite."""
    if value is None:
        return fallback
    try:
        if not math.isfinite(value):
            return fallback
    except TypeError:
        return fallback
    return float(value)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def rating_score(rating: Optional[TeamRating]) -> float:
    """Linear map of an Elo rating from [1350, 2100] onto [0, 1]."""
    if rating is None:
        return NEUTRAL
    value = safe_num(rating.rating, None)
    if value is None:
        return NEUTRAL
    return clamp((value - RATING_FLOOR) / RATING_SPAN)


def xg_rates(xg: TeamXG) -> tuple[float, float]:
    """Recent-5 xG / xGA per match, falling back to season, then 1.2."""
    xg_pm = safe_num(xg.recent_xg_per_match, safe_num(xg.xg_per_match, XG_FALLBACK))
    xga_pm = safe_num(xg.recent_xga_per_match, safe_num(xg.xga_per_match, XG_FALLBACK))
    return xg_pm, xga_pm


def xg_score(xg: Optional[TeamXG]) -> float:
    """40% attack (xG up to 2.5) + 60% defense (xGA down from 2.5)."""
    if xg is None:
        return NEUTRAL
    xg_pm, xga_pm = xg_rates(xg)
    attack = min(max(xg_pm, 0.0) / XG_CEILING, 1.0)
    defense = max(0.0, 1.0 - xga_pm / XG_CEILING)
    return attack * XG_ATTACK_SHARE + defense * XG_DEFENSE_SHARE


def xg_trend_score(xg: Optional[TeamXG]) -> float:
    if xg is None or safe_num(xg.xg_trend, None) is None:
        return NEUTRAL
    return clamp((xg.xg_trend + 1) / 2)


def form_score(form: Optional[str]) -> float:
    """
    Recency-weighted form, most recent result first.

    "W,W,D,L,W" -> weights .30 .25 .20 .15 .10 over points W=1, D=0.4, L=0.
    """
    if not form:
        return NEUTRAL
    results = [r.strip().upper() for r in form.split(",") if r.strip()]
    if not results:
        return NEUTRAL

    weighted = 0.0
    total_weight = 0.0
    for i, result in enumerate(results):
        w = FORM_WEIGHTS[i] if i < len(FORM_WEIGHTS) else FORM_WEIGHTS[-1]
        weighted += FORM_POINTS.get(result, 0.0) * w
        total_weight += w
    return weighted / total_weight


def venue_score(tactics: Optional[TacticalProfile], home: bool) -> float:
    """Points-per-match ratio at the side's venue, else the venue prior."""
    if tactics is not None:
        record = tactics.home_record if home else tactics.away_record
        ppm = record.points_per_match
        if ppm is not None:
            return ppm
    return HOME_VENUE_PRIOR if home else AWAY_VENUE_PRIOR


def injury_penalty(
    injuries: Optional[Sequence[Injury]],
    critical: Optional[Sequence[CriticalAbsence]],
) -> float:
    """
    Role-weighted absence penalty, capped at 0.8.

    Each critical absence costs its role penalty (both .20, scorer .15,
    assister .10) scaled by min(contributions / 15, 1). Every other absentee
    costs 0.03.
    """
    critical = critical or ()
    penalty = 0.0
    for absence in critical:
        productivity = min(absence.player.contributions / FULL_PRODUCTIVITY, 1.0)
        penalty += ROLE_PENALTY.get(absence.player.role, ROLE_PENALTY["assister"]) * productivity

    others = [i for i in (injuries or ()) if not is_critical_player(i.player, critical)]
    penalty += len(others) * OTHER_ABSENCE_PENALTY
    return min(penalty, MAX_INJURY_PENALTY)


def injury_score(
    injuries: Optional[Sequence[Injury]],
    critical: Optional[Sequence[CriticalAbsence]],
) -> float:
    """1 - penalty; neutral only when no absence data exists at all."""
    if injuries is None and critical is None:
        return NEUTRAL
    return 1.0 - injury_penalty(injuries, critical)


def squad_score(quality: Optional[float]) -> float:
    return clamp(safe_num(quality, NEUTRAL))


def rest_score(days: Optional[int]) -> float:
    days = safe_num(days, None)
    if days is None:
        return NEUTRAL
    if days <= 1:
        return 0.2
    if days == 2:
        return 0.4
    if days <= 4:
        return 0.6
    return 0.8


def fatigue_score(fatigue: Optional[TeamFatigue]) -> float:
    """60% rest since the last match + 40% load over the last 30 days."""
    if fatigue is None:
        return NEUTRAL
    load = max(0.0, 1.0 - safe_num(fatigue.matches_last_30_days, LOAD_FALLBACK) / LOAD_CEILING)
    return rest_score(fatigue.days_since_last_match) * REST_SHARE + load * LOAD_SHARE


def h2h_scores(h2h: Optional[HeadToHeadRecord]) -> tuple[float, float]:
    """Points-per-match ratios of team1 (home) and team2 (away)."""
    if h2h is None or h2h.total <= 0:
        return NEUTRAL, NEUTRAL
    denominator = h2h.total * 3
    return (
        (h2h.team1_wins * 3 + h2h.draws) / denominator,
        (h2h.team2_wins * 3 + h2h.draws) / denominator,
    )


def defense_score(tactics: Optional[TacticalProfile], home: bool) -> float:
    """Clean-sheet rate and goals-against average at the side's venue."""
    if tactics is None:
        return NEUTRAL
    record = tactics.home_record if home else tactics.away_record
    if record.played <= 0:
        return NEUTRAL
    clean_sheets = tactics.clean_sheets_home if home else tactics.clean_sheets_away
    ga_avg = safe_num(
        tactics.goals_against_avg_home if home else tactics.goals_against_avg_away,
        GOALS_AGAINST_FALLBACK,
    )
    cs_rate = clean_sheets / record.played
    return cs_rate * 0.5 + max(0.0, 1.0 - ga_avg / GOALS_AGAINST_CEILING) * 0.5


def sos_score(sos: Optional[StrengthOfSchedule]) -> float:
    if sos is None:
        return NEUTRAL
    return clamp(safe_num(sos.score, NEUTRAL))


def context_scores(context: Optional[MatchContext]) -> tuple[float, float]:
    """Stakes value per side, shrunk 15% toward neutral in derbies."""
    if context is None:
        return NEUTRAL, NEUTRAL
    home = STAKES_VALUE[context.home_stakes]
    away = STAKES_VALUE[context.away_stakes]
    if context.is_derby:
        home = home * (1 - DERBY_SHRINK) + NEUTRAL * DERBY_SHRINK
        away = away * (1 - DERBY_SHRINK) + NEUTRAL * DERBY_SHRINK
    return home, away


def referee_severity(referee: Optional[RefereeProfile]) -> Optional[float]:
    """Card severity in (-inf, 1]; None below 3 officiated matches."""
    if referee is None or safe_num(referee.matches_officiated, 0) < REFEREE_MIN_MATCHES:
        return None
    return min(1.0, (safe_num(referee.avg_yellows_per_match, YELLOWS_FALLBACK) - 2) / 4)


def referee_score(referee: Optional[RefereeProfile]) -> float:
    """Same value for both sides: strict referees drag it down, penalties up."""
    severity = referee_severity(referee)
    if severity is None:
        return NEUTRAL
    matches = max(1.0, safe_num(referee.matches_officiated, 1))
    penalty_rate = safe_num(referee.penalties_awarded, 0) / matches
    penalty_factor = min(1.0, penalty_rate / PENALTY_RATE_CEILING)
    return clamp(NEUTRAL - severity * 0.05 + penalty_factor * 0.03, 0.2, 0.8)


def market_probabilities(odds: Optional[MatchOdds]) -> Optional[tuple[float, float, float]]:
    """De-margined (home, draw, away) probabilities, None without valid odds."""
    if odds is None:
        return None
    return devig_proportional(odds)
