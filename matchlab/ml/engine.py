"""
Composite scoring engine.

Combines fourteen weighted factors into a home / draw / away distribution:

1. Each factor maps its signal to a [0, 1] goodness score per side
   (neutral 0.5 when the signal is absent).
2. edge = sum(w * home_score) - sum(w * away_score), with weights summing
   to 1. Without odds the market weight is redistributed proportionally.
3. Draw = Gaussian bell on the edge, blended with the market draw price
   (or the league draw rate), plus small context boosts.
4. The remaining mass is split home/away through tanh(3.4 * edge).
5. Bounded normalization, then largest-remainder rounding to 100.

Deterministic: no randomness, no clock, no shared mutable state.
"""

import logging
import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from matchlab.etl.base import Stakes
from matchlab.features.signals import MatchSignals, SignalBag
from matchlab.ml import transforms
from matchlab.ml.prediction import NEUTRAL_FALLBACK, Factor, Prediction, ProbabilityDistribution
from matchlab.ml.weights import BASELINE_WEIGHTS, MARKET_FACTOR, merge_weights, redistribute_weights
from matchlab.telemetry.metrics import record_prediction, record_scoring_anomaly

logger = logging.getLogger(__name__)


class MissingStandingsError(ValueError):
    """Raised when either side has no standing to score from."""


# Draw model
DRAW_PEAK = 0.38
DRAW_STEEPNESS = 10.0
DRAW_FLOOR = 0.05
MARKET_DRAW_SHARE = 0.6
LEAGUE_DRAW_RATE = 0.26
LEAGUE_DRAW_SHARE = 0.2
RELEGATION_DRAW_BOOST = 0.05
TITLE_DRAW_BOOST = 0.02
DERBY_DRAW_BOOST = 0.03
STRICT_REFEREE_DRAW_BOOST = 0.01
STRICT_REFEREE_SEVERITY = 0.6

# Home/away split
SPLIT_SLOPE = 3.4
SPLIT_SPREAD = 0.44

# (low, high) per outcome, in home/draw/away order
BOUNDS_WITH_ODDS = ((0.03, 0.85), (0.05, 0.55), (0.03, 0.85))
BOUNDS_WITHOUT_ODDS = ((0.03, 0.80), (0.05, 0.55), (0.03, 0.80))

NA = "N/A"


@dataclass(frozen=True)
class _FactorReading:
    key: str
    label: str
    home_value: str
    away_value: str
    home_score: float
    away_score: float
    available: bool


def bounded_normalize(
    values: Sequence[float],
    bounds: Sequence[tuple[float, float]],
) -> list[float]:
    """
    Rescale values to sum to 1 while keeping each inside its bounds.

    Clamp, renormalize the free values, pin any that leave their range at
    the violated bound, and repeat until nothing moves.
    """
    values = [min(high, max(low, v)) for v, (low, high) in zip(values, bounds)]
    pinned: set[int] = set()

    for _ in range(len(values) + 1):
        free = [i for i in range(len(values)) if i not in pinned]
        if not free:
            break
        free_total = sum(values[i] for i in free)
        target = 1.0 - sum(values[i] for i in pinned)
        if free_total <= 0:
            share = target / len(free)
            scaled = {i: share for i in free}
        else:
            scaled = {i: values[i] * target / free_total for i in free}

        violators = [
            i for i in free
            if scaled[i] < bounds[i][0] or scaled[i] > bounds[i][1]
        ]
        if not violators:
            for i in free:
                values[i] = scaled[i]
            break
        for i in violators:
            low, high = bounds[i]
            values[i] = low if scaled[i] < low else high
            pinned.add(i)

    return values


def _signed(value: float) -> str:
    arrow = "↑" if value > 0.05 else "↓" if value < -0.05 else "→"
    return f"{arrow} {value:+.2f}"


def _read_factors(home: SignalBag, away: SignalBag, match: MatchSignals) -> list[_FactorReading]:
    readings = []

    # Market
    market = transforms.market_probabilities(match.odds)
    if market is not None:
        readings.append(_FactorReading(
            "odds", "Market odds",
            f"{match.odds.home_win} ({round(market[0] * 100)}%)",
            f"{match.odds.away_win} ({round(market[2] * 100)}%)",
            market[0], market[2], True,
        ))
    else:
        readings.append(_FactorReading("odds", "Market odds", NA, NA, 0.5, 0.5, False))

    # Expected goals
    def xg_label(bag: SignalBag) -> str:
        if bag.xg is None:
            return NA
        xg_pm, xga_pm = transforms.xg_rates(bag.xg)
        return f"{xg_pm:.2f} xG, {xga_pm:.2f} xGA"

    readings.append(_FactorReading(
        "xg", "Recent xG (5 matches)", xg_label(home), xg_label(away),
        transforms.xg_score(home.xg), transforms.xg_score(away.xg),
        home.xg is not None or away.xg is not None,
    ))

    # Venue
    def venue_label(bag: SignalBag, is_home: bool) -> str:
        record = None
        if bag.tactics is not None:
            record = bag.tactics.home_record if is_home else bag.tactics.away_record
        if record is None or record.played <= 0:
            return "Home prior" if is_home else "Away prior"
        where = "home" if is_home else "away"
        return f"{record.wins}W {record.draws}D {record.losses}L ({where})"

    readings.append(_FactorReading(
        "venue", "Home/away record", venue_label(home, True), venue_label(away, False),
        transforms.venue_score(home.tactics, home=True),
        transforms.venue_score(away.tactics, home=False),
        True,
    ))

    # Form
    readings.append(_FactorReading(
        "form", "Recent form (5 matches)",
        home.standing.form or NA, away.standing.form or NA,
        transforms.form_score(home.standing.form), transforms.form_score(away.standing.form),
        bool(home.standing.form or away.standing.form),
    ))

    # Absences
    def injury_label(bag: SignalBag) -> str:
        if bag.injuries is None and bag.critical_absences is None:
            return NA
        count = len(bag.injuries or ())
        key_count = len(bag.critical_absences or ())
        if key_count:
            return f"{count} ({key_count} key)"
        return f"{count} absent"

    readings.append(_FactorReading(
        "injuries", "Absences", injury_label(home), injury_label(away),
        transforms.injury_score(home.injuries, home.critical_absences),
        transforms.injury_score(away.injuries, away.critical_absences),
        home.injuries is not None or away.injuries is not None,
    ))

    # Rating
    def rating_label(bag: SignalBag) -> str:
        value = transforms.safe_num(bag.rating.rating, None) if bag.rating else None
        return NA if value is None else f"{round(value)}"

    readings.append(_FactorReading(
        "elo", "Elo rating", rating_label(home), rating_label(away),
        transforms.rating_score(home.rating), transforms.rating_score(away.rating),
        rating_label(home) != NA or rating_label(away) != NA,
    ))

    # Fatigue
    def fatigue_label(bag: SignalBag) -> str:
        if bag.fatigue is None:
            return NA
        days = transforms.safe_num(bag.fatigue.days_since_last_match, None)
        load = transforms.safe_num(bag.fatigue.matches_last_30_days, None)
        parts = []
        if days is not None:
            parts.append(f"{int(days)}d rest")
        if load is not None:
            parts.append(f"{int(load)}m/30d")
        return ", ".join(parts) or NA

    readings.append(_FactorReading(
        "fatigue", "Schedule fatigue", fatigue_label(home), fatigue_label(away),
        transforms.fatigue_score(home.fatigue), transforms.fatigue_score(away.fatigue),
        fatigue_label(home) != NA or fatigue_label(away) != NA,
    ))

    # xG trend
    def trend_label(bag: SignalBag) -> str:
        if bag.xg is None or transforms.safe_num(bag.xg.xg_trend, None) is None:
            return NA
        return _signed(bag.xg.xg_trend)

    readings.append(_FactorReading(
        "xg_trend", "xG trend", trend_label(home), trend_label(away),
        transforms.xg_trend_score(home.xg), transforms.xg_trend_score(away.xg),
        trend_label(home) != NA or trend_label(away) != NA,
    ))

    # Strength of schedule
    def sos_label(bag: SignalBag) -> str:
        if bag.sos is None:
            return NA
        return f"avg opp rank {bag.sos.avg_opponent_rank}"

    readings.append(_FactorReading(
        "sos", "Strength of schedule", sos_label(home), sos_label(away),
        transforms.sos_score(home.sos), transforms.sos_score(away.sos),
        home.sos is not None or away.sos is not None,
    ))

    # Squad
    def squad_label(bag: SignalBag) -> str:
        quality = transforms.safe_num(bag.squad_quality, None)
        return NA if quality is None else f"{round(quality * 100)}%"

    readings.append(_FactorReading(
        "squad", "Squad quality", squad_label(home), squad_label(away),
        transforms.squad_score(home.squad_quality), transforms.squad_score(away.squad_quality),
        home.squad_quality is not None or away.squad_quality is not None,
    ))

    # Stakes
    context = match.context
    home_ctx, away_ctx = transforms.context_scores(context)
    if context is not None:
        derby = " (derby)" if context.is_derby else ""
        home_ctx_label = f"{context.home_stakes.value.title()}{derby}"
        away_ctx_label = f"{context.away_stakes.value.title()}{derby}"
    else:
        home_ctx_label = away_ctx_label = NA
    readings.append(_FactorReading(
        "context", "Match stakes", home_ctx_label, away_ctx_label,
        home_ctx, away_ctx, context is not None,
    ))

    # Head to head
    h2h = match.head_to_head
    home_h2h, away_h2h = transforms.h2h_scores(h2h)
    if h2h is not None and h2h.total > 0:
        home_h2h_label = f"{h2h.team1_wins}W {h2h.draws}D {h2h.team2_wins}L"
        away_h2h_label = f"{h2h.team2_wins}W {h2h.draws}D {h2h.team1_wins}L"
    else:
        home_h2h_label = away_h2h_label = NA
    readings.append(_FactorReading(
        "h2h", "Head to head", home_h2h_label, away_h2h_label,
        home_h2h, away_h2h, h2h is not None and h2h.total > 0,
    ))

    # Defense
    def defense_label(bag: SignalBag, is_home: bool) -> str:
        tactics = bag.tactics
        if tactics is None:
            return NA
        record = tactics.home_record if is_home else tactics.away_record
        if record.played <= 0:
            return NA
        clean_sheets = tactics.clean_sheets_home if is_home else tactics.clean_sheets_away
        ga = tactics.goals_against_avg_home if is_home else tactics.goals_against_avg_away
        ga_text = NA if ga is None else f"{ga:.2f}"
        return f"{clean_sheets} CS, {ga_text} GA/m"

    readings.append(_FactorReading(
        "defense", "Defensive solidity", defense_label(home, True), defense_label(away, False),
        transforms.defense_score(home.tactics, home=True),
        transforms.defense_score(away.tactics, home=False),
        defense_label(home, True) != NA or defense_label(away, False) != NA,
    ))

    # Referee
    referee = match.referee
    ref_score = transforms.referee_score(referee)
    if transforms.referee_severity(referee) is not None:
        yellows = transforms.safe_num(referee.avg_yellows_per_match, None)
        ref_label = referee.name if yellows is None else f"{referee.name} ({yellows:.1f} yellows/m)"
    else:
        ref_label = NA
    readings.append(_FactorReading(
        "referee", "Referee profile", ref_label, ref_label,
        ref_score, ref_score, ref_label != NA,
    ))

    return readings


def draw_probability(edge: float, match: MatchSignals) -> float:
    """Raw draw mass before bounds, from the edge and match-level signals."""
    draw = max(DRAW_FLOOR, DRAW_PEAK * math.exp(-DRAW_STEEPNESS * edge * edge))

    market = transforms.market_probabilities(match.odds)
    if market is not None:
        draw = draw * (1 - MARKET_DRAW_SHARE) + market[1] * MARKET_DRAW_SHARE
    else:
        draw = draw * (1 - LEAGUE_DRAW_SHARE) + LEAGUE_DRAW_RATE * LEAGUE_DRAW_SHARE

    context = match.context
    if context is not None:
        if context.home_stakes == Stakes.RELEGATION and context.away_stakes == Stakes.RELEGATION:
            draw += RELEGATION_DRAW_BOOST
        elif context.home_stakes == Stakes.TITLE and context.away_stakes == Stakes.TITLE:
            draw += TITLE_DRAW_BOOST
        if context.is_derby:
            draw += DERBY_DRAW_BOOST

    severity = transforms.referee_severity(match.referee)
    if severity is not None and severity > STRICT_REFEREE_SEVERITY:
        draw += STRICT_REFEREE_DRAW_BOOST

    return draw


def _all_finite(values) -> bool:
    return all(math.isfinite(v) for v in values)


def score(
    home: SignalBag,
    away: SignalBag,
    match: Optional[MatchSignals] = None,
    weights: Optional[Mapping[str, float]] = None,
) -> Prediction:
    """
    Score a fixture.

    Args:
        home: Signals of the home side (standing required).
        away: Signals of the away side (standing required).
        match: Fixture-level signals (odds, context, referee, head to head).
        weights: Optional per-factor weight overrides; normalized to sum 1.

    Returns:
        Prediction with the integer distribution and the factor breakdown.

    Raises:
        MissingStandingsError: either standing is missing.
    """
    if home.standing is None or away.standing is None:
        raise MissingStandingsError("Both sides need a standing to be scored")

    match = match or MatchSignals()
    odds_available = transforms.market_probabilities(match.odds) is not None

    baseline = dict(BASELINE_WEIGHTS) if weights is None else merge_weights(weights)
    applied = redistribute_weights(baseline, () if odds_available else (MARKET_FACTOR,))

    factors = tuple(
        Factor(
            key=r.key,
            label=r.label,
            home_value=r.home_value,
            away_value=r.away_value,
            home_score=r.home_score,
            away_score=r.away_score,
            weight=applied[r.key],
            baseline_weight=baseline[r.key],
            available=r.available,
        )
        for r in _read_factors(home, away, match)
    )

    edge = math.fsum(f.weight * f.home_score for f in factors) - math.fsum(
        f.weight * f.away_score for f in factors
    )

    draw = draw_probability(edge, match) if math.isfinite(edge) else math.nan
    remaining = 1.0 - draw
    bias = math.tanh(edge * SPLIT_SLOPE) if math.isfinite(edge) else math.nan
    raw = (
        remaining * (0.5 + bias * SPLIT_SPREAD),
        draw,
        remaining * (0.5 - bias * SPLIT_SPREAD),
    )

    bounded = None
    if _all_finite(raw):
        bounded = bounded_normalize(raw, BOUNDS_WITH_ODDS if odds_available else BOUNDS_WITHOUT_ODDS)

    if bounded is None or not _all_finite(bounded):
        logger.error(
            "[ENGINE] Non-finite probabilities for %s vs %s (edge=%s); returning neutral fallback",
            home.standing.team_name,
            away.standing.team_name,
            edge,
        )
        record_scoring_anomaly("non_finite")
        record_prediction("fallback")
        return Prediction(
            distribution=NEUTRAL_FALLBACK,
            factors=factors,
            odds_available=odds_available,
            fallback=True,
        )

    record_prediction("market" if odds_available else "no_market")
    return Prediction(
        distribution=ProbabilityDistribution.from_fractions(*bounded),
        factors=factors,
        odds_available=odds_available,
    )
