"""
Walk-forward backtest of the scoring engine.

Every finished fixture of a season is scored using only what was known before
kickoff (table, form, strength of schedule, head to head, home/away splits,
congestion), then compared with the real result.

Ratings, expected goals and odds can only come from a present-day snapshot,
which leaks future information; runs that use one are flagged.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional, Sequence

import numpy as np

from matchlab.config import get_settings
from matchlab.etl.base import OUTCOMES, MatchOdds, MatchRecord
from matchlab.etl.resolver import TeamResolver, get_resolver
from matchlab.etl.snapshots import SignalSnapshot
from matchlab.features.context import match_context
from matchlab.features.signals import MatchSignals, SignalBag
from matchlab.ml.engine import score
from matchlab.ml.metrics import (
    BUCKET_LABELS,
    UNIFORM_ACCURACY,
    UNIFORM_BRIER,
    EmptyBacktestError,
    Metrics,
    brier_scores,
    log_losses,
    summarize,
)
from matchlab.ml.prediction import ProbabilityDistribution
from matchlab.telemetry.metrics import record_backtest_skip
from matchlab.utils.standings import (
    find_standing,
    head_to_head,
    prior_appearances,
    schedule_fatigue,
    sort_matches,
    standings_as_of,
    strength_of_schedule,
    venue_profile,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchOutcomeRecord:
    """One scored fixture."""

    match_id: int
    utc_date: datetime
    home_team: str
    away_team: str
    distribution: ProbabilityDistribution
    predicted: str
    actual: str
    brier: float
    log_loss: float

    @property
    def correct(self) -> bool:
        return self.predicted == self.actual


@dataclass(frozen=True)
class BacktestReport:
    records: tuple[MatchOutcomeRecord, ...]
    metrics: Metrics
    skipped: int
    snapshot_signals: tuple[str, ...] = ()

    @property
    def evaluated(self) -> int:
        return len(self.records)


class _SnapshotIndex:
    """Snapshot signals re-keyed by team id through the resolver."""

    def __init__(
        self,
        snapshot: Optional[SignalSnapshot],
        roster: Mapping[int, str],
        resolver: TeamResolver,
    ):
        self.ratings = {}
        self.xg = {}
        self.odds: dict[tuple[int, int], MatchOdds] = {}
        if snapshot is None:
            return

        for team_id, name in roster.items():
            if snapshot.ratings:
                rating = resolver.find(snapshot.ratings, name, source="ratings")
                if rating is not None:
                    self.ratings[team_id] = rating
            if snapshot.xg:
                xg = resolver.find(snapshot.xg, name, source="xg")
                if xg is not None:
                    self.xg[team_id] = xg

        names = list(roster.values())
        ids_by_name = {name: team_id for team_id, name in roster.items()}
        for odds in snapshot.odds:
            home = resolver.match(odds.home_team, names, source="odds")
            away = resolver.match(odds.away_team, names, source="odds")
            if home is None or away is None:
                continue
            self.odds.setdefault((ids_by_name[home], ids_by_name[away]), odds)


def _score_entry(distribution: ProbabilityDistribution, actual: str) -> tuple[float, float]:
    """Brier score and log-loss of a single fixture."""
    y_true = np.array([OUTCOMES.index(actual)])
    y_proba = np.array([distribution.as_fractions()], dtype=float)
    return float(brier_scores(y_true, y_proba)[0]), float(log_losses(y_true, y_proba)[0])


def backtest(
    match_log: Sequence[MatchRecord],
    snapshots: Optional[SignalSnapshot] = None,
    *,
    min_prior_matches: Optional[int] = None,
    resolver: Optional[TeamResolver] = None,
    roster: Optional[Mapping[int, str]] = None,
) -> BacktestReport:
    """
    Score every finished fixture from point-in-time data.

    Args:
        match_log: Season fixtures in any order; unfinished ones are dropped.
        snapshots: Optional present-day ratings / xG / odds.
        min_prior_matches: Prior appearances both sides need before a
            fixture is scored (default from settings).
        resolver: Team resolver for snapshot lookups.
        roster: team id -> name, merged over the teams found in the log.

    Returns:
        BacktestReport with per-fixture records and aggregate metrics.

    Raises:
        EmptyBacktestError: no fixture qualified.
    """
    settings = get_settings()
    if min_prior_matches is None:
        min_prior_matches = settings.BACKTEST_MIN_PRIOR_MATCHES
    resolver = resolver or get_resolver()

    matches = [m for m in sort_matches(match_log) if m.is_finished]
    teams: dict[int, str] = {}
    for m in matches:
        teams.setdefault(m.home_id, m.home_name)
        teams.setdefault(m.away_id, m.away_name)
    roster = {**teams, **(roster or {})}

    snapshot_signals = snapshots.signals() if snapshots is not None else ()
    if snapshot_signals:
        logger.warning(
            "[BACKTEST] Using present-day snapshot for %s: not point-in-time, "
            "metrics are optimistically biased",
            ", ".join(snapshot_signals),
        )
    index = _SnapshotIndex(snapshots, roster, resolver)

    records = []
    skipped = 0
    for i, match in enumerate(matches):
        prior = matches[:i]
        home_prior = prior_appearances(match.home_id, prior)
        away_prior = prior_appearances(match.away_id, prior)
        if home_prior < min_prior_matches or away_prior < min_prior_matches:
            skipped += 1
            record_backtest_skip("insufficient_history")
            logger.debug(
                "[BACKTEST] Skip %s vs %s: %d/%d prior matches (need %d)",
                match.home_name, match.away_name, home_prior, away_prior, min_prior_matches,
            )
            continue

        table = standings_as_of(i, matches, roster, form_window=settings.FORM_WINDOW)
        home_standing = find_standing(table, match.home_id)
        away_standing = find_standing(table, match.away_id)

        home = SignalBag(
            standing=home_standing,
            rating=index.ratings.get(match.home_id),
            xg=index.xg.get(match.home_id),
            tactics=venue_profile(match.home_id, prior),
            fatigue=schedule_fatigue(match.home_id, prior, match.utc_date),
            sos=strength_of_schedule(match.home_id, prior, table, window=settings.SOS_WINDOW),
        )
        away = SignalBag(
            standing=away_standing,
            rating=index.ratings.get(match.away_id),
            xg=index.xg.get(match.away_id),
            tactics=venue_profile(match.away_id, prior),
            fatigue=schedule_fatigue(match.away_id, prior, match.utc_date),
            sos=strength_of_schedule(match.away_id, prior, table, window=settings.SOS_WINDOW),
        )
        signals = MatchSignals(
            odds=index.odds.get((match.home_id, match.away_id)),
            context=match_context(home_standing, away_standing, len(table), resolver),
            head_to_head=head_to_head(prior, match.home_id, match.away_id, limit=settings.H2H_MAX_MEETINGS),
        )

        prediction = score(home, away, signals)
        brier, loss = _score_entry(prediction.distribution, match.result)
        records.append(MatchOutcomeRecord(
            match_id=match.match_id,
            utc_date=match.utc_date,
            home_team=match.home_name,
            away_team=match.away_name,
            distribution=prediction.distribution,
            predicted=prediction.outcome,
            actual=match.result,
            brier=brier,
            log_loss=loss,
        ))

    logger.info(
        "[BACKTEST] Evaluated %d fixtures, skipped %d (min prior matches %d)",
        len(records), skipped, min_prior_matches,
    )
    if not records:
        raise EmptyBacktestError(
            f"No fixture had {min_prior_matches} prior matches for both sides "
            f"({skipped} skipped)"
        )

    return BacktestReport(
        records=tuple(records),
        metrics=summarize(records),
        skipped=skipped,
        snapshot_signals=snapshot_signals,
    )


def _pct(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value * 100:.1f}%"


def format_report(report: BacktestReport, league: str) -> str:
    """Human-readable backtest summary."""
    m = report.metrics
    lines = [
        f"═══ matchlab backtest: {league} ═══",
        "",
        f"Fixtures evaluated : {report.evaluated}",
        f"Fixtures skipped   : {report.skipped}",
        "",
        f"  Accuracy    : {m.accuracy * 100:.1f}% (baseline: {UNIFORM_ACCURACY * 100:.1f}%)",
        f"  Brier score : {m.brier_score:.3f} (baseline: {UNIFORM_BRIER:.3f})",
        f"  Log-loss    : {m.log_loss:.3f}",
        "",
        "BY OUTCOME",
    ]
    for o in m.per_outcome:
        lines.append(f"  {o.outcome:<5} : {_pct(o.accuracy)} ({o.correct}/{o.count})")

    lines += ["", "CALIBRATION"]
    for label, bucket in zip(BUCKET_LABELS, m.reliability):
        if bucket.count == 0:
            lines.append(f"  {label:<7} (empty)")
            continue
        lines.append(
            f"  {label:<7} predicted ~{bucket.mean_predicted * 100:.1f}% "
            f"-> observed {bucket.observed_rate * 100:.1f}% (n={bucket.count})"
        )

    if report.snapshot_signals:
        lines += [
            "",
            f"NOTE: {', '.join(report.snapshot_signals)} come from a present-day snapshot, "
            "not point-in-time data; results are optimistically biased.",
        ]
    return "\n".join(lines)
