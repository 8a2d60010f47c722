"""Walk-forward backtest tests on a tiny synthetic season."""

import math

import pytest

from matchlab.etl.base import MatchOdds, TeamRating
from matchlab.etl.snapshots import SignalSnapshot
from matchlab.ml.backtest import backtest, format_report
from matchlab.ml.metrics import EmptyBacktestError
from matchlab.telemetry.metrics import matchlab_backtest_skipped_total

from tests.factories import ALPHA, BETA, NAMES, make_match


class TestBacktest:
    def test_every_fixture_scored(self, season_log):
        report = backtest(season_log, min_prior_matches=0)
        assert report.evaluated == 6
        assert report.skipped == 0
        assert [r.actual for r in report.records] == ["home", "draw", "away", "away", "draw", "draw"]
        for r in report.records:
            d = r.distribution
            assert d.home + d.draw + d.away == 100
            assert math.isfinite(r.brier) and math.isfinite(r.log_loss)
        assert sum(b.count for b in report.metrics.reliability) == 18

    def test_input_order_does_not_matter(self, season_log):
        forward = backtest(season_log, min_prior_matches=0)
        shuffled = backtest(list(reversed(season_log)), min_prior_matches=0)
        assert forward.records == shuffled.records

    def test_unfinished_fixtures_dropped(self, season_log):
        log = season_log + [make_match(107, 6, ALPHA, BETA)]
        assert backtest(log, min_prior_matches=0).evaluated == 6

    def test_min_prior_matches(self, season_log):
        counter = matchlab_backtest_skipped_total.labels(reason="insufficient_history")
        before = counter._value.get()

        report = backtest(season_log, min_prior_matches=1)

        assert report.skipped == 2
        assert [r.match_id for r in report.records] == [103, 104, 105, 106]
        assert counter._value.get() == before + 2

    def test_nothing_qualifies(self, season_log):
        with pytest.raises(EmptyBacktestError):
            backtest(season_log, min_prior_matches=5)

    def test_roster_merged_with_log_teams(self, season_log):
        roster = {**NAMES, 99: "Delta Rovers"}
        report = backtest(season_log, min_prior_matches=0, roster=roster)
        assert report.evaluated == 6


class TestSnapshot:
    def test_snapshot_run_is_flagged(self, season_log, caplog):
        snapshot = SignalSnapshot(
            ratings={"Alpha": TeamRating("Alpha", 1900.0), "Beta United": TeamRating("Beta United", 1500.0)},
            odds=(MatchOdds(1.5, 4.0, 6.0, home_team="Alpha", away_team="Beta United"),),
        )
        report = backtest(season_log, snapshot, min_prior_matches=0)
        assert report.snapshot_signals == ("ratings", "odds")
        assert "not point-in-time" in caplog.text
        assert "present-day snapshot" in format_report(report, "TEST")

    def test_empty_snapshot_is_not_flagged(self, season_log):
        report = backtest(season_log, SignalSnapshot(), min_prior_matches=0)
        assert report.snapshot_signals == ()


class TestFormatReport:
    def test_sections(self, season_log):
        text = format_report(backtest(season_log, min_prior_matches=0), "PL")
        assert "matchlab backtest: PL" in text
        assert "Fixtures evaluated : 6" in text
        assert "BY OUTCOME" in text
        assert "CALIBRATION" in text
        assert "NOTE" not in text
