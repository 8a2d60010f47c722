"""Tests for backtest evaluation metrics."""

from dataclasses import dataclass

import numpy as np
import pytest

from matchlab.ml.metrics import (
    BUCKET_LABELS,
    EmptyBacktestError,
    UNIFORM_BRIER,
    brier_scores,
    log_losses,
    reliability_table,
    summarize,
)
from matchlab.ml.prediction import ProbabilityDistribution


@dataclass
class _Record:
    distribution: ProbabilityDistribution
    predicted: str
    actual: str


def _record(home, draw, away, actual):
    d = ProbabilityDistribution(home, draw, away)
    return _Record(distribution=d, predicted=d.outcome, actual=actual)


class TestBrier:
    def test_perfect(self):
        assert brier_scores(np.array([0]), np.array([[1.0, 0.0, 0.0]]))[0] == 0.0

    def test_confident_miss(self):
        assert brier_scores(np.array([2]), np.array([[1.0, 0.0, 0.0]]))[0] == pytest.approx(2.0)

    def test_uniform(self):
        third = 1 / 3
        assert brier_scores(np.array([1]), np.array([[third, third, third]]))[0] == pytest.approx(UNIFORM_BRIER)


class TestLogLoss:
    def test_value(self):
        assert log_losses(np.array([0]), np.array([[0.5, 0.25, 0.25]]))[0] == pytest.approx(np.log(2))

    def test_zero_probability_is_floored(self):
        loss = log_losses(np.array([1]), np.array([[0.6, 0.0, 0.4]]))[0]
        assert np.isfinite(loss)
        assert loss == pytest.approx(-np.log(1e-6))


class TestReliability:
    def test_every_probability_lands_in_one_bucket(self):
        y_true = np.array([0, 1, 2, 0])
        y_proba = np.array([
            [0.20, 0.30, 0.50],
            [0.60, 0.25, 0.15],
            [0.05, 0.15, 0.80],
            [1.00, 0.00, 0.00],
        ])
        table = reliability_table(y_true, y_proba)
        assert [b.label for b in table] == list(BUCKET_LABELS)
        assert sum(b.count for b in table) == 12

    def test_bucket_edges(self):
        """20% belongs to 20-30%, 60% and 100% to 60%+."""
        table = {b.label: b for b in reliability_table(np.array([0]), np.array([[0.60, 0.20, 0.20]]))}
        assert table["20-30%"].count == 2
        assert table["60%+"].count == 1
        assert table["60%+"].observed_rate == 1.0
        assert table["20-30%"].observed_rate == 0.0
        assert table["0-20%"].mean_predicted is None


class TestSummarize:
    def test_summary(self):
        records = [
            _record(50, 25, 25, "home"),
            _record(50, 25, 25, "away"),
            _record(20, 30, 50, "away"),
            _record(30, 40, 30, "home"),
        ]
        metrics = summarize(records)
        assert metrics.n == 4
        assert metrics.accuracy == pytest.approx(0.5)
        per_outcome = {o.outcome: o for o in metrics.per_outcome}
        assert per_outcome["home"].count == 2
        assert per_outcome["home"].correct == 1
        assert per_outcome["away"].accuracy == pytest.approx(0.5)
        assert per_outcome["draw"].accuracy is None
        assert sum(b.count for b in metrics.reliability) == 12
        assert metrics.brier_score == pytest.approx((0.375 + 0.875 + 0.38 + 0.74) / 4)

    def test_empty(self):
        with pytest.raises(EmptyBacktestError):
            summarize([])
