"""Scoring engine and its evaluation."""

from matchlab.ml.engine import MissingStandingsError, score
from matchlab.ml.metrics import EmptyBacktestError, summarize
from matchlab.ml.prediction import Factor, Prediction, ProbabilityDistribution
from matchlab.ml.weights import BASELINE_WEIGHTS, redistribute_weights

__all__ = [
    "score", "MissingStandingsError",
    "summarize", "EmptyBacktestError",
    "Factor", "Prediction", "ProbabilityDistribution",
    "BASELINE_WEIGHTS", "redistribute_weights",
]
