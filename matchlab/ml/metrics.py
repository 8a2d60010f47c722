"""Evaluation metrics for backtested predictions."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from sklearn.metrics import accuracy_score, confusion_matrix

from matchlab.etl.base import OUTCOMES

logger = logging.getLogger(__name__)

LOG_LOSS_FLOOR = 1e-6

# Reliability buckets in percent; the last one includes 100.
BUCKET_EDGES = (20, 30, 40, 50, 60)
BUCKET_LABELS = ("0-20%", "20-30%", "30-40%", "40-50%", "50-60%", "60%+")

# Uninformed reference points for a three-way market
UNIFORM_ACCURACY = 1 / 3
UNIFORM_BRIER = 2 / 3


class EmptyBacktestError(ValueError):
    """Raised when there is nothing to evaluate."""


@dataclass(frozen=True)
class OutcomeAccuracy:
    outcome: str
    count: int  # fixtures that ended this way
    correct: int

    @property
    def accuracy(self) -> Optional[float]:
        return self.correct / self.count if self.count else None


@dataclass(frozen=True)
class ReliabilityBucket:
    label: str
    count: int
    mean_predicted: Optional[float]  # probability, 0-1
    observed_rate: Optional[float]  # hit rate, 0-1


@dataclass(frozen=True)
class Metrics:
    n: int
    accuracy: float
    brier_score: float
    log_loss: float
    per_outcome: tuple[OutcomeAccuracy, ...]
    reliability: tuple[ReliabilityBucket, ...]


def brier_scores(y_true: np.ndarray, y_proba: np.ndarray) -> np.ndarray:
    """
    Per-fixture multi-class Brier score.

    Sum over the three classes of (p - y)^2; 0 is perfect, 2/3 is a
    uniform guess, 2 is a confident miss.

    Args:
        y_true: True labels (0=home, 1=draw, 2=away), shape (n,).
        y_proba: Predicted probabilities, shape (n, 3).
    """
    one_hot = np.eye(y_proba.shape[1])[y_true]
    return np.sum((y_proba - one_hot) ** 2, axis=1)


def log_losses(y_true: np.ndarray, y_proba: np.ndarray, floor: float = LOG_LOSS_FLOOR) -> np.ndarray:
    """Per-fixture -log(p_true), with p_true floored to keep it finite."""
    true_probs = y_proba[np.arange(len(y_true)), y_true]
    return -np.log(np.maximum(true_probs, floor))


def reliability_table(y_true: np.ndarray, y_proba: np.ndarray) -> tuple[ReliabilityBucket, ...]:
    """
    Calibration buckets over every per-class probability.

    Each of the n * 3 (probability, happened?) pairs lands in exactly one
    bucket; a bucket reports its size, mean prediction and observed rate.
    """
    one_hot = np.eye(y_proba.shape[1])[y_true]
    probs = y_proba.ravel()
    hits = one_hot.ravel()
    bucket_ids = np.digitize(np.round(probs * 100, 9), BUCKET_EDGES)

    buckets = []
    for i, label in enumerate(BUCKET_LABELS):
        mask = bucket_ids == i
        count = int(mask.sum())
        buckets.append(ReliabilityBucket(
            label=label,
            count=count,
            mean_predicted=float(probs[mask].mean()) if count else None,
            observed_rate=float(hits[mask].mean()) if count else None,
        ))
    return tuple(buckets)


def summarize(records: Sequence) -> Metrics:
    """
    Aggregate metrics over backtest records.

    Args:
        records: MatchOutcomeRecord-like objects exposing `distribution`,
            `predicted` and `actual`.

    Raises:
        EmptyBacktestError: no records.
    """
    if not records:
        raise EmptyBacktestError("No fixtures to evaluate")

    y_true = np.array([OUTCOMES.index(r.actual) for r in records])
    y_pred = np.array([OUTCOMES.index(r.predicted) for r in records])
    y_proba = np.array([r.distribution.as_fractions() for r in records], dtype=float)

    labels = list(range(len(OUTCOMES)))
    cm = confusion_matrix(y_true, y_pred, labels=labels)
    per_outcome = tuple(
        OutcomeAccuracy(outcome=OUTCOMES[i], count=int(cm[i].sum()), correct=int(cm[i, i]))
        for i in labels
    )

    metrics = Metrics(
        n=len(records),
        accuracy=float(accuracy_score(y_true, y_pred)),
        brier_score=float(brier_scores(y_true, y_proba).mean()),
        log_loss=float(log_losses(y_true, y_proba).mean()),
        per_outcome=per_outcome,
        reliability=reliability_table(y_true, y_proba),
    )
    logger.info(
        "[BACKTEST] n=%d accuracy=%.3f brier=%.4f log_loss=%.4f",
        metrics.n, metrics.accuracy, metrics.brier_score, metrics.log_loss,
    )
    return metrics
