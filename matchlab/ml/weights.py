"""
Factor weights of the composite scoring engine.

BASELINE_WEIGHTS sum to 1.0. When a factor cannot be computed at all (no
market odds), its weight is handed to the others in proportion to their own
baseline, so their mutual ratios never change.
"""

import math
from typing import Iterable, Mapping

MARKET_FACTOR = "odds"

BASELINE_WEIGHTS: dict[str, float] = {
    "odds": 0.25,
    "xg": 0.12,
    "venue": 0.10,
    "form": 0.08,
    "injuries": 0.08,
    "elo": 0.07,
    "fatigue": 0.06,
    "xg_trend": 0.05,
    "sos": 0.05,
    "squad": 0.04,
    "context": 0.04,
    "h2h": 0.02,
    "defense": 0.02,
    "referee": 0.02,
}


def redistribute_weights(
    baseline: Mapping[str, float],
    unavailable: Iterable[str] = (),
) -> dict[str, float]:
    """
    Zero out unavailable factors and rescale the rest to sum to 1.

    Args:
        baseline: factor -> non-negative weight (need not sum to 1).
        unavailable: factors to drop; names not in `baseline` are ignored.

    Returns:
        factor -> applied weight, same keys and order as `baseline`.

    Raises:
        ValueError: a negative or non-finite weight, or nothing left to
            distribute.
    """
    for key, weight in baseline.items():
        if not math.isfinite(weight) or weight < 0:
            raise ValueError(f"Invalid weight for {key!r}: {weight}")

    dropped = set(unavailable)
    remaining = math.fsum(w for k, w in baseline.items() if k not in dropped)
    if remaining <= 0:
        raise ValueError("No weight left to distribute")

    return {
        key: 0.0 if key in dropped else weight / remaining
        for key, weight in baseline.items()
    }


def merge_weights(overrides: Mapping[str, float]) -> dict[str, float]:
    """
    Baseline weights with caller overrides applied.

    Raises:
        ValueError: an override names an unknown factor.
    """
    unknown = set(overrides) - set(BASELINE_WEIGHTS)
    if unknown:
        raise ValueError(f"Unknown factors in weights: {sorted(unknown)}")
    return {key: overrides.get(key, weight) for key, weight in BASELINE_WEIGHTS.items()}
