"""
Proportional de-vig: strip the bookmaker margin from 1X2 odds by
normalizing the implied probabilities 1/odds to sum to 1.

Invalid prices (any quote <= 1.0 or non-finite) carry no market
information and yield None.
"""

import math
from typing import Optional, Tuple

from matchlab.etl.base import MatchOdds

Probabilities = Tuple[float, float, float]


def _implied(odds: MatchOdds) -> Optional[list[float]]:
    prices = (odds.home_win, odds.draw, odds.away_win)
    try:
        if any(not math.isfinite(p) or p <= 1 for p in prices):
            return None
    except TypeError:
        return None
    return [1 / p for p in prices]


def devig_proportional(odds: MatchOdds) -> Optional[Probabilities]:
    """
    Proportional de-vig.

    Args:
        odds: Decimal 1X2 prices.

    Returns:
        Tuple of (prob_home, prob_draw, prob_away) summing to 1.0, or None
        when any price is invalid.
    """
    implied = _implied(odds)
    if implied is None:
        return None
    total = sum(implied)
    return (implied[0] / total, implied[1] / total, implied[2] / total)
