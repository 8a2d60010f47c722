"""Tests for proportional de-vig."""

import math

import pytest

from matchlab.etl.base import MatchOdds
from matchlab.ml.devig import devig_proportional


def _odds(home, draw, away) -> MatchOdds:
    return MatchOdds(home_win=home, draw=draw, away_win=away)


class TestDevigProportional:
    """Test baseline de-vig method."""

    def test_fair_odds_unchanged(self):
        """Fair odds (sum to 1) should be unchanged."""
        result = devig_proportional(_odds(2.0, 4.0, 4.0))
        assert result == pytest.approx((0.5, 0.25, 0.25))

    def test_typical_market_odds(self):
        """Typical market odds with ~5% overround."""
        result = devig_proportional(_odds(2.10, 3.50, 3.40))
        assert sum(result) == pytest.approx(1.0)
        assert 0.4 < result[0] < 0.5
        assert 0.25 < result[1] < 0.30
        assert 0.25 < result[2] < 0.30

    @pytest.mark.parametrize(
        "prices",
        [(0.5, 3.0, 3.0), (1.0, 3.0, 3.0), (math.nan, 3.4, 3.6), (2.1, math.inf, 3.6)],
    )
    def test_invalid_prices_carry_no_market(self, prices):
        assert devig_proportional(_odds(*prices)) is None
