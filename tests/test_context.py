"""Tests for stakes tiers and derby detection."""

from matchlab.etl.base import Stakes, Standing
from matchlab.features.context import is_derby, match_context, stakes_for


def _standing(rank: int, team_id: int, name: str) -> Standing:
    return Standing(
        rank=rank, team_id=team_id, team_name=name, played=10, won=5, drawn=2,
        lost=3, goals_for=15, goals_against=12, points=17,
    )


class TestStakes:
    """Tiers for a 20-team table: 1-2 title, 3-6 europe, 18-20 relegation."""

    def test_twenty_team_table(self):
        assert stakes_for(1, 20) == Stakes.TITLE
        assert stakes_for(2, 20) == Stakes.TITLE
        assert stakes_for(3, 20) == Stakes.EUROPE
        assert stakes_for(6, 20) == Stakes.EUROPE
        assert stakes_for(7, 20) == Stakes.MIDTABLE
        assert stakes_for(17, 20) == Stakes.MIDTABLE
        assert stakes_for(18, 20) == Stakes.RELEGATION

    def test_small_table_europe_cutoff(self):
        """ceil(10 * 0.3) = 3 limits the europe places."""
        assert stakes_for(3, 10) == Stakes.EUROPE
        assert stakes_for(4, 10) == Stakes.MIDTABLE
        assert stakes_for(8, 10) == Stakes.RELEGATION


class TestDerby:
    def test_provider_spellings(self):
        assert is_derby("Manchester United FC", "Manchester City FC")
        assert is_derby("FC Internazionale Milano", "AC Milan")
        assert is_derby("Real Madrid CF", "Club Atlético de Madrid")

    def test_order_does_not_matter(self):
        assert is_derby("Everton FC", "Liverpool FC")

    def test_not_a_derby(self):
        assert not is_derby("Real Madrid CF", "RCD Espanyol de Barcelona")
        assert not is_derby("Arsenal FC", "Chelsea FC")


class TestMatchContext:
    def test_relegation_derby(self):
        ctx = match_context(_standing(19, 1, "Everton FC"), _standing(20, 2, "Liverpool FC"), 20)
        assert ctx.home_stakes == Stakes.RELEGATION
        assert ctx.away_stakes == Stakes.RELEGATION
        assert ctx.is_derby
