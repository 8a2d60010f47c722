"""Tests for the per-factor goodness transforms."""

import math

import pytest

from matchlab.etl.base import (
    CriticalAbsence,
    HeadToHeadRecord,
    Injury,
    KeyPlayer,
    MatchContext,
    RefereeProfile,
    Stakes,
    StrengthOfSchedule,
    TacticalProfile,
    TeamFatigue,
    TeamRating,
    TeamXG,
    VenueRecord,
)
from matchlab.ml import transforms as t


class TestScalarTransforms:
    def test_rating(self):
        assert t.rating_score(TeamRating("A", 1350.0)) == 0.0
        assert t.rating_score(TeamRating("A", 2100.0)) == 1.0
        assert t.rating_score(TeamRating("A", 2500.0)) == 1.0
        assert t.rating_score(TeamRating("A", 1725.0)) == pytest.approx(0.5)
        assert t.rating_score(TeamRating("A", math.nan)) == t.NEUTRAL

    def test_xg_prefers_recent(self):
        xg = TeamXG("A", 10, 1.0, 1.0, recent_xg_per_match=2.5, recent_xga_per_match=0.0)
        assert t.xg_score(xg) == pytest.approx(1.0)

    def test_xg_season_fallback(self):
        xg = TeamXG("A", 10, 1.25, 1.25)
        assert t.xg_score(xg) == pytest.approx(0.5 * 0.4 + 0.5 * 0.6)

    def test_xg_trend(self):
        assert t.xg_trend_score(TeamXG("A", 5, 1.0, 1.0, xg_trend=1.0)) == 1.0
        assert t.xg_trend_score(TeamXG("A", 5, 1.0, 1.0, xg_trend=-1.0)) == 0.0
        assert t.xg_trend_score(TeamXG("A", 5, 1.0, 1.0)) == t.NEUTRAL

    def test_form(self):
        assert t.form_score("W,W,W,W,W") == pytest.approx(1.0)
        assert t.form_score("L,L,L,L,L") == 0.0
        assert t.form_score("W,D,L") == pytest.approx((0.30 + 0.4 * 0.25) / 0.75)
        assert t.form_score(None) == t.NEUTRAL
        assert t.form_score("") == t.NEUTRAL

    def test_form_is_recency_weighted(self):
        assert t.form_score("W,L") > t.form_score("L,W")


class TestVenueAndDefense:
    def test_venue_prior(self):
        assert t.venue_score(None, home=True) == 0.55
        assert t.venue_score(None, home=False) == 0.45
        assert t.venue_score(TacticalProfile(), home=True) == 0.55

    def test_venue_record(self):
        tactics = TacticalProfile(home_record=VenueRecord(played=4, wins=2, draws=1, losses=1))
        assert t.venue_score(tactics, home=True) == pytest.approx(7 / 12)

    def test_defense_neutral_without_games(self):
        assert t.defense_score(TacticalProfile(), home=True) == t.NEUTRAL

    def test_defense(self):
        tactics = TacticalProfile(
            away_record=VenueRecord(played=4, wins=2, draws=2),
            clean_sheets_away=2,
            goals_against_avg_away=0.75,
        )
        assert t.defense_score(tactics, home=False) == pytest.approx(0.5 * 0.5 + 0.75 * 0.5)


class TestInjuries:
    SALAH = KeyPlayer(name="Mohamed Salah", goals=18, assists=12, role="both")

    def test_unknown_is_neutral(self):
        assert t.injury_score(None, None) == t.NEUTRAL

    def test_empty_list_is_full_strength(self):
        assert t.injury_score([], None) == 1.0

    def test_key_absence_penalty(self):
        injury = Injury(player="Mohamed Salah")
        critical = [CriticalAbsence(player=self.SALAH, injury=injury, impact="high")]
        others = [Injury(player="Joe Gomez")]
        assert t.injury_score([injury, *others], critical) == pytest.approx(1 - 0.20 - 0.03)

    def test_penalty_cap(self):
        injuries = [Injury(player=f"Player {i}") for i in range(40)]
        assert t.injury_score(injuries, ()) == pytest.approx(0.2)


class TestFixtureLevel:
    def test_fatigue(self):
        assert t.fatigue_score(TeamFatigue(days_since_last_match=7, matches_last_30_days=0)) == pytest.approx(0.88)
        assert t.fatigue_score(TeamFatigue(days_since_last_match=1, matches_last_30_days=12)) == pytest.approx(0.12)
        assert t.fatigue_score(None) == t.NEUTRAL

    def test_h2h(self):
        assert t.h2h_scores(HeadToHeadRecord(team1_wins=2, draws=1, team2_wins=1)) == pytest.approx((7 / 12, 4 / 12))
        assert t.h2h_scores(HeadToHeadRecord(0, 0, 0)) == (t.NEUTRAL, t.NEUTRAL)

    def test_sos(self):
        sos = StrengthOfSchedule(team_id=1, matches_considered=5, avg_opponent_rank=4.0,
                                 avg_opponent_ppm=2.1, score=0.8)
        assert t.sos_score(sos) == 0.8

    def test_context_derby_shrinks(self):
        plain = t.context_scores(MatchContext(Stakes.TITLE, Stakes.MIDTABLE))
        derby = t.context_scores(MatchContext(Stakes.TITLE, Stakes.MIDTABLE, is_derby=True))
        assert plain == (0.65, 0.50)
        assert derby[0] == pytest.approx(0.65 * 0.85 + 0.5 * 0.15)
        assert derby[1] == pytest.approx(0.5)

    def test_referee(self):
        assert t.referee_severity(RefereeProfile("New Ref", 2, 6.0)) is None
        strict = RefereeProfile("Strict", 20, 6.0)
        assert t.referee_severity(strict) == 1.0
        assert t.referee_score(strict) == pytest.approx(0.45)
        lenient = RefereeProfile("Lenient", 20, 2.0, penalties_awarded=8)
        assert t.referee_score(lenient) == pytest.approx(0.53)
