"""Tests for key-player absence detection and squad quality."""

import pytest

from matchlab.etl.base import Injury, KeyPlayer
from matchlab.features.squad import (
    analyse_squad,
    identify_critical_absences,
    squad_quality_score,
)


SALAH = KeyPlayer(name="Mohamed Salah", goals=18, assists=12, role="both")
NUNEZ = KeyPlayer(name="Darwin Núñez", goals=8, assists=2, role="scorer")
ROBERTSON = KeyPlayer(name="Andrew Robertson", goals=1, assists=5, role="assister")
KEY_PLAYERS = [SALAH, NUNEZ, ROBERTSON]


class TestCriticalAbsences:
    """Injury records are attributed to at most one key player each."""

    def test_diacritics_and_initials(self):
        injuries = [Injury(player="M. Salah"), Injury(player="Darwin Nunez")]
        absences = identify_critical_absences(KEY_PLAYERS, injuries)
        assert [a.player.name for a in absences] == ["Mohamed Salah", "Darwin Núñez"]

    def test_impact(self):
        injuries = [Injury(player="Mohamed Salah"), Injury(player="Andrew Robertson")]
        absences = identify_critical_absences(KEY_PLAYERS, injuries)
        impacts = {a.player.name: a.impact for a in absences}
        assert impacts == {"Mohamed Salah": "high", "Andrew Robertson": "medium"}

    def test_one_record_attaches_to_one_player(self):
        players = [
            KeyPlayer(name="Bernardo Silva", goals=6, assists=8, role="both"),
            KeyPlayer(name="Thiago Silva", goals=2, assists=1, role="scorer"),
        ]
        absences = identify_critical_absences(players, [Injury(player="Silva")])
        assert len(absences) == 1

    def test_best_record_wins(self):
        injuries = [Injury(player="Salah", reason="Knock"), Injury(player="Mohamed Salah", reason="Hamstring")]
        absences = identify_critical_absences([SALAH], injuries)
        assert len(absences) == 1
        assert absences[0].injury.reason == "Hamstring"

    def test_unrelated_injuries(self):
        assert identify_critical_absences(KEY_PLAYERS, [Injury(player="Alisson Becker")]) == ()


class TestSquadQuality:
    def test_no_key_players_is_unknown(self):
        assert squad_quality_score([]) is None

    def test_full_squad(self):
        players = [KeyPlayer(name=f"Player {i}", goals=6, assists=3) for i in range(5)]
        assert squad_quality_score(players) == pytest.approx(1.0)

    def test_absence_penalty(self):
        full = squad_quality_score(KEY_PLAYERS)
        absences = identify_critical_absences(KEY_PLAYERS, [Injury(player="Mohamed Salah")])
        assert squad_quality_score(KEY_PLAYERS, absences) < full

    def test_penalty_capped_at_sixty_percent(self):
        absences = identify_critical_absences(
            KEY_PLAYERS,
            [Injury(player=p.name) for p in KEY_PLAYERS],
        )
        raw = squad_quality_score(KEY_PLAYERS)
        assert squad_quality_score(KEY_PLAYERS, absences) == pytest.approx(raw * 0.4)


class TestAnalyseSquad:
    def test_unknown_injuries(self):
        absences, quality = analyse_squad(KEY_PLAYERS, None)
        assert absences is None
        assert quality == squad_quality_score(KEY_PLAYERS)

    def test_clean_bill_of_health(self):
        absences, quality = analyse_squad(KEY_PLAYERS, [])
        assert absences == ()
        assert quality == squad_quality_score(KEY_PLAYERS)
