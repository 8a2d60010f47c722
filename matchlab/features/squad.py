"""
Squad analysis: key-player absences and squad quality.

A team's key players (top scorers and assisters) are cross-referenced with
its injury list through the person-name resolver. Each absence is attributed
to at most one player and each player to at most one absence, best match
first.
"""

import logging
from typing import Iterable, Optional, Sequence

from matchlab.etl.base import CriticalAbsence, Injury, KeyPlayer
from matchlab.etl.resolver import person_match_score

logger = logging.getLogger(__name__)

HIGH_IMPACT_CONTRIBUTIONS = 10

# Squad quality
FULL_ROSTER_SIZE = 5
FULL_CONTRIBUTIONS = 40
ROSTER_SHARE = 0.6
CONTRIBUTION_SHARE = 0.4
HIGH_IMPACT_PENALTY = 0.8
MEDIUM_IMPACT_PENALTY = 0.5
MAX_PENALTY_SHARE = 0.6


def absence_impact(player: KeyPlayer) -> str:
    if player.contributions >= HIGH_IMPACT_CONTRIBUTIONS or player.role == "both":
        return "high"
    return "medium"


def identify_critical_absences(
    key_players: Sequence[KeyPlayer],
    injuries: Sequence[Injury],
) -> tuple[CriticalAbsence, ...]:
    """
    Key players who appear on the injury list.

    Candidate pairs are ranked by person_match_score (exact > containment >
    last name + initial) and assigned greedily, so a vague record like
    "Silva" cannot be attached to two different players.

    Returns:
        Absences in key-player order.
    """
    pairs = []
    for p_idx, player in enumerate(key_players):
        for i_idx, injury in enumerate(injuries):
            score = person_match_score(player.name, injury.player)
            if score > 0:
                pairs.append((-score, p_idx, i_idx))
    pairs.sort()

    claimed_players: dict[int, int] = {}
    claimed_injuries: set[int] = set()
    for _neg_score, p_idx, i_idx in pairs:
        if p_idx in claimed_players or i_idx in claimed_injuries:
            continue
        claimed_players[p_idx] = i_idx
        claimed_injuries.add(i_idx)

    absences = tuple(
        CriticalAbsence(
            player=key_players[p_idx],
            injury=injuries[claimed_players[p_idx]],
            impact=absence_impact(key_players[p_idx]),
        )
        for p_idx in sorted(claimed_players)
    )
    if absences:
        logger.debug(
            "[SQUAD] %d critical absences: %s",
            len(absences),
            ", ".join(a.player.name for a in absences),
        )
    return absences


def is_critical_player(name: str, absences: Iterable[CriticalAbsence]) -> bool:
    """Whether an injury-list name belongs to an already counted absence."""
    return any(person_match_score(name, a.player.name) > 0 for a in absences)


def squad_quality_score(
    key_players: Sequence[KeyPlayer],
    absences: Sequence[CriticalAbsence] = (),
) -> Optional[float]:
    """
    Squad quality in [0, 1], discounted for missing key players.

    Roster depth (up to 5 key players) carries 60% of the score and total
    goal contributions (up to 40) the other 40%. Each absence removes its
    share of contributions, weighted 0.8 for high impact and 0.5 for medium,
    with the total discount capped at 60% of the raw score.

    Returns:
        None when no key players are known.
    """
    if not key_players:
        return None

    total = sum(p.contributions for p in key_players)
    raw = (
        min(len(key_players) / FULL_ROSTER_SIZE, 1.0) * ROSTER_SHARE
        + min(total / FULL_CONTRIBUTIONS, 1.0) * CONTRIBUTION_SHARE
    )

    penalty = 0.0
    if total > 0:
        for absence in absences:
            weight = HIGH_IMPACT_PENALTY if absence.impact == "high" else MEDIUM_IMPACT_PENALTY
            penalty += absence.player.contributions / total * weight
    penalty = min(penalty, raw * MAX_PENALTY_SHARE)

    return min(max(raw - penalty, 0.0), 1.0)


def analyse_squad(
    key_players: Sequence[KeyPlayer],
    injuries: Optional[Sequence[Injury]],
) -> tuple[Optional[tuple[CriticalAbsence, ...]], Optional[float]]:
    """
    Critical absences and squad quality for one team.

    Absences are None (unknown) when there is no injury list at all.
    """
    if injuries is None:
        return None, squad_quality_score(key_players)
    absences = identify_critical_absences(key_players, injuries)
    return absences, squad_quality_score(key_players, absences)
