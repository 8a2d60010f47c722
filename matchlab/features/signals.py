"""Immutable inputs of the scoring engine."""

from dataclasses import dataclass, fields
from typing import Optional

from matchlab.etl.base import (
    CriticalAbsence,
    HeadToHeadRecord,
    Injury,
    MatchContext,
    MatchOdds,
    RefereeProfile,
    Standing,
    StrengthOfSchedule,
    TacticalProfile,
    TeamFatigue,
    TeamRating,
    TeamXG,
)


@dataclass(frozen=True)
class SignalBag:
    """
    Everything known about one side of a fixture.

    `standing` is mandatory for scoring; every other signal is independently
    optional. None means the signal is absent, which is not the same as a
    zero value (an empty injury list is a known, clean bill of health).
    """

    standing: Optional[Standing]
    rating: Optional[TeamRating] = None
    xg: Optional[TeamXG] = None
    tactics: Optional[TacticalProfile] = None
    fatigue: Optional[TeamFatigue] = None
    sos: Optional[StrengthOfSchedule] = None
    injuries: Optional[tuple[Injury, ...]] = None
    critical_absences: Optional[tuple[CriticalAbsence, ...]] = None
    squad_quality: Optional[float] = None

    def __post_init__(self):
        for name in ("injuries", "critical_absences"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    def available(self) -> tuple[str, ...]:
        """Names of the signals that are present, in field order."""
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is not None)


@dataclass(frozen=True)
class MatchSignals:
    """Signals that belong to the fixture rather than to one side."""

    odds: Optional[MatchOdds] = None
    context: Optional[MatchContext] = None
    referee: Optional[RefereeProfile] = None
    head_to_head: Optional[HeadToHeadRecord] = None

    def available(self) -> tuple[str, ...]:
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is not None)
