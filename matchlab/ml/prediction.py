"""Scoring engine outputs: probability distribution, factors, prediction."""

import math
from dataclasses import dataclass
from typing import Sequence

from matchlab.etl.base import OUTCOMES


def largest_remainder(fractions: Sequence[float], total: int = 100) -> tuple[int, ...]:
    """
    Round fractions summing to 1 into integers summing to `total`.

    Floors every share, then hands the missing units to the largest
    remainders. Ties go to the earlier position (home, draw, away).
    """
    # 9 decimals absorbs float noise such as 3.0000000000000004
    raw = [round(f * total, 9) for f in fractions]
    floors = [math.floor(r) for r in raw]
    deficit = total - sum(floors)
    order = sorted(range(len(raw)), key=lambda i: (-(raw[i] - floors[i]), i))
    for i in order[:max(deficit, 0)]:
        floors[i] += 1
    return tuple(floors)


@dataclass(frozen=True)
class ProbabilityDistribution:
    """Integer percentages for home / draw / away, summing to exactly 100."""

    home: int
    draw: int
    away: int

    def __post_init__(self):
        values = (self.home, self.draw, self.away)
        if any(not isinstance(v, int) or v < 0 for v in values):
            raise ValueError(f"Percentages must be non-negative integers: {values}")
        if sum(values) != 100:
            raise ValueError(f"Percentages must sum to 100, got {sum(values)}")

    @classmethod
    def from_fractions(cls, home: float, draw: float, away: float) -> "ProbabilityDistribution":
        h, d, a = largest_remainder((home, draw, away))
        return cls(home=h, draw=d, away=a)

    @property
    def outcome(self) -> str:
        """Most likely label; ties resolve home, then away, then draw."""
        if self.home >= self.draw and self.home >= self.away:
            return "home"
        if self.away >= self.home and self.away >= self.draw:
            return "away"
        return "draw"

    def as_fractions(self) -> tuple[float, float, float]:
        return (self.home / 100, self.draw / 100, self.away / 100)

    def probability_of(self, outcome: str) -> float:
        return self.as_fractions()[OUTCOMES.index(outcome)]


NEUTRAL_FALLBACK = ProbabilityDistribution(home=40, draw=25, away=35)


@dataclass(frozen=True)
class Factor:
    """One itemized contribution to a prediction."""

    key: str
    label: str
    home_value: str
    away_value: str
    home_score: float
    away_score: float
    weight: float
    baseline_weight: float
    available: bool = True

    @property
    def edge(self) -> float:
        """Weighted home-minus-away contribution."""
        return self.weight * (self.home_score - self.away_score)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "home_value": self.home_value,
            "away_value": self.away_value,
            "home_score": round(self.home_score, 4),
            "away_score": round(self.away_score, 4),
            "weight": round(self.weight, 4),
            "baseline_weight": self.baseline_weight,
            "available": self.available,
        }


@dataclass(frozen=True)
class Prediction:
    distribution: ProbabilityDistribution
    factors: tuple[Factor, ...]
    odds_available: bool
    fallback: bool = False

    @property
    def outcome(self) -> str:
        return self.distribution.outcome

    def to_dict(self) -> dict:
        """Plain structure for the narrative / presentation layer."""
        return {
            "home": self.distribution.home,
            "draw": self.distribution.draw,
            "away": self.distribution.away,
            "outcome": self.outcome,
            "odds_available": self.odds_available,
            "fallback": self.fallback,
            "factors": [f.to_dict() for f in self.factors],
        }
