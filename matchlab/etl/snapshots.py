"""
Present-day signal snapshots for the backtest.

A snapshot is a JSON document holding ratings, expected-goals profiles and
1X2 odds as they were when it was captured, keyed by provider-native team
names:

    {
      "captured_at": "2025-03-01T00:00:00Z",
      "ratings": [{"team": "Arsenal", "rating": 1985.2, "source": "clubelo"}],
      "xg": [{"team": "Arsenal", "matches": 26, "xg_per_match": 1.9,
              "xga_per_match": 0.9, "recent_xg_per_match": 2.1,
              "recent_xga_per_match": 0.8, "xg_trend": 0.15}],
      "odds": [{"home_team": "Arsenal", "away_team": "Chelsea",
                "home_win": 1.8, "draw": 3.8, "away_win": 4.5,
                "bookmaker": "Pinnacle"}]
    }

Every section is optional. Payloads are validated with pydantic and turned
into the frozen dataclasses of matchlab.etl.base.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from matchlab.etl.base import MatchOdds, TeamRating, TeamXG

logger = logging.getLogger(__name__)


class _RatingPayload(BaseModel):
    team: str
    rating: float
    source: str = "clubelo"


class _XGPayload(BaseModel):
    team: str
    matches: int = Field(ge=0)
    xg_per_match: float
    xga_per_match: float
    recent_xg_per_match: Optional[float] = None
    recent_xga_per_match: Optional[float] = None
    xg_trend: Optional[float] = None


class _OddsPayload(BaseModel):
    home_team: str
    away_team: str
    home_win: float = Field(gt=1.0)
    draw: float = Field(gt=1.0)
    away_win: float = Field(gt=1.0)
    bookmaker: str = "unknown"


class _SnapshotPayload(BaseModel):
    captured_at: Optional[datetime] = None
    ratings: list[_RatingPayload] = []
    xg: list[_XGPayload] = []
    odds: list[_OddsPayload] = []


@dataclass(frozen=True)
class SignalSnapshot:
    """Ratings / xG keyed by team name, plus fixture odds."""

    ratings: dict[str, TeamRating] = field(default_factory=dict)
    xg: dict[str, TeamXG] = field(default_factory=dict)
    odds: tuple[MatchOdds, ...] = ()
    captured_at: Optional[datetime] = None

    def signals(self) -> tuple[str, ...]:
        """Names of the non-empty sections."""
        present = []
        if self.ratings:
            present.append("ratings")
        if self.xg:
            present.append("xg")
        if self.odds:
            present.append("odds")
        return tuple(present)


def parse_snapshot(payload: dict) -> SignalSnapshot:
    """
    Validate a decoded snapshot document.

    Raises:
        pydantic.ValidationError: malformed payload (a ValueError).
    """
    data = _SnapshotPayload.model_validate(payload)
    snapshot = SignalSnapshot(
        ratings={r.team: TeamRating(team=r.team, rating=r.rating, source=r.source) for r in data.ratings},
        xg={x.team: TeamXG(**x.model_dump()) for x in data.xg},
        odds=tuple(MatchOdds(**o.model_dump()) for o in data.odds),
        captured_at=data.captured_at,
    )
    logger.info(
        "[SNAPSHOT] Loaded %d ratings, %d xG profiles, %d odds (captured_at=%s)",
        len(snapshot.ratings),
        len(snapshot.xg),
        len(snapshot.odds),
        snapshot.captured_at,
    )
    return snapshot


def load_snapshot(path: Union[str, Path]) -> SignalSnapshot:
    """
    Read and validate a snapshot file.

    Raises:
        OSError: unreadable file.
        ValueError: invalid JSON or schema.
    """
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError(f"Snapshot {path} must be a JSON object")
    return parse_snapshot(payload)
