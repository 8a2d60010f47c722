"""
football-data.org v4 provider.

Fetches the total league table and every finished match of the current
season for a competition code (PL, PD, SA, BL1, FL1). Authentication is the
X-Auth-Token header. The free tier allows 10 requests per minute; 429
responses are retried with backoff.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from matchlab.config import get_settings
from matchlab.etl.base import MatchRecord, ResultsProvider, Standing
from matchlab.telemetry.metrics import record_provider_request

logger = logging.getLogger(__name__)

PROVIDER = "football_data"


class FootballDataError(RuntimeError):
    """Raised when football-data.org cannot be reached or returns bad data."""


# --- Payload models (only the fields we read) ---


class _Team(BaseModel):
    id: int
    name: str
    shortName: Optional[str] = None
    tla: Optional[str] = None


class _FullTime(BaseModel):
    home: Optional[int] = None
    away: Optional[int] = None


class _Score(BaseModel):
    fullTime: _FullTime = _FullTime()


class _Match(BaseModel):
    id: int
    utcDate: datetime
    status: str
    homeTeam: _Team
    awayTeam: _Team
    score: _Score = _Score()


class _MatchesResponse(BaseModel):
    matches: list[_Match] = []


class _TableRow(BaseModel):
    position: int
    team: _Team
    playedGames: int
    won: int
    draw: int
    lost: int
    points: int
    goalsFor: int
    goalsAgainst: int
    form: Optional[str] = None


class _StandingGroup(BaseModel):
    type: str
    table: list[_TableRow] = []


class _StandingsResponse(BaseModel):
    standings: list[_StandingGroup] = []


class FootballDataProvider(ResultsProvider):
    """Results and standings from football-data.org."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_retries: int = 3,
        retry_delay: float = 6.0,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.FOOTBALL_DATA_API_KEY
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.FOOTBALL_DATA_BASE_URL,
            headers={"X-Auth-Token": self.api_key},
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def _request(self, path: str, endpoint: str, params: Optional[dict] = None) -> dict:
        """
        GET a JSON document, retrying rate-limited responses.

        Args:
            path: Path relative to the base URL.
            endpoint: Telemetry label ("standings" or "matches").
            params: Query parameters.

        Raises:
            FootballDataError: transport failure, non-2xx status or
                non-JSON body.
        """
        for attempt in range(self.max_retries):
            start_time = time.time()
            try:
                response = await self.client.get(path, params=params)
            except httpx.HTTPError as e:
                record_provider_request(PROVIDER, endpoint, 0, (time.time() - start_time) * 1000)
                logger.error(f"[FOOTBALL_DATA] Request error on {path}: {e}")
                raise FootballDataError(f"Request to {path} failed: {e}") from e

            latency_ms = (time.time() - start_time) * 1000
            record_provider_request(PROVIDER, endpoint, response.status_code, latency_ms)

            if response.status_code == 429 and attempt < self.max_retries - 1:
                wait_time = self.retry_delay * (2 ** attempt)
                logger.warning(f"[FOOTBALL_DATA] Rate limited. Waiting {wait_time}s before retry...")
                await asyncio.sleep(wait_time)
                continue

            try:
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                logger.error(f"[FOOTBALL_DATA] HTTP {response.status_code} on {path}")
                raise FootballDataError(
                    f"football-data.org returned {response.status_code} for {path}"
                ) from e
            except ValueError as e:
                raise FootballDataError(f"Invalid JSON from {path}") from e

        raise FootballDataError(f"Rate limit not lifted after {self.max_retries} attempts on {path}")

    async def get_standings(self, league_code: str) -> list[Standing]:
        data = await self._request(f"/competitions/{league_code}/standings", "standings")
        try:
            payload = _StandingsResponse.model_validate(data)
        except ValidationError as e:
            raise FootballDataError(f"Unexpected standings payload for {league_code}: {e}") from e

        group = next((g for g in payload.standings if g.type == "TOTAL"), None)
        if group is None:
            raise FootballDataError(f"No TOTAL standings for {league_code}")

        return [
            Standing(
                rank=row.position,
                team_id=row.team.id,
                team_name=row.team.name,
                played=row.playedGames,
                won=row.won,
                drawn=row.draw,
                lost=row.lost,
                goals_for=row.goalsFor,
                goals_against=row.goalsAgainst,
                points=row.points,
                form=row.form or None,
            )
            for row in group.table
        ]

    async def get_finished_matches(self, league_code: str) -> list[MatchRecord]:
        data = await self._request(
            f"/competitions/{league_code}/matches", "matches", params={"status": "FINISHED"}
        )
        try:
            payload = _MatchesResponse.model_validate(data)
        except ValidationError as e:
            raise FootballDataError(f"Unexpected matches payload for {league_code}: {e}") from e

        matches = [
            MatchRecord(
                match_id=m.id,
                utc_date=m.utcDate,
                home_id=m.homeTeam.id,
                away_id=m.awayTeam.id,
                home_name=m.homeTeam.name,
                away_name=m.awayTeam.name,
                home_goals=m.score.fullTime.home,
                away_goals=m.score.fullTime.away,
            )
            for m in payload.matches
        ]
        finished = [m for m in matches if m.is_finished]
        if len(finished) < len(matches):
            logger.warning(
                "[FOOTBALL_DATA] %d matches for %s without a full-time score",
                len(matches) - len(finished),
                league_code,
            )
        return finished

    async def get_season(self, league_code: str) -> tuple[list[Standing], list[MatchRecord]]:
        """Standings and finished matches, fetched concurrently."""
        standings, matches = await asyncio.gather(
            self.get_standings(league_code),
            self.get_finished_matches(league_code),
        )
        logger.info(
            "[FOOTBALL_DATA] %s: %d teams, %d finished matches",
            league_code,
            len(standings),
            len(matches),
        )
        return standings, matches

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
