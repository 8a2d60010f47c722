"""
Backtest command line.

Usage:
    python scripts/backtest.py PL
    python scripts/backtest.py SA --snapshot data/snapshot.json --min-prior-matches 3 -v
    matchlab-backtest BL1 --metrics-out backtest.prom

Exit codes: 0 success, 1 missing API key / provider failure / nothing
evaluated / unreadable snapshot, 2 usage error.
"""

import argparse
import asyncio
import logging
import sys
import time
from typing import Optional, Sequence

from matchlab.config import get_settings
from matchlab.etl.competitions import LEAGUES
from matchlab.etl.football_data import FootballDataError, FootballDataProvider
from matchlab.etl.snapshots import load_snapshot
from matchlab.ml.backtest import backtest, format_report
from matchlab.ml.metrics import EmptyBacktestError
from matchlab.telemetry.metrics import get_metrics_text

logger = logging.getLogger("matchlab.backtest")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Walk-forward backtest of the matchlab scoring engine"
    )
    parser.add_argument("league", choices=sorted(LEAGUES),
                        help="football-data.org competition code")
    parser.add_argument("--snapshot", default=None,
                        help="JSON snapshot with present-day ratings / xG / odds")
    parser.add_argument("--min-prior-matches", type=int, default=None,
                        help="Prior appearances both sides need (default from settings)")
    parser.add_argument("--metrics-out", default=None,
                        help="Write Prometheus counters to this file after the run")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging")
    return parser


async def fetch_season(league_code: str):
    provider = FootballDataProvider()
    try:
        return await provider.get_season(league_code)
    finally:
        await provider.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    league = LEAGUES[args.league]
    if not settings.FOOTBALL_DATA_API_KEY:
        logger.error("FOOTBALL_DATA_API_KEY is not set (environment or .env)")
        return 1

    snapshot = None
    if args.snapshot:
        try:
            snapshot = load_snapshot(args.snapshot)
        except (OSError, ValueError) as e:
            logger.error(f"Cannot load snapshot {args.snapshot}: {e}")
            return 1

    start = time.time()
    logger.info(f"Loading {league.name} ({league.code}) from football-data.org")
    try:
        standings, matches = asyncio.run(fetch_season(league.code))
    except FootballDataError as e:
        logger.error(f"Provider failure: {e}")
        return 1

    roster = {s.team_id: s.team_name for s in standings}
    try:
        report = backtest(
            matches,
            snapshot,
            min_prior_matches=args.min_prior_matches,
            roster=roster,
        )
    except EmptyBacktestError as e:
        logger.error(str(e))
        return 1

    print(format_report(report, league.name))
    print(f"\nDuration: {time.time() - start:.1f}s")

    if args.metrics_out:
        content, _content_type = get_metrics_text()
        with open(args.metrics_out, "w", encoding="utf-8") as f:
            f.write(content)
        logger.info(f"Metrics written to {args.metrics_out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
