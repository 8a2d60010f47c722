#!/usr/bin/env python3
"""
Backtest the scoring engine on the current season of a league.

Usage:
    python scripts/backtest.py PL
    python scripts/backtest.py BL1 --snapshot snapshot.json --verbose

Requires FOOTBALL_DATA_API_KEY (environment or .env).
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from matchlab.cli import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())
