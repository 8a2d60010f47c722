"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from environment variables (and .env when present)."""

    # football-data.org v4 (results + standings feed used by the backtest)
    FOOTBALL_DATA_API_KEY: str = ""  # Required by the backtest CLI only
    FOOTBALL_DATA_BASE_URL: str = "https://api.football-data.org/v4"
    HTTP_TIMEOUT_SECONDS: float = 20.0

    # ═══════════════════════════════════════════════════════════════
    # Point-in-time reconstruction
    # ═══════════════════════════════════════════════════════════════
    FORM_WINDOW: int = 5  # Results kept in the recent-form string
    SOS_WINDOW: int = 5  # Prior matches used for strength of schedule
    H2H_MAX_MEETINGS: int = 10  # Most recent meetings kept in head-to-head

    # ═══════════════════════════════════════════════════════════════
    # Backtest
    # ═══════════════════════════════════════════════════════════════
    # Both sides need this many prior appearances before a fixture is scored
    # (avoids degenerate early-season tables).
    BACKTEST_MIN_PRIOR_MATCHES: int = 5

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
