"""
Prometheus metrics for the resolver, the scoring engine and the backtest.

Design principles:
- Low cardinality (controlled labels)
- Best-effort (never block main flow)

=============================================================================
CARDINALITY CONTROL
=============================================================================

ALLOWED LABELS (bounded sets):
- provider:     "football_data" (max ~5)
- endpoint:     "standings", "matches" (max ~5)
- status_code:  "200", "400", "404", "429", "500", "0" (max ~10)
- entity_type:  "team", "player"
- source:       "ratings", "xg", "odds", "squad", "unknown" (max ~10)
- reason:       "non_finite", "insufficient_history", ... (max ~10)
- mode:         "market", "no_market", "fallback"

FORBIDDEN AS LABELS: match ids, team or player names, URLs, dates.
Use logs for specific fixtures, metrics for aggregates.
=============================================================================
"""

import logging

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)

logger = logging.getLogger(__name__)

# =============================================================================
# PROVIDER METRICS
# =============================================================================

matchlab_provider_requests_total = Counter(
    "matchlab_provider_requests_total",
    "Total requests to data providers",
    ["provider", "endpoint", "status_code"],
)

matchlab_provider_latency_ms = Histogram(
    "matchlab_provider_latency_ms",
    "Request latency in milliseconds",
    ["provider", "endpoint"],
    buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

# =============================================================================
# ENTITY RESOLUTION
# =============================================================================

matchlab_entity_unresolved_total = Counter(
    "matchlab_entity_unresolved_total",
    "Names that could not be matched to any candidate",
    ["entity_type", "source"],
)

# =============================================================================
# SCORING ENGINE
# =============================================================================

matchlab_predictions_total = Counter(
    "matchlab_predictions_total",
    "Predictions produced by the scoring engine",
    ["mode"],
)

matchlab_scoring_anomalies_total = Counter(
    "matchlab_scoring_anomalies_total",
    "Scoring runs that fell back to the neutral distribution",
    ["reason"],
)

# =============================================================================
# BACKTEST
# =============================================================================

matchlab_backtest_skipped_total = Counter(
    "matchlab_backtest_skipped_total",
    "Fixtures skipped by the backtest",
    ["reason"],
)


def record_provider_request(
    provider: str,
    endpoint: str,
    status_code: int,
    latency_ms: float,
) -> None:
    """Record a provider request and its latency."""
    try:
        matchlab_provider_requests_total.labels(
            provider=provider,
            endpoint=endpoint,
            status_code=str(status_code),
        ).inc()
        matchlab_provider_latency_ms.labels(
            provider=provider,
            endpoint=endpoint,
        ).observe(latency_ms)
    except Exception as e:
        logger.warning(f"Failed to record provider request metric: {e}")


def record_entity_unresolved(entity_type: str, source: str = "unknown") -> None:
    """Record a name the resolver could not match."""
    try:
        matchlab_entity_unresolved_total.labels(
            entity_type=entity_type,
            source=source,
        ).inc()
    except Exception as e:
        logger.warning(f"Failed to record unresolved entity metric: {e}")


def record_prediction(mode: str) -> None:
    try:
        matchlab_predictions_total.labels(mode=mode).inc()
    except Exception as e:
        logger.warning(f"Failed to record prediction metric: {e}")


def record_scoring_anomaly(reason: str) -> None:
    """Record a neutral-fallback substitution."""
    try:
        matchlab_scoring_anomalies_total.labels(reason=reason).inc()
    except Exception as e:
        logger.warning(f"Failed to record scoring anomaly metric: {e}")


def record_backtest_skip(reason: str) -> None:
    try:
        matchlab_backtest_skipped_total.labels(reason=reason).inc()
    except Exception as e:
        logger.warning(f"Failed to record backtest skip metric: {e}")


def get_metrics_text() -> tuple[str, str]:
    """
    Generate Prometheus metrics text output.

    Returns:
        Tuple of (content, content_type)
    """
    return generate_latest(REGISTRY).decode("utf-8"), CONTENT_TYPE_LATEST
