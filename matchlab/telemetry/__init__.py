"""
Telemetry Module

Provides Prometheus metrics for:
- Provider requests (count, latency)
- Entity resolution misses
- Scoring engine fallbacks
- Backtest skips
"""

from matchlab.telemetry.metrics import (
    matchlab_provider_requests_total,
    matchlab_provider_latency_ms,
    matchlab_entity_unresolved_total,
    matchlab_predictions_total,
    matchlab_scoring_anomalies_total,
    matchlab_backtest_skipped_total,
    record_provider_request,
    record_entity_unresolved,
    record_prediction,
    record_scoring_anomaly,
    record_backtest_skip,
    get_metrics_text,
)
