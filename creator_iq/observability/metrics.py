"""
Prometheus metrics for the scoring pipeline.

Defines and exposes metrics for:
- Tier outcomes (success / skip / fail) and latency
- Score store hits, misses and errors
- Accounts refused for lack of content

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    Counter,
    Histogram,
    start_http_server,
)

from creator_iq.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the creator-iq pipeline.

    Usage:
        metrics = get_metrics()
        metrics.start_server()
        metrics.record_tier("provider_a", "fail", 0.8)
    """

    def __init__(self):
        """Initialize Prometheus metrics."""
        self.tier_outcomes = Counter(
            "creator_iq_tier_outcomes_total",
            "Scoring tier attempts by outcome",
            ["tier", "status"],  # status: success, skip, fail
        )

        self.tier_latency = Histogram(
            "creator_iq_tier_latency_seconds",
            "Time spent inside a scoring tier",
            ["tier"],
            buckets=LATENCY_BUCKETS,
        )

        self.store_requests = Counter(
            "creator_iq_store_requests_total",
            "Score store lookups",
            ["result"],  # hit, miss, stale
        )

        self.store_errors = Counter(
            "creator_iq_store_errors_total",
            "Score store failures",
            ["operation"],  # read, write, clear
        )

        self.no_content = Counter(
            "creator_iq_no_content_total",
            "Scoring requests refused because no posts were found",
        )

        self.scores_returned = Counter(
            "creator_iq_scores_returned_total",
            "Scores returned to callers",
            ["source"],
        )

        self._server_started = False

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to listen on (defaults to settings.metrics_port)
        """
        if self._server_started:
            return

        port = port or get_settings().metrics_port
        start_http_server(port)
        self._server_started = True
        logger.info(f"Metrics server started on port {port}")

    def record_tier(self, tier: str, status: str, latency: float) -> None:
        """Record one tier attempt."""
        self.tier_outcomes.labels(tier=tier, status=status).inc()
        self.tier_latency.labels(tier=tier).observe(latency)

    def record_store_lookup(self, result: str) -> None:
        """Record a store lookup result (hit, miss, stale)."""
        self.store_requests.labels(result=result).inc()

    def record_store_error(self, operation: str) -> None:
        """Record a store failure."""
        self.store_errors.labels(operation=operation).inc()

    def record_no_content(self) -> None:
        """Record a request refused for an empty post set."""
        self.no_content.inc()

    def record_score(self, source: str) -> None:
        """Record a score handed back to a caller."""
        self.scores_returned.labels(source=source).inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get or create global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
