"""Observability layer - logging and metrics."""

from creator_iq.observability.logging import setup_logging
from creator_iq.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
