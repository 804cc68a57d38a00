"""Observability layer - logging and metrics."""

from social_feed.observability.logging import setup_logging
from social_feed.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
