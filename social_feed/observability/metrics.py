"""
Prometheus instrumentation for the feed pipeline.

Tracks:
- Items fetched per source
- Source adapter errors
- Adapter cache hits and misses
- Upstream fetch and aggregation latency

Scraped from a standalone HTTP endpoint started by `social-feed serve`.
"""

import logging

from prometheus_client import REGISTRY, Counter, Histogram, start_http_server

from social_feed.config.settings import get_settings
from social_feed.ingestion.schemas import Platform

logger = logging.getLogger(__name__)

# Seconds
FETCH_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0)


def _label(platform: Platform | str) -> str:
    return platform.value if isinstance(platform, Platform) else str(platform)


class MetricsCollector:
    """
    Prometheus metrics collector for the social-feed pipeline.

    Usage:
        metrics = get_metrics()
        metrics.start_server()

        metrics.record_fetch("mastodon", count=40, latency=0.42)
        metrics.record_cache("jsonplaceholder", hit=True)
    """

    def __init__(self):
        self.items_fetched = Counter(
            "social_feed_items_fetched_total",
            "Total number of normalized items fetched from upstream sources",
            ["platform"],
        )

        self.items_skipped = Counter(
            "social_feed_items_skipped_total",
            "Upstream records that could not be normalized",
            ["platform"],
        )

        self.adapter_errors = Counter(
            "social_feed_adapter_errors_total",
            "Total source adapter errors",
            ["platform", "error_type"],
        )

        self.cache_requests = Counter(
            "social_feed_adapter_cache_requests_total",
            "Adapter cache lookups for unfiltered requests",
            ["platform", "result"],  # result: hit, miss
        )

        self.fetch_latency = Histogram(
            "social_feed_fetch_latency_seconds",
            "Time to fetch and normalize items from an upstream source",
            ["platform"],
            buckets=FETCH_BUCKETS,
        )

        self.aggregation_latency = Histogram(
            "social_feed_aggregation_latency_seconds",
            "Time to aggregate all selected sources into one feed",
            buckets=FETCH_BUCKETS,
        )

        logger.debug("Feed metrics registered")

    def start_server(self, port: int | None = None) -> None:
        """Serve /metrics on its own port (METRICS_PORT unless given)."""
        port = port or get_settings().metrics_port
        start_http_server(port, registry=REGISTRY)
        logger.info(f"Serving metrics on :{port}/metrics")

    def record_fetch(
        self,
        platform: Platform | str,
        count: int,
        latency: float | None = None,
    ) -> None:
        """Record a successful upstream fetch."""
        self.items_fetched.labels(platform=_label(platform)).inc(count)
        if latency is not None:
            self.fetch_latency.labels(platform=_label(platform)).observe(latency)

    def record_skipped(self, platform: Platform | str, count: int = 1) -> None:
        """Record upstream records dropped during normalization."""
        self.items_skipped.labels(platform=_label(platform)).inc(count)

    def record_error(self, platform: Platform | str, error_type: str) -> None:
        """Record a source adapter error."""
        self.adapter_errors.labels(
            platform=_label(platform),
            error_type=error_type,
        ).inc()

    def record_cache(self, platform: Platform | str, hit: bool) -> None:
        """Record an adapter cache lookup."""
        self.cache_requests.labels(
            platform=_label(platform),
            result="hit" if hit else "miss",
        ).inc()

    def record_aggregation(self, latency: float) -> None:
        """Record end-to-end aggregation latency."""
        self.aggregation_latency.observe(latency)


_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Process-wide collector; prometheus_client rejects duplicate metric names."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
