"""Tests for Prometheus metrics collection."""

import pytest
from prometheus_client import REGISTRY

from social_feed.ingestion.mock_adapter import MockAdapter
from social_feed.ingestion.schemas import Platform
from social_feed.observability.metrics import get_metrics


def _sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetricsCollector:
    def test_singleton(self):
        assert get_metrics() is get_metrics()

    def test_record_fetch_and_error(self):
        metrics = get_metrics()
        before = _sample("social_feed_items_fetched_total", platform="mastodon")
        errors_before = _sample(
            "social_feed_adapter_errors_total",
            platform="mastodon",
            error_type="HTTPClientError",
        )

        metrics.record_fetch(Platform.MASTODON, count=3, latency=0.2)
        metrics.record_error("mastodon", "HTTPClientError")

        assert _sample("social_feed_items_fetched_total", platform="mastodon") == before + 3
        assert (
            _sample(
                "social_feed_adapter_errors_total",
                platform="mastodon",
                error_type="HTTPClientError",
            )
            == errors_before + 1
        )

    @pytest.mark.asyncio
    async def test_adapter_records_cache_lookups(self):
        hits_before = _sample(
            "social_feed_adapter_cache_requests_total",
            platform="jsonplaceholder",
            result="hit",
        )
        misses_before = _sample(
            "social_feed_adapter_cache_requests_total",
            platform="jsonplaceholder",
            result="miss",
        )
        adapter = MockAdapter(platform=Platform.JSONPLACEHOLDER, items_per_fetch=2)

        await adapter.fetch_posts()
        await adapter.fetch_posts()

        assert _sample(
            "social_feed_adapter_cache_requests_total",
            platform="jsonplaceholder",
            result="hit",
        ) == hits_before + 1
        assert _sample(
            "social_feed_adapter_cache_requests_total",
            platform="jsonplaceholder",
            result="miss",
        ) == misses_before + 1
