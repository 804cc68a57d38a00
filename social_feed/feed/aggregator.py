"""
Aggregation engine.

Fans a filter request out to every selected source adapter concurrently,
then flattens and orders the results. One failing source never blanks the
whole feed: its contribution is simply empty.
"""

import asyncio
import time

import structlog

from social_feed.feed.filters import sort_newest_first
from social_feed.ingestion.base_adapter import BaseAdapter
from social_feed.ingestion.registry import AdapterRegistry
from social_feed.ingestion.schemas import FeedFilters, FeedItem
from social_feed.observability.metrics import get_metrics

logger = structlog.get_logger(__name__)


class FeedAggregator:
    """
    Merge the output of several source adapters into one feed.

    Items are not deduplicated across sources: ids are source-qualified, so
    equal ids from different sources cannot occur. No pagination happens
    here; callers slice the returned list.
    """

    def __init__(self, registry: AdapterRegistry):
        self._registry = registry

    @property
    def registry(self) -> AdapterRegistry:
        return self._registry

    async def aggregate(self, filters: FeedFilters) -> list[FeedItem]:
        """
        Fetch every selected source and return one feed, newest first.

        Ties on created_at keep source order (platform selection order,
        then per-source order).
        """
        start_time = time.perf_counter()
        adapters = self._registry.resolve(filters.resolved_platforms())

        results = await asyncio.gather(
            *(self._fetch_one(adapter, filters) for adapter in adapters)
        )

        combined = [item for items in results for item in items]
        feed = sort_newest_first(combined)

        latency = time.perf_counter() - start_time
        get_metrics().record_aggregation(latency)
        logger.info(
            "Feed aggregated",
            platforms=[adapter.platform.value for adapter in adapters],
            per_source={
                adapter.platform.value: len(items)
                for adapter, items in zip(adapters, results)
            },
            total=len(feed),
            latency_ms=round(latency * 1000, 2),
        )
        return feed

    async def _fetch_one(self, adapter: BaseAdapter, filters: FeedFilters) -> list[FeedItem]:
        """Fetch one source; any exception becomes an empty contribution."""
        try:
            return await adapter.fetch_posts(
                filters.query,
                filters.start_date,
                filters.end_date,
            )
        except Exception as e:
            get_metrics().record_error(adapter.platform, type(e).__name__)
            logger.error(
                "Source fetch failed",
                platform=adapter.platform.value,
                error=str(e),
                exc_info=True,
            )
            return []
