"""
Base adapter interface and shared functionality for source adapters.

Each source adapter implements _fetch_raw() and _transform(). The base
class provides the request pipeline shared by every source:
- Per-instance result cache with a time-to-live
- Normalization with per-record error isolation
- Deduplication, text/date filtering and newest-first ordering
- Absorption of upstream failures (stale cache or empty result)
- Logging and metrics
"""

import hashlib
import html
import logging
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from bs4 import BeautifulSoup

from social_feed.feed.filters import dedupe_by_id, filter_items, sort_newest_first
from social_feed.ingestion.schemas import FeedItem, Platform
from social_feed.observability.metrics import get_metrics

logger = logging.getLogger(__name__)

DateBound = str | date | datetime | None


@dataclass
class AdapterCache:
    """Last unfiltered result set of one adapter and when it was fetched."""

    items: list[FeedItem]
    fetched_at: float

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.fetched_at < ttl_seconds


@dataclass
class AdapterStats:
    """Statistics for an adapter run."""

    items_fetched: int = 0
    items_skipped: int = 0
    errors: int = 0
    # Endpoints that failed while others succeeded; a partial result is not cached
    partial_failures: int = 0
    start_time: float = field(default_factory=time.monotonic)

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self.start_time


class BaseAdapter(ABC):
    """
    Abstract base class for source adapters.

    Subclasses must implement:
        - platform: Platform enum value
        - _fetch_raw(): Contact upstream and return raw records
        - _transform(): Convert one raw record to FeedItem

    The base class handles caching, filtering, ordering and failure
    absorption. fetch_posts() never raises for upstream failures.
    """

    def __init__(
        self,
        cache_ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize adapter.

        Args:
            cache_ttl_seconds: How long an unfiltered result set stays valid
            clock: Monotonic clock used for cache expiry
        """
        self._cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock
        self._cache: AdapterCache | None = None
        self._stats = AdapterStats()

    @property
    @abstractmethod
    def platform(self) -> Platform:
        """Return the platform this adapter handles."""
        ...

    @property
    def name(self) -> str:
        """Human-readable adapter name."""
        return f"{self.platform.value}_adapter"

    @property
    def cache_ttl_seconds(self) -> float:
        return self._cache_ttl_seconds

    @property
    def cache(self) -> AdapterCache | None:
        return self._cache

    @property
    def stats(self) -> AdapterStats:
        """Get statistics of the last upstream fetch."""
        return self._stats

    def invalidate_cache(self) -> None:
        self._cache = None

    def is_configured(self) -> bool:
        """Whether the adapter has what it needs to reach its source."""
        return True

    @abstractmethod
    async def _fetch_raw(self, query: str | None) -> list[dict[str, Any]]:
        """
        Fetch raw records from the upstream source.

        Records must be returned in a deterministic order (endpoint order,
        then upstream order) so that last-seen-wins deduplication does not
        depend on which request completed first.

        Adapters that merge several endpoints and skip a failed one must
        record it in stats.partial_failures.

        Raises:
            Any exception on upstream failure. The caller absorbs it.
        """
        ...

    @abstractmethod
    def _transform(self, raw: dict[str, Any]) -> FeedItem | None:
        """
        Transform one raw record to FeedItem.

        Returns:
            FeedItem or None if the record should be skipped
        """
        ...

    async def fetch_posts(
        self,
        query: str | None = None,
        start_date: DateBound = None,
        end_date: DateBound = None,
    ) -> list[FeedItem]:
        """
        Fetch, normalize, filter and order items from this source.

        Unfiltered requests are served from the cache while it is fresh and
        refresh it otherwise. Requests carrying a query or a date bound always
        go upstream and never touch the cache.

        Returns:
            Items sorted newest first
        """
        metrics = get_metrics()
        unfiltered = not query and not start_date and not end_date

        if unfiltered:
            cache_hit = self._cache is not None and self._cache.is_fresh(
                self._clock(), self._cache_ttl_seconds
            )
            metrics.record_cache(self.platform, hit=cache_hit)
            if cache_hit:
                logger.debug(f"{self.name} serving {len(self._cache.items)} cached items")
                return self._cache.items

        self._stats = AdapterStats()
        logger.info(
            f"Starting fetch for {self.name}: query={query!r}, "
            f"start_date={start_date}, end_date={end_date}"
        )

        try:
            raw_records = await self._fetch_raw(query)
        except Exception as e:
            self._stats.errors += 1
            metrics.record_error(self.platform, type(e).__name__)
            logger.error(f"Error in {self.name} fetch: {e}", exc_info=True)
            return self._fallback(query, start_date, end_date)

        items = dedupe_by_id(self._normalize(raw_records))
        metrics.record_fetch(
            self.platform,
            count=len(items),
            latency=self._stats.elapsed_seconds,
        )

        if unfiltered:
            items = sort_newest_first(items)
            if self._stats.partial_failures:
                logger.warning(
                    f"{self.name} not caching partial result: "
                    f"{self._stats.partial_failures} endpoint(s) failed"
                )
                return items
            self._cache = AdapterCache(items=items, fetched_at=self._clock())
            logger.info(f"{self.name} cached {len(items)} items")
            return items

        filtered = sort_newest_first(filter_items(items, query, start_date, end_date))
        logger.info(
            f"{self.name} completed: "
            f"fetched={self._stats.items_fetched}, "
            f"skipped={self._stats.items_skipped}, "
            f"matched={len(filtered)}, "
            f"elapsed={self._stats.elapsed_seconds:.2f}s"
        )
        return filtered

    def _normalize(self, raw_records: list[dict[str, Any]]) -> list[FeedItem]:
        """Transform raw records, isolating failures to the offending record."""
        items: list[FeedItem] = []
        for raw in raw_records:
            try:
                item = self._transform(raw)
            except Exception as e:
                logger.warning(f"Error transforming record in {self.name}: {e}")
                item = None

            if item is None:
                self._stats.items_skipped += 1
                continue

            self._stats.items_fetched += 1
            items.append(item)

        if self._stats.items_skipped:
            get_metrics().record_skipped(self.platform, self._stats.items_skipped)
        return items

    def _fallback(
        self,
        query: str | None,
        start_date: DateBound,
        end_date: DateBound,
    ) -> list[FeedItem]:
        """Best available data after an upstream failure."""
        if self._cache is None:
            logger.warning(f"{self.name} has no cached data to fall back on")
            return []

        logger.warning(
            f"{self.name} falling back to {len(self._cache.items)} cached items"
        )
        if not query and not start_date and not end_date:
            return self._cache.items
        return sort_newest_first(
            filter_items(self._cache.items, query, start_date, end_date)
        )


# Common normalization utilities used across adapters

def strip_html(markup: str) -> str:
    """
    Extract clean text from rich-text HTML content.

    Args:
        markup: Raw HTML string

    Returns:
        Plain text with entities unescaped and whitespace collapsed
    """
    if not markup:
        return ""

    soup = BeautifulSoup(markup, "html.parser")

    for element in soup(["script", "style"]):
        element.decompose()

    text = soup.get_text(separator=" ")
    text = html.unescape(text)
    return clean_text(text)


def clean_text(text: str) -> str:
    """
    Clean text content by removing excessive whitespace and control characters.
    """
    text = " ".join(text.split())
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)
    return text.strip()


def stable_hash(value: str) -> str:
    """
    Generate a stable, deterministic hash from a string.

    Uses SHA256 truncated to 16 hex characters. Unlike Python's built-in
    hash(), this is deterministic across process restarts.
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:16]
