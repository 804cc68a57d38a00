"""Feed orchestration service: the entry point used by the API, CLI and client store."""

import structlog

from social_feed.feed.aggregator import FeedAggregator
from social_feed.feed.bookmarks import BookmarkStore, BookmarkStoreError
from social_feed.ingestion.schemas import FeedFilters, FeedItem, Platform

logger = structlog.get_logger(__name__)


class FeedService:
    """
    Translate filter requests into an aggregated feed and manage bookmarks.

    Upstream failures are absorbed by the adapters and the aggregator.
    Anything that still escapes aggregation is a system error and is
    re-raised to the caller.
    """

    def __init__(self, aggregator: FeedAggregator, bookmarks: BookmarkStore):
        self._aggregator = aggregator
        self._bookmarks = bookmarks

    @property
    def bookmarks(self) -> BookmarkStore:
        return self._bookmarks

    async def fetch_feed(self, filters: FeedFilters) -> list[FeedItem]:
        """Aggregate the feed for the given filters."""
        logger.info(
            "Fetching feed",
            platforms=[p.value for p in filters.resolved_platforms()],
            query=filters.query,
            start_date=str(filters.start_date) if filters.start_date else None,
            end_date=str(filters.end_date) if filters.end_date else None,
        )
        try:
            return await self._aggregator.aggregate(filters)
        except Exception as e:
            logger.error("Error fetching feed", error=str(e), exc_info=True)
            raise

    async def toggle_bookmark(self, item_id: str, currently_bookmarked: bool) -> bool:
        """
        Flip the bookmark state of an item.

        Removes the bookmark when currently_bookmarked is true, adds it
        otherwise. Both directions are idempotent.

        Returns:
            True when the change was persisted. On False the caller must not
            apply its local toggle.
        """
        try:
            if currently_bookmarked:
                await self._bookmarks.remove(item_id)
            else:
                await self._bookmarks.add(item_id)
        except BookmarkStoreError as e:
            logger.error("Error updating bookmark", item_id=item_id, error=str(e))
            return False

        logger.info("Bookmark updated", item_id=item_id, bookmarked=not currently_bookmarked)
        return True

    async def refresh_platform_data(self, platform: Platform) -> None:
        """
        Refresh upstream data for a platform.

        Intentionally a no-op: neither source offers a push or refresh
        mechanism, and adapter caches expire on their own TTL. Completes
        successfully and leaves every cache untouched.
        """
        logger.debug("Refresh requested", platform=platform.value)
