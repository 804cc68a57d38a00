"""
Client-side feed state.

FeedStore holds what a feed view needs between interactions: the active
filters, the fetched items, loading/error status and the current page.
Only the filters and the bookmarked items survive a restart; loading
flags, error text and the unbookmarked remainder of the feed are
rebuilt on the next fetch.
"""

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from social_feed.ingestion.schemas import FeedFilters, FeedItem

if TYPE_CHECKING:
    from social_feed.feed.service import FeedService

logger = logging.getLogger(__name__)

STORAGE_KEY = "feed-storage"
ITEMS_PER_PAGE = 10
LOAD_ERROR_MESSAGE = "Failed to load feed items. Please try again."


class PersistedFeedState(BaseModel):
    """The subset of FeedStore written to storage."""

    items: list[FeedItem] = Field(default_factory=list)
    filters: FeedFilters = Field(default_factory=FeedFilters)


class StatePersistence:
    """
    JSON file of keyed entries, one entry per store.

    Layout: {"feed-storage": {"state": {...}, "version": 0}}
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            return json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self._path}: {e}")
            return {}

    def load(self, key: str) -> dict[str, Any] | None:
        entry = self._read_all().get(key)
        if not isinstance(entry, dict):
            return None
        return entry.get("state")

    def save(self, key: str, state: dict[str, Any]) -> None:
        data = self._read_all()
        data[key] = {"state": state, "version": 0}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class FeedStore:
    """
    Feed view state with bookmark-only persistence.

    Usage:
        store = FeedStore.restore(StatePersistence(".social_feed_state.json"))
        store.set_filters(query="python")
        await store.load(service)
        for item in store.page_items(1):
            ...
        store.persist()
    """

    def __init__(
        self,
        filters: FeedFilters | None = None,
        items: list[FeedItem] | None = None,
        persistence: StatePersistence | None = None,
    ):
        self.filters = filters or FeedFilters()
        self.items: list[FeedItem] = list(items or [])
        self.is_loading = False
        self.error: str | None = None
        self.last_updated: str | None = None
        self.current_page = 1
        self._persistence = persistence

    @classmethod
    def restore(cls, persistence: StatePersistence) -> "FeedStore":
        """Create a store from persisted state, or a fresh one."""
        raw = persistence.load(STORAGE_KEY)
        if raw is None:
            return cls(persistence=persistence)

        try:
            state = PersistedFeedState.model_validate(raw)
        except ValueError as e:
            logger.warning(f"Discarding invalid persisted feed state: {e}")
            return cls(persistence=persistence)

        return cls(filters=state.filters, items=state.items, persistence=persistence)

    # Mutations

    def set_filters(self, **changes: Any) -> None:
        """
        Merge filter changes.

        Items fetched for the previous filters are cleared except bookmarked
        ones, which are kept until the next fetch so their flags carry over.
        """
        merged = self.filters.model_dump()
        merged.update(changes)
        self.filters = FeedFilters.model_validate(merged)
        self.items = [item for item in self.items if item.is_bookmarked]
        self.current_page = 1

    def set_items(self, items: list[FeedItem]) -> None:
        """Replace items, carrying over bookmark flags for known ids."""
        bookmarked = self.bookmarked_ids
        self.items = [
            item.model_copy(update={"is_bookmarked": True})
            if item.id in bookmarked and not item.is_bookmarked
            else item
            for item in items
        ]
        self.last_updated = datetime.now(timezone.utc).isoformat()
        self.current_page = 1

    def set_loading(self, is_loading: bool) -> None:
        self.is_loading = is_loading

    def set_error(self, error: str | None) -> None:
        self.error = error

    def toggle_bookmark(self, item_id: str) -> None:
        """Flip the local bookmark flag of one item."""
        self.items = [
            item.model_copy(update={"is_bookmarked": not item.is_bookmarked})
            if item.id == item_id
            else item
            for item in self.items
        ]

    def clear_items(self) -> None:
        self.items = []
        self.last_updated = None
        self.current_page = 1

    # Service interaction

    async def load(self, service: "FeedService") -> None:
        """
        Fetch the feed for the current filters.

        On failure the items are cleared and a retryable error message is
        set; partial upstream failures never reach here because the
        service absorbs them.
        """
        self.set_loading(True)
        self.set_error(None)
        try:
            items = await service.fetch_feed(self.filters)
        except Exception as e:
            logger.error(f"Error fetching feed: {e}")
            self.items = []
            self.set_error(LOAD_ERROR_MESSAGE)
        else:
            self.set_items(items)
        finally:
            self.set_loading(False)

    async def bookmark(self, service: "FeedService", item_id: str) -> bool:
        """
        Toggle a bookmark through the service.

        The local flag only changes once the service confirms the change.
        """
        item = self.get_item(item_id)
        currently_bookmarked = item.is_bookmarked if item else False
        if not await service.toggle_bookmark(item_id, currently_bookmarked):
            return False
        self.toggle_bookmark(item_id)
        return True

    # Queries

    def get_item(self, item_id: str) -> FeedItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    @property
    def bookmarked_ids(self) -> set[str]:
        return {item.id for item in self.items if item.is_bookmarked}

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self.items) / ITEMS_PER_PAGE)

    def page_items(self, page: int | None = None) -> list[FeedItem]:
        """Items on a 1-based page. Out-of-range pages are empty."""
        if page is None:
            page = self.current_page
        if page < 1:
            return []
        start = (page - 1) * ITEMS_PER_PAGE
        return self.items[start : start + ITEMS_PER_PAGE]

    def set_page(self, page: int) -> None:
        self.current_page = max(1, min(page, max(self.total_pages, 1)))

    # Persistence

    def persisted_state(self) -> PersistedFeedState:
        """Filters plus the bookmarked items only."""
        return PersistedFeedState(
            items=[item for item in self.items if item.is_bookmarked],
            filters=self.filters,
        )

    def persist(self) -> None:
        if self._persistence is None:
            return
        self._persistence.save(
            STORAGE_KEY,
            self.persisted_state().model_dump(mode="json"),
        )
