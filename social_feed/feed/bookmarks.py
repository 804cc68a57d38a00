"""
Bookmark set storage.

The orchestration service depends only on the BookmarkStore interface so
that a durable backend can replace the process-local set. Two
implementations ship:
- InMemoryBookmarkStore: the server-side set behind the bookmark endpoints
- HTTPBookmarkStore: a client of those endpoints
"""

import logging
from abc import ABC, abstractmethod
from urllib.parse import quote

import httpx

from social_feed.ingestion.http_client import HTTPClient, HTTPClientError, RetryConfig

logger = logging.getLogger(__name__)


class BookmarkStoreError(Exception):
    """Raised when a bookmark change cannot be persisted."""

    def __init__(self, message: str, item_id: str | None = None):
        super().__init__(message)
        self.item_id = item_id


class BookmarkStore(ABC):
    """Set of bookmarked item ids. add/remove are idempotent."""

    @abstractmethod
    async def add(self, item_id: str) -> None:
        ...

    @abstractmethod
    async def remove(self, item_id: str) -> None:
        ...

    @abstractmethod
    async def contains(self, item_id: str) -> bool:
        ...


class InMemoryBookmarkStore(BookmarkStore):
    """Process-local bookmark set. Lost on restart."""

    def __init__(self, item_ids: set[str] | None = None):
        self._item_ids: set[str] = set(item_ids or ())

    async def add(self, item_id: str) -> None:
        self._item_ids.add(item_id)

    async def remove(self, item_id: str) -> None:
        self._item_ids.discard(item_id)

    async def contains(self, item_id: str) -> bool:
        return item_id in self._item_ids

    def snapshot(self) -> frozenset[str]:
        return frozenset(self._item_ids)

    def __len__(self) -> int:
        return len(self._item_ids)


class HTTPBookmarkStore(BookmarkStore):
    """
    Bookmark store backed by the feed API's bookmark endpoints.

    POST /bookmarks/{id} adds, DELETE /bookmarks/{id} removes and
    GET /bookmarks/{id} reports membership. Transport failures and error
    statuses surface as BookmarkStoreError.
    """

    def __init__(
        self,
        base_url: str,
        retry_config: RetryConfig | None = None,
        timeout: float = 10.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._retry_config = retry_config or RetryConfig(max_retries=1)
        self._timeout = timeout

    def _url(self, item_id: str) -> str:
        return f"{self._base_url}/bookmarks/{quote(item_id, safe='')}"

    async def add(self, item_id: str) -> None:
        await self._send("POST", item_id)

    async def remove(self, item_id: str) -> None:
        await self._send("DELETE", item_id)

    async def contains(self, item_id: str) -> bool:
        response = await self._send("GET", item_id)
        return bool(response.json().get("bookmarked", False))

    async def _send(self, method: str, item_id: str) -> httpx.Response:
        url = self._url(item_id)
        try:
            async with HTTPClient(self._retry_config, timeout=self._timeout) as client:
                if method == "POST":
                    return await client.post(url)
                if method == "DELETE":
                    return await client.delete(url)
                return await client.get(url)
        except (HTTPClientError, httpx.HTTPError) as e:
            logger.error(f"Bookmark {method} failed for {item_id}: {e}")
            raise BookmarkStoreError(
                f"Failed to update bookmark {item_id}: {e}",
                item_id=item_id,
            ) from e
