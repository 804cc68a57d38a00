"""Tests for bookmark stores."""

import httpx
import pytest
import respx

from social_feed.feed.bookmarks import (
    BookmarkStoreError,
    HTTPBookmarkStore,
    InMemoryBookmarkStore,
)
from social_feed.ingestion.http_client import RetryConfig

API_URL = "http://feed-api.test"


class TestInMemoryBookmarkStore:
    @pytest.mark.asyncio
    async def test_add_remove_contains(self):
        store = InMemoryBookmarkStore()

        await store.add("mastodon_1")
        await store.add("mastodon_1")
        assert await store.contains("mastodon_1")
        assert len(store) == 1

        await store.remove("mastodon_1")
        await store.remove("mastodon_1")
        assert not await store.contains("mastodon_1")

    def test_initial_ids(self):
        store = InMemoryBookmarkStore({"a", "b"})

        assert store.snapshot() == frozenset({"a", "b"})


class TestHTTPBookmarkStore:
    def _store(self) -> HTTPBookmarkStore:
        return HTTPBookmarkStore(f"{API_URL}/", retry_config=RetryConfig(max_retries=0))

    @pytest.mark.asyncio
    @respx.mock
    async def test_add_posts_to_endpoint(self):
        route = respx.post(f"{API_URL}/bookmarks/mastodon_1").mock(
            return_value=httpx.Response(200, json={"success": True, "id": "mastodon_1"})
        )

        await self._store().add("mastodon_1")

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_remove_deletes(self):
        route = respx.delete(f"{API_URL}/bookmarks/mastodon_1").mock(
            return_value=httpx.Response(200, json={"success": True, "id": "mastodon_1"})
        )

        await self._store().remove("mastodon_1")

        assert route.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_contains_reads_status(self):
        respx.get(f"{API_URL}/bookmarks/jsonplaceholder_4").mock(
            return_value=httpx.Response(200, json={"id": "jsonplaceholder_4", "bookmarked": True})
        )

        assert await self._store().contains("jsonplaceholder_4") is True

    @pytest.mark.asyncio
    @respx.mock
    async def test_error_status_raises_store_error(self):
        respx.post(f"{API_URL}/bookmarks/mastodon_1").mock(
            return_value=httpx.Response(500, json={"detail": "Failed to bookmark item"})
        )

        with pytest.raises(BookmarkStoreError) as exc_info:
            await self._store().add("mastodon_1")

        assert exc_info.value.item_id == "mastodon_1"

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_raises_store_error(self):
        respx.delete(f"{API_URL}/bookmarks/mastodon_1").mock(
            side_effect=httpx.ConnectError("refused")
        )

        with pytest.raises(BookmarkStoreError):
            await self._store().remove("mastodon_1")
