"""Tests for the shared adapter pipeline: caching, normalization and fallback."""

from datetime import datetime, timezone
from typing import Any

import pytest

from social_feed.ingestion.base_adapter import (
    BaseAdapter,
    clean_text,
    stable_hash,
    strip_html,
)
from social_feed.ingestion.mock_adapter import MockAdapter
from social_feed.ingestion.schemas import Author, FeedItem, Platform


class StubAdapter(BaseAdapter):
    """Adapter serving a configurable list of raw records."""

    def __init__(self, records: list[dict[str, Any]], **kwargs):
        super().__init__(cache_ttl_seconds=kwargs.pop("cache_ttl_seconds", 300.0), **kwargs)
        self.records = records
        self.error: Exception | None = None
        self.calls = 0

    @property
    def platform(self) -> Platform:
        return Platform.JSONPLACEHOLDER

    async def _fetch_raw(self, query):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.records)

    def _transform(self, raw):
        if raw.get("broken"):
            raise KeyError("author")
        if raw.get("skip"):
            return None
        return FeedItem(
            id=f"jsonplaceholder_{raw['id']}",
            platform=Platform.JSONPLACEHOLDER,
            content=raw.get("content", ""),
            author=Author(
                id="1",
                name="Leanne Graham",
                username="Bret",
                platform=Platform.JSONPLACEHOLDER,
            ),
            created_at=raw["created_at"],
            url=f"https://example.com/{raw['id']}",
        )


def _record(native_id: str, day: int, content: str = "post", **extra) -> dict[str, Any]:
    return {
        "id": native_id,
        "created_at": datetime(2024, 1, day, 12, 0, tzinfo=timezone.utc),
        "content": content,
        **extra,
    }


class TestCaching:
    @pytest.mark.asyncio
    async def test_fresh_cache_served_without_refetch(self, clock):
        adapter = MockAdapter(cache_ttl_seconds=300, clock=clock)

        first = await adapter.fetch_posts()
        clock.advance(240)
        second = await adapter.fetch_posts()

        assert adapter.fetch_count == 1
        assert second is first

    @pytest.mark.asyncio
    async def test_expired_cache_refetches(self, clock):
        adapter = MockAdapter(cache_ttl_seconds=300, clock=clock)

        await adapter.fetch_posts()
        clock.advance(360)
        await adapter.fetch_posts()

        assert adapter.fetch_count == 2

    @pytest.mark.asyncio
    async def test_filtered_requests_bypass_cache(self, clock):
        adapter = MockAdapter(cache_ttl_seconds=300, clock=clock)

        await adapter.fetch_posts()
        cached = adapter.cache.items
        await adapter.fetch_posts(query="python")

        assert adapter.fetch_count == 2
        assert adapter.cache.items is cached

    @pytest.mark.asyncio
    async def test_invalidate_cache(self, clock):
        adapter = MockAdapter(cache_ttl_seconds=300, clock=clock)

        await adapter.fetch_posts()
        adapter.invalidate_cache()
        await adapter.fetch_posts()

        assert adapter.fetch_count == 2


class TestNormalization:
    @pytest.mark.asyncio
    async def test_sorted_newest_first(self):
        adapter = StubAdapter([_record("1", 3), _record("2", 9), _record("3", 5)])

        items = await adapter.fetch_posts()

        assert [i.id for i in items] == [
            "jsonplaceholder_2",
            "jsonplaceholder_3",
            "jsonplaceholder_1",
        ]

    @pytest.mark.asyncio
    async def test_duplicate_ids_last_seen_wins(self):
        adapter = StubAdapter(
            [
                _record("1", 10, content="first"),
                _record("2", 10, content="other"),
                _record("1", 10, content="second"),
            ]
        )

        items = await adapter.fetch_posts()

        assert [i.id for i in items] == ["jsonplaceholder_1", "jsonplaceholder_2"]
        assert items[0].content == "second"

    @pytest.mark.asyncio
    async def test_bad_records_skipped(self):
        adapter = StubAdapter(
            [_record("1", 3), _record("2", 4, broken=True), _record("3", 5, skip=True)]
        )

        items = await adapter.fetch_posts()

        assert [i.id for i in items] == ["jsonplaceholder_1"]
        assert adapter.stats.items_fetched == 1
        assert adapter.stats.items_skipped == 2

    @pytest.mark.asyncio
    async def test_query_and_dates_applied(self):
        adapter = StubAdapter(
            [
                _record("1", 3, content="AI news"),
                _record("2", 10, content="ai again"),
                _record("3", 10, content="gardening"),
            ]
        )

        items = await adapter.fetch_posts(query="ai", start_date="2024-01-05")

        assert [i.id for i in items] == ["jsonplaceholder_2"]
        assert adapter.cache is None


class TestFailureAbsorption:
    @pytest.mark.asyncio
    async def test_failure_without_cache_returns_empty(self):
        adapter = StubAdapter([_record("1", 3)])
        adapter.error = RuntimeError("upstream down")

        assert await adapter.fetch_posts() == []
        assert adapter.stats.errors == 1

    @pytest.mark.asyncio
    async def test_failure_serves_stale_cache(self, clock):
        adapter = StubAdapter(
            [_record("1", 3, content="ai"), _record("2", 4, content="cats")],
            clock=clock,
        )
        cached = await adapter.fetch_posts()

        clock.advance(3600)
        adapter.error = RuntimeError("upstream down")

        assert await adapter.fetch_posts() == cached

    @pytest.mark.asyncio
    async def test_stale_fallback_applies_filters(self, clock):
        adapter = StubAdapter(
            [_record("1", 3, content="ai"), _record("2", 4, content="cats")],
            clock=clock,
        )
        await adapter.fetch_posts()
        adapter.error = RuntimeError("upstream down")

        items = await adapter.fetch_posts(query="cats")

        assert [i.id for i in items] == ["jsonplaceholder_2"]


class TestHelpers:
    def test_strip_html(self):
        markup = "<p>Hello <b>world</b> &amp; friends</p><script>alert(1)</script>"

        assert strip_html(markup) == "Hello world & friends"

    def test_strip_html_empty(self):
        assert strip_html("") == ""

    def test_clean_text(self):
        assert clean_text("  a \n\n b\x00c ") == "a bc"

    def test_stable_hash_deterministic(self):
        assert stable_hash("abc") == stable_hash("abc")
        assert len(stable_hash("abc")) == 16
        assert stable_hash("abc") != stable_hash("abd")
