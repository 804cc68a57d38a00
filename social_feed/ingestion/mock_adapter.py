"""
Mock adapter for testing and development.

Generates synthetic social posts that mimic real source data.
Useful for:
- Running the API and CLI without network access or credentials
- Testing the aggregation pipeline
"""

import random
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from social_feed.ingestion.base_adapter import BaseAdapter
from social_feed.ingestion.schemas import (
    Author,
    FeedItem,
    MediaItem,
    MediaKind,
    Platform,
)

POST_TEMPLATES = [
    "Just shipped a new release of {project}. Feedback welcome!",
    "Reading up on {topic} this weekend. Any recommendations?",
    "Hot take: {topic} is underrated.",
    "Our team wrote about migrating {project} to async. Thread below.",
    "Conference talk on {topic} is now online.",
    "Looking for contributors to {project}, good first issues tagged.",
]

TOPICS = ["AI", "open source", "Python", "distributed systems", "accessibility"]
PROJECTS = ["feedparser", "httpx", "the design system", "our CLI", "the docs site"]

SAMPLE_AUTHORS = [
    ("1", "Ada Lovelace", "ada"),
    ("2", "Grace Hopper", "grace"),
    ("3", "Linus Baker", "lbaker"),
    ("4", "Margaret Hamilton", "mhamilton"),
    ("5", "Alan Kay", "alankay"),
]


class MockAdapter(BaseAdapter):
    """
    Mock adapter that generates synthetic feed items.

    Output is deterministic for a given seed so repeated fetches produce the
    same ids and timestamps, which keeps deduplication and caching meaningful.
    """

    def __init__(
        self,
        platform: Platform = Platform.JSONPLACEHOLDER,
        items_per_fetch: int = 20,
        seed: int = 0,
        cache_ttl_seconds: float = 60.0,
        now: Callable[[], datetime] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize mock adapter.

        Args:
            platform: Which platform to mimic
            items_per_fetch: Number of items to generate per fetch
            seed: Random seed for reproducible output
            cache_ttl_seconds: Cache lifetime
            now: Wall clock used to derive post dates
        """
        super().__init__(cache_ttl_seconds=cache_ttl_seconds, clock=clock)
        self._platform = platform
        self._items_per_fetch = items_per_fetch
        self._seed = seed
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.fetch_count = 0

    @property
    def platform(self) -> Platform:
        return self._platform

    async def _fetch_raw(self, query: str | None) -> list[dict[str, Any]]:
        """Generate mock raw records."""
        self.fetch_count += 1
        rng = random.Random(self._seed)
        now = self._now()

        records = []
        for i in range(self._items_per_fetch):
            author_id, name, username = rng.choice(SAMPLE_AUTHORS)
            content = rng.choice(POST_TEMPLATES).format(
                topic=rng.choice(TOPICS),
                project=rng.choice(PROJECTS),
            )
            records.append(
                {
                    "id": str(i + 1),
                    "author_id": author_id,
                    "name": name,
                    "username": username,
                    "content": content,
                    "created_at": now - timedelta(hours=rng.randint(0, 24 * 30)),
                    "likes": rng.randint(0, 500),
                    "shares": rng.randint(0, 80),
                    "comments": rng.randint(0, 40),
                    "has_media": rng.random() < 0.3,
                }
            )
        return records

    def _transform(self, raw: dict[str, Any]) -> FeedItem | None:
        """Transform mock data to FeedItem."""
        platform = self._platform.value
        media = []
        if raw["has_media"]:
            media.append(
                MediaItem(
                    url=f"https://picsum.photos/seed/{platform}{raw['id']}/800/600",
                    kind=MediaKind.IMAGE,
                )
            )

        return FeedItem(
            id=f"{platform}_mock{raw['id']}",
            platform=self._platform,
            content=raw["content"],
            author=Author(
                id=raw["author_id"],
                name=raw["name"],
                username=raw["username"],
                platform=self._platform,
            ),
            created_at=raw["created_at"],
            media=media,
            likes=raw["likes"],
            shares=raw["shares"],
            comments=raw["comments"],
            url=f"https://example.com/{platform}/{raw['id']}",
        )


def create_mock_adapters(items_per_fetch: int = 20) -> dict[Platform, MockAdapter]:
    """
    Create mock adapters for all platforms.

    Args:
        items_per_fetch: Items per fetch for each adapter

    Returns:
        Dict mapping platform to adapter
    """
    return {
        platform: MockAdapter(
            platform=platform,
            items_per_fetch=items_per_fetch,
            seed=index,
        )
        for index, platform in enumerate(Platform)
    }
