"""
JSONPlaceholder adapter.

JSONPlaceholder (https://jsonplaceholder.typicode.com) serves static fake
posts, users and comments. It carries no timestamps, media or engagement
counts, so the adapter synthesizes them deterministically from the post id
and its position in the listing:
- created_at: 0-36 days before now
- content: post body plus two topic hashtags
- media: one picsum.photos image
- likes/shares: seeded pseudo-random counts
- comments: real count of comments on the post
"""

import asyncio
import logging
import random
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from social_feed.config.settings import get_settings
from social_feed.ingestion.base_adapter import BaseAdapter
from social_feed.ingestion.http_client import HTTPClient, RetryConfig
from social_feed.ingestion.schemas import (
    Author,
    FeedItem,
    MediaItem,
    MediaKind,
    Platform,
)

logger = logging.getLogger(__name__)

TOPICS = [
    "AI and Machine Learning",
    "Web Development",
    "Mobile Apps",
    "Cloud Computing",
    "Cybersecurity",
]

HASHTAGS = ["#" + "".join(topic.split()) for topic in TOPICS]

AVATAR_URL = "https://avatars.dicebear.com/api/human/{username}.svg"
IMAGE_URL = "https://picsum.photos/id/{image_id}/{width}/{height}"


class JSONPlaceholderAdapter(BaseAdapter):
    """
    Adapter for the JSONPlaceholder fake REST API.

    Every fetch pulls /posts, /users and /comments concurrently; all three
    are required to build an item, so any failing endpoint fails the fetch.
    The API has no search, so query and date filters are applied locally.
    """

    def __init__(
        self,
        base_url: str | None = None,
        cache_ttl_seconds: float | None = None,
        retry_config: RetryConfig | None = None,
        timeout: float | None = None,
        now: Callable[[], datetime] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize JSONPlaceholder adapter.

        Args:
            base_url: API root (or from settings)
            cache_ttl_seconds: Cache lifetime (default 5 minutes)
            retry_config: HTTP retry behavior
            timeout: HTTP timeout in seconds
            now: Wall clock used to derive synthetic post dates
            clock: Monotonic clock used for cache expiry
        """
        settings = get_settings()
        super().__init__(
            cache_ttl_seconds=(
                cache_ttl_seconds
                if cache_ttl_seconds is not None
                else settings.jsonplaceholder_cache_ttl_seconds
            ),
            clock=clock,
        )
        self._base_url = (base_url or settings.jsonplaceholder_base_url).rstrip("/")
        self._retry_config = retry_config or RetryConfig(
            max_retries=settings.max_http_retries,
            max_backoff_seconds=settings.max_backoff_seconds,
        )
        self._timeout = timeout or settings.http_timeout_seconds
        self._now = now or (lambda: datetime.now(timezone.utc))

    @property
    def platform(self) -> Platform:
        return Platform.JSONPLACEHOLDER

    async def _fetch_raw(self, query: str | None) -> list[dict[str, Any]]:
        """
        Fetch posts, users and comments and join them per post.

        The query is not sent upstream; the API has no search.
        """
        async with HTTPClient(self._retry_config, timeout=self._timeout) as client:
            posts_res, users_res, comments_res = await asyncio.gather(
                client.get(f"{self._base_url}/posts"),
                client.get(f"{self._base_url}/users"),
                client.get(f"{self._base_url}/comments"),
            )

        posts = posts_res.json()
        users = {user["id"]: user for user in users_res.json()}

        comment_counts: dict[Any, int] = {}
        for comment in comments_res.json():
            post_id = comment.get("postId")
            comment_counts[post_id] = comment_counts.get(post_id, 0) + 1

        logger.debug(
            f"JSONPlaceholder returned {len(posts)} posts, "
            f"{len(users)} users, {sum(comment_counts.values())} comments"
        )

        return [
            {
                "post": post,
                "user": users.get(post.get("userId")),
                "comment_count": comment_counts.get(post.get("id"), 0),
                "index": index,
            }
            for index, post in enumerate(posts)
        ]

    def _transform(self, raw: dict[str, Any]) -> FeedItem | None:
        """Transform a joined post/user record to FeedItem."""
        post = raw["post"]
        user = raw["user"]
        index = raw["index"]

        if user is None:
            logger.debug(f"Skipping post {post.get('id')} without a matching user")
            return None

        post_id = int(post["id"])
        seed = post_id + index
        rng = random.Random(seed)

        days_ago = (seed % 30) + (index % 7)
        created_at = self._now() - timedelta(days=days_ago)

        return FeedItem(
            id=f"jsonplaceholder_{post_id}",
            platform=Platform.JSONPLACEHOLDER,
            content=self._build_content(post.get("body", ""), rng),
            author=Author(
                id=str(user["id"]),
                name=user.get("name", ""),
                username=user.get("username", ""),
                profile_image_url=AVATAR_URL.format(username=user.get("username", "")),
                platform=Platform.JSONPLACEHOLDER,
            ),
            created_at=created_at,
            media=self._build_media(seed),
            likes=rng.randrange(1000) + seed * 10,
            shares=rng.randrange(100) + seed * 5,
            comments=raw["comment_count"],
            url=f"{self._base_url}/posts/{post_id}",
        )

    @staticmethod
    def _build_content(body: str, rng: random.Random) -> str:
        """Post body followed by two topic hashtags."""
        hashtags = " ".join(rng.sample(HASHTAGS, 2))
        return f"{body}\n\n{hashtags}"

    @staticmethod
    def _build_media(seed: int) -> list[MediaItem]:
        # ids 1-30 keep images stable across fetches
        image_id = (seed % 30) + 1
        return [
            MediaItem(
                url=IMAGE_URL.format(image_id=image_id, width=800, height=600),
                kind=MediaKind.IMAGE,
                thumbnail_url=IMAGE_URL.format(image_id=image_id, width=400, height=300),
            )
        ]
