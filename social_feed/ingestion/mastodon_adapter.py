"""
Mastodon API adapter.

Reads timelines from a single Mastodon instance using an access token.
Handles:
- Endpoint selection (home + public, or tag search + home when querying)
- Concurrent endpoint fetches with per-endpoint failure isolation
- HTML status content to plain text
- Engagement field mapping (favourites/reblogs/replies)

Mastodon paginates timelines by status id rather than by date, so date
bounds are never sent upstream; filtering happens locally.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any
from urllib.parse import quote

from social_feed.config.settings import get_settings
from social_feed.ingestion.base_adapter import BaseAdapter, stable_hash, strip_html
from social_feed.ingestion.http_client import HTTPClient, RetryConfig
from social_feed.ingestion.schemas import (
    Author,
    FeedItem,
    MediaItem,
    MediaKind,
    Platform,
)

logger = logging.getLogger(__name__)

HOME_TIMELINE = "/api/v1/timelines/home"
PUBLIC_TIMELINE = "/api/v1/timelines/public"
TAG_TIMELINE = "/api/v1/timelines/tag/{tag}"


class MastodonAdapter(BaseAdapter):
    """
    Mastodon timeline adapter.

    Without an access token the adapter is inert: fetch_posts() returns an
    empty list without any network I/O.

    Endpoint strategy:
        - no query: home + public timelines
        - query: tag timeline for the query + home timeline
    """

    def __init__(
        self,
        instance: str | None = None,
        access_token: str | None = None,
        cache_ttl_seconds: float | None = None,
        timeline_limit: int | None = None,
        retry_config: RetryConfig | None = None,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize Mastodon adapter.

        Args:
            instance: Instance host name, e.g. "mastodon.social" (or from settings)
            access_token: OAuth bearer token (or from settings)
            cache_ttl_seconds: Cache lifetime (default 2 minutes)
            timeline_limit: Statuses requested per endpoint (max 40)
            retry_config: HTTP retry behavior
            timeout: HTTP timeout in seconds
            clock: Monotonic clock used for cache expiry
        """
        settings = get_settings()
        super().__init__(
            cache_ttl_seconds=(
                cache_ttl_seconds
                if cache_ttl_seconds is not None
                else settings.mastodon_cache_ttl_seconds
            ),
            clock=clock,
        )
        self._instance = (instance or settings.mastodon_instance).strip("/")
        self._access_token = access_token or settings.mastodon_access_token
        self._timeline_limit = timeline_limit or settings.mastodon_timeline_limit
        self._retry_config = retry_config or RetryConfig(
            max_retries=settings.max_http_retries,
            max_backoff_seconds=settings.max_backoff_seconds,
        )
        self._timeout = timeout or settings.http_timeout_seconds

        logger.info(f"Mastodon adapter initialized with instance: {self._instance}")

    @property
    def platform(self) -> Platform:
        return Platform.MASTODON

    @property
    def base_url(self) -> str:
        if self._instance.startswith(("http://", "https://")):
            return self._instance
        return f"https://{self._instance}"

    def is_configured(self) -> bool:
        return bool(self._access_token)

    async def fetch_posts(
        self,
        query: str | None = None,
        start_date=None,
        end_date=None,
    ) -> list[FeedItem]:
        if not self._access_token:
            logger.warning("No Mastodon access token available, returning empty list")
            return []
        return await super().fetch_posts(query, start_date, end_date)

    def _endpoints(self, query: str | None) -> list[str]:
        if query:
            tag = "".join(query.strip().lstrip("#").split())
            return [TAG_TIMELINE.format(tag=quote(tag, safe="")), HOME_TIMELINE]
        return [HOME_TIMELINE, PUBLIC_TIMELINE]

    async def _fetch_raw(self, query: str | None) -> list[dict[str, Any]]:
        """
        Fetch all endpoints concurrently and merge them in endpoint order.

        A failing endpoint (transport error, error status or a body that is
        not JSON) is logged and skipped; the fetch only fails when every
        endpoint fails. Skipped endpoints are counted in stats so the
        partial result is not cached.
        """
        endpoints = self._endpoints(query)
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }
        params = {"limit": self._timeline_limit}

        async with HTTPClient(self._retry_config, timeout=self._timeout) as client:
            responses = await asyncio.gather(
                *(
                    client.get(f"{self.base_url}{endpoint}", params=params, headers=headers)
                    for endpoint in endpoints
                ),
                return_exceptions=True,
            )

        records: list[dict[str, Any]] = []
        failures: list[BaseException] = []
        for endpoint, response in zip(endpoints, responses):
            if isinstance(response, BaseException):
                failures.append(response)
                logger.error(f"Failed to fetch from {endpoint}: {response}")
                continue

            try:
                statuses = response.json()
            except ValueError as e:
                failures.append(e)
                logger.error(f"Invalid JSON from {endpoint}: {e}")
                continue

            logger.debug(f"Received {len(statuses)} statuses from {endpoint}")
            records.extend(statuses)

        if failures and len(failures) == len(endpoints):
            raise failures[0]
        self._stats.partial_failures = len(failures)

        return records

    def _transform(self, raw: dict[str, Any]) -> FeedItem | None:
        """Transform a Mastodon status to FeedItem."""
        account = raw.get("account") or {}
        username = account.get("username") or account.get("acct") or "unknown"
        created_at = raw.get("created_at")
        if not created_at:
            return None

        content = strip_html(raw.get("content") or "")
        native_id = raw.get("id") or stable_hash(
            f"{account.get('id', '')}:{created_at}:{content}"
        )

        return FeedItem(
            id=f"mastodon_{native_id}",
            platform=Platform.MASTODON,
            content=content,
            author=Author(
                id=str(account.get("id", "")),
                name=account.get("display_name") or username,
                username=username,
                profile_image_url=account.get("avatar"),
                platform=Platform.MASTODON,
            ),
            created_at=datetime.fromisoformat(created_at.replace("Z", "+00:00")),
            media=[
                self._transform_media(media)
                for media in raw.get("media_attachments") or []
                if media.get("url")
            ],
            likes=raw.get("favourites_count") or 0,
            shares=raw.get("reblogs_count") or 0,
            comments=raw.get("replies_count") or 0,
            url=raw.get("url") or f"{self.base_url}/@{username}/{native_id}",
        )

    @staticmethod
    def _transform_media(media: dict[str, Any]) -> MediaItem:
        return MediaItem(
            url=media["url"],
            kind=MediaKind.IMAGE if media.get("type") == "image" else MediaKind.VIDEO,
            thumbnail_url=media.get("preview_url"),
        )
