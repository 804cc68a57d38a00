"""Pytest fixtures for social-feed tests."""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from social_feed.config.settings import Settings, get_settings
from social_feed.ingestion.schemas import Author, FeedItem, MediaItem, Platform


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep host environment credentials out of tests."""
    monkeypatch.delenv("MASTODON_ACCESS_TOKEN", raising=False)
    monkeypatch.setenv("MAX_HTTP_RETRIES", "0")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing."""
    return Settings(
        environment="development",
        log_level="DEBUG",
        jsonplaceholder_base_url="https://jsonplaceholder.test",
        mastodon_instance="mastodon.test",
        mastodon_access_token="test-token",
        api_base_url="http://feed-api.test",
        max_http_retries=0,
        request_timeout_seconds=0,
    )


class FakeClock:
    """Manually advanced monotonic clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_item() -> Callable[..., FeedItem]:
    """Factory for FeedItem with sensible defaults."""

    def _make_item(
        native_id: str = "1",
        platform: Platform = Platform.MASTODON,
        content: str = "Hello fediverse",
        created_at: datetime | str = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc),
        name: str = "Test User",
        username: str = "tester",
        **kwargs: Any,
    ) -> FeedItem:
        return FeedItem(
            id=kwargs.pop("id", f"{platform.value}_{native_id}"),
            platform=platform,
            content=content,
            author=Author(
                id=kwargs.pop("author_id", "42"),
                name=name,
                username=username,
                platform=platform,
            ),
            created_at=created_at,
            media=kwargs.pop(
                "media",
                [MediaItem(url="https://example.com/a.png")],
            ),
            url=kwargs.pop("url", f"https://example.com/{platform.value}/{native_id}"),
            **kwargs,
        )

    return _make_item


def mastodon_status(
    status_id: str = "111",
    content: str = "<p>Hello <b>world</b></p>",
    created_at: str = "2024-01-10T12:00:00.000Z",
    username: str = "alice",
    display_name: str = "Alice",
    **overrides: Any,
) -> dict[str, Any]:
    """Raw Mastodon status payload."""
    status = {
        "id": status_id,
        "created_at": created_at,
        "content": content,
        "url": f"https://mastodon.test/@{username}/{status_id}",
        "favourites_count": 5,
        "reblogs_count": 2,
        "replies_count": 1,
        "account": {
            "id": "900",
            "username": username,
            "acct": username,
            "display_name": display_name,
            "avatar": f"https://mastodon.test/avatars/{username}.png",
        },
        "media_attachments": [],
    }
    status.update(overrides)
    return status


@pytest.fixture
def status_factory() -> Callable[..., dict[str, Any]]:
    return mastodon_status
