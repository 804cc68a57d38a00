"""Tests for the health endpoint."""

from fastapi.testclient import TestClient

from social_feed.api.app import create_app
from social_feed.feed.bookmarks import InMemoryBookmarkStore
from social_feed.ingestion.mastodon_adapter import MastodonAdapter
from social_feed.ingestion.mock_adapter import MockAdapter
from social_feed.ingestion.registry import AdapterRegistry
from social_feed.ingestion.schemas import Platform


class TestHealthEndpoint:
    def test_healthy_with_configured_sources(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert set(data["sources"]) == {"jsonplaceholder", "mastodon"}
        assert data["sources"]["mastodon"]["configured"] is True
        assert data["sources"]["mastodon"]["cached_items"] is None
        assert data["version"]

    def test_reports_cache_and_bookmarks(self, client):
        client.get("/feed")
        client.post("/bookmarks/mastodon_mock1")

        data = client.get("/health").json()

        assert data["sources"]["jsonplaceholder"]["cached_items"] == 5
        assert data["bookmarks"] == 1

    def test_degraded_without_mastodon_token(self, test_settings):
        registry = AdapterRegistry(
            {
                Platform.JSONPLACEHOLDER: MockAdapter(platform=Platform.JSONPLACEHOLDER),
                Platform.MASTODON: MastodonAdapter(instance="mastodon.test", access_token=None),
            }
        )
        app = create_app(
            settings=test_settings,
            registry=registry,
            bookmark_store=InMemoryBookmarkStore(),
        )

        data = TestClient(app).get("/health").json()

        assert data["status"] == "degraded"
        assert data["sources"]["mastodon"]["configured"] is False
