"""Tests for the feed endpoint."""

from datetime import datetime
from unittest.mock import AsyncMock

from social_feed.api.dependencies import get_feed_service


class TestGetFeed:
    def test_returns_all_sources_newest_first(self, client):
        response = client.get("/feed")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 10
        assert {item["platform"] for item in data} == {"jsonplaceholder", "mastodon"}

        timestamps = [datetime.fromisoformat(item["created_at"]) for item in data]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_item_shape(self, client):
        item = client.get("/feed").json()[0]

        assert set(item) >= {
            "id",
            "platform",
            "content",
            "author",
            "created_at",
            "media",
            "likes",
            "shares",
            "comments",
            "url",
            "is_bookmarked",
        }
        assert item["id"].startswith(f"{item['platform']}_")

    def test_platform_filter(self, client):
        data = client.get("/feed", params={"platforms": "mastodon"}).json()

        assert len(data) == 5
        assert all(item["platform"] == "mastodon" for item in data)

    def test_unknown_platforms_ignored(self, client):
        only_unknown = client.get("/feed", params={"platforms": "twitter"}).json()
        mixed = client.get("/feed", params={"platforms": "twitter,jsonplaceholder"}).json()

        assert len(only_unknown) == 10
        assert {item["platform"] for item in mixed} == {"jsonplaceholder"}

    def test_query_filter(self, client):
        everything = client.get("/feed").json()
        term = everything[0]["author"]["username"]

        data = client.get("/feed", params={"query": term.upper()}).json()

        assert data
        assert all(
            term in " ".join([i["content"], i["author"]["name"], i["author"]["username"]]).lower()
            for i in data
        )

    def test_date_range_filter(self, client):
        newest = client.get("/feed").json()[0]
        day = newest["created_at"][:10]

        data = client.get("/feed", params={"startDate": day, "endDate": day}).json()

        assert newest["id"] in {item["id"] for item in data}
        assert all(item["created_at"][:10] == day for item in data)

    def test_slash_date_accepted(self, client):
        newest = client.get("/feed").json()[0]
        day = newest["created_at"][:10]

        response = client.get("/feed", params={"startDate": day.replace("-", "/")})

        assert response.status_code == 200
        assert all(item["created_at"][:10] >= day for item in response.json())

    def test_invalid_date_returns_422(self, client):
        response = client.get("/feed", params={"startDate": "someday"})

        assert response.status_code == 422
        assert "Invalid feed filters" in response.json()["detail"]

    def test_service_failure_returns_500(self, app, client):
        failing = AsyncMock()
        failing.fetch_feed.side_effect = RuntimeError("registry corrupted")
        app.dependency_overrides[get_feed_service] = lambda: failing

        response = client.get("/feed")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch feed data"

    def test_request_id_echoed(self, client):
        response = client.get("/feed", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_correlation_id_used_as_request_id(self, client):
        response = client.get("/feed", headers={"X-Correlation-ID": "corr-9"})

        assert response.headers["X-Request-ID"] == "corr-9"

    def test_request_id_generated(self, client):
        response = client.get("/feed")

        assert len(response.headers["X-Request-ID"]) == 32


class TestRoot:
    def test_root(self, client):
        data = client.get("/").json()

        assert data["service"] == "Social Feed API"
        assert data["docs"] == "/docs"
