"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from social_feed.api.app import create_app
from social_feed.feed.bookmarks import InMemoryBookmarkStore
from social_feed.ingestion.mock_adapter import create_mock_adapters
from social_feed.ingestion.registry import AdapterRegistry


@pytest.fixture
def registry():
    return AdapterRegistry(create_mock_adapters(items_per_fetch=5))


@pytest.fixture
def bookmark_store():
    return InMemoryBookmarkStore()


@pytest.fixture
def app(test_settings, registry, bookmark_store):
    return create_app(
        settings=test_settings,
        registry=registry,
        bookmark_store=bookmark_store,
    )


@pytest.fixture
def client(app):
    return TestClient(app)
