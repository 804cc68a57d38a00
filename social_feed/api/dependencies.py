"""
Dependency injection for FastAPI endpoints.

Service objects are built once per application by create_app() and kept
on app.state, so adapter caches and the bookmark set live exactly as long
as the application instance.
"""

from fastapi import Request

from social_feed.feed.bookmarks import BookmarkStore
from social_feed.feed.service import FeedService
from social_feed.ingestion.registry import AdapterRegistry


def get_adapter_registry(request: Request) -> AdapterRegistry:
    """Get the adapter registry of this application."""
    return request.app.state.registry


def get_bookmark_store(request: Request) -> BookmarkStore:
    """Get the server-side bookmark set."""
    return request.app.state.bookmarks


def get_feed_service(request: Request) -> FeedService:
    """Get the feed orchestration service."""
    return request.app.state.feed_service
