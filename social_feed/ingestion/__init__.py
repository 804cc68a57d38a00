"""Source ingestion - adapters, schemas, and HTTP transport."""

from social_feed.ingestion.schemas import (
    Author,
    FeedFilters,
    FeedItem,
    MediaItem,
    MediaKind,
    Platform,
)

__all__ = [
    "Platform",
    "MediaKind",
    "MediaItem",
    "Author",
    "FeedItem",
    "FeedFilters",
]
