"""
Request and response models for the feed API.

Feed items are returned as the canonical FeedItem schema.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(
        ...,
        description="Error message",
    )
    error_type: str = Field(
        default="error",
        description="Error type",
    )


class BookmarkResponse(BaseModel):
    """Acknowledgment of a bookmark change."""

    success: bool = True
    id: str = Field(..., description="Bookmarked item id")


class BookmarkStatusResponse(BaseModel):
    """Membership of an item in the bookmark set."""

    id: str
    bookmarked: bool


class RefreshResponse(BaseModel):
    """Acknowledgment of a platform refresh request."""

    success: bool = True
    platform: str


class SourceHealth(BaseModel):
    """Configuration and cache status of one source adapter."""

    configured: bool = Field(
        ...,
        description="Whether the adapter has the credentials it needs",
    )
    cache_ttl_seconds: float
    cached_items: int | None = Field(
        default=None,
        description="Size of the cached unfiltered result set, if any",
    )


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(
        ...,
        description="Overall service status: healthy or degraded",
    )
    sources: dict[str, SourceHealth] = Field(default_factory=dict)
    bookmarks: int = Field(default=0, description="Size of the process-local bookmark set")
    version: str
