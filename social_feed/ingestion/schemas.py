"""
Canonical feed item schema for the social-feed pipeline.

CRITICAL: All source adapters MUST output FeedItem. The aggregation engine,
the API and the client state store depend on these field names.
"""

from collections.abc import Iterable
from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class Platform(str, Enum):
    """Supported upstream sources."""

    JSONPLACEHOLDER = "jsonplaceholder"
    MASTODON = "mastodon"

    @classmethod
    def parse_many(
        cls, values: "Iterable[str | Platform] | None"
    ) -> list["Platform"]:
        """
        Validate raw platform tags at the boundary.

        Unknown tags are dropped, duplicates collapsed, order preserved.
        """
        platforms: list[Platform] = []
        for value in values or ():
            if isinstance(value, cls):
                platform = value
            else:
                try:
                    platform = cls(str(value).strip().lower())
                except ValueError:
                    continue
            if platform not in platforms:
                platforms.append(platform)
        return platforms


class MediaKind(str, Enum):
    """Attachment kind. Determines rendering only."""

    IMAGE = "image"
    VIDEO = "video"


class MediaItem(BaseModel):
    """Media attachment embedded in a feed item."""

    url: str
    kind: MediaKind = MediaKind.IMAGE
    thumbnail_url: str | None = None


class Author(BaseModel):
    """
    Post author. Owned by value by the FeedItem that embeds it.
    """

    id: str
    name: str = Field(..., description="Display name")
    username: str = Field(..., description="Handle on the source platform")
    profile_image_url: str | None = None
    platform: Platform


class FeedItem(BaseModel):
    """
    CANONICAL FEED ITEM

    Identity is source-qualified ({platform}_{native_id}) so items from
    different sources never share an id.
    """

    id: str = Field(
        ...,
        description="Unique ID in format: {platform}_{native_id}",
        examples=["mastodon_111222333", "jsonplaceholder_42"],
    )
    platform: Platform
    content: str = ""
    author: Author
    created_at: datetime = Field(
        ...,
        description="UTC timestamp of content creation on the source",
    )
    media: list[MediaItem] = Field(default_factory=list)

    # Engagement
    likes: int = Field(default=0, ge=0)
    shares: int = Field(default=0, ge=0)
    comments: int = Field(default=0, ge=0)

    url: str
    is_bookmarked: bool = False

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC so ordering is well defined."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class FeedFilters(BaseModel):
    """
    Filter request for the aggregated feed.

    An empty platform list selects every known source. Date bounds are
    inclusive and compared at calendar-day granularity.
    """

    platforms: list[Platform] = Field(default_factory=list)
    query: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("platforms", mode="before")
    @classmethod
    def drop_unknown_platforms(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return Platform.parse_many(v)

    @field_validator("query")
    @classmethod
    def blank_query_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_day(cls, v):
        # Deferred import: filters imports this module
        from social_feed.feed.filters import normalize_date

        if isinstance(v, date) and not isinstance(v, datetime):
            return v
        day = normalize_date(v)
        return date.fromisoformat(day) if day else None

    def resolved_platforms(self) -> list[Platform]:
        """Selected platforms, or every known platform when none are selected."""
        return list(self.platforms) if self.platforms else list(Platform)

    @property
    def is_unfiltered(self) -> bool:
        """True when no query and no date bound is set."""
        return self.query is None and self.start_date is None and self.end_date is None
