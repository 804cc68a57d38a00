"""Aggregated feed endpoint."""

import time

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from social_feed.api.dependencies import get_feed_service
from social_feed.api.models import ErrorResponse
from social_feed.feed.service import FeedService
from social_feed.ingestion.schemas import FeedFilters, FeedItem, Platform

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get(
    "/feed",
    response_model=list[FeedItem],
    responses={
        422: {"model": ErrorResponse, "description": "Invalid date bound"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
    summary="Aggregated feed",
    description=(
        "Fetch posts from the selected platforms, filtered by free text and an "
        "inclusive calendar-day range, sorted newest first. Unknown platform "
        "names are ignored; with no valid platform every source is used."
    ),
)
async def get_feed(
    query: str | None = Query(default=None, description="Free-text filter"),
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    platforms: str | None = Query(
        default=None,
        description="Comma-separated platform list",
        examples=["jsonplaceholder,mastodon"],
    ),
    service: FeedService = Depends(get_feed_service),
) -> list[FeedItem]:
    start_time = time.perf_counter()

    try:
        filters = FeedFilters(
            platforms=Platform.parse_many(platforms.split(",") if platforms else []),
            query=query,
            start_date=start_date,
            end_date=end_date,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid feed filters: {e.errors()[0]['msg']}",
        )

    try:
        items = await service.fetch_feed(filters)
    except Exception as e:
        logger.error("get_feed_failed", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch feed data",
        )

    logger.info(
        "Feed served",
        platforms=[p.value for p in filters.resolved_platforms()],
        total=len(items),
        latency_ms=round((time.perf_counter() - start_time) * 1000, 2),
    )
    return items
