"""Platform refresh endpoint."""

import structlog
from fastapi import APIRouter, Depends

from social_feed.api.dependencies import get_feed_service
from social_feed.api.models import RefreshResponse
from social_feed.feed.service import FeedService
from social_feed.ingestion.schemas import Platform

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/refresh/{platform}",
    response_model=RefreshResponse,
    summary="Refresh platform data",
    description=(
        "Acknowledge a refresh request. Neither source supports push or "
        "manual refresh, so this never alters cached data."
    ),
)
async def refresh_platform(
    platform: Platform,
    service: FeedService = Depends(get_feed_service),
) -> RefreshResponse:
    await service.refresh_platform_data(platform)
    return RefreshResponse(platform=platform.value)
