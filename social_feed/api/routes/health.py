"""
Health check endpoint reporting source adapter configuration.
"""

from fastapi import APIRouter, Depends

from social_feed import __version__
from social_feed.api.dependencies import get_adapter_registry, get_bookmark_store
from social_feed.api.models import HealthResponse, SourceHealth
from social_feed.feed.bookmarks import BookmarkStore, InMemoryBookmarkStore
from social_feed.ingestion.registry import AdapterRegistry

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Report which sources are configured and how much each has cached.",
)
async def health_check(
    registry: AdapterRegistry = Depends(get_adapter_registry),
    bookmarks: BookmarkStore = Depends(get_bookmark_store),
) -> HealthResponse:
    """
    Status logic:
    - degraded: at least one source lacks credentials (it serves nothing)
    - healthy: every source is configured
    """
    sources = {
        adapter.platform.value: SourceHealth(
            configured=adapter.is_configured(),
            cache_ttl_seconds=adapter.cache_ttl_seconds,
            cached_items=len(adapter.cache.items) if adapter.cache else None,
        )
        for adapter in registry
    }

    status = "healthy" if all(s.configured for s in sources.values()) else "degraded"

    return HealthResponse(
        status=status,
        sources=sources,
        bookmarks=len(bookmarks) if isinstance(bookmarks, InMemoryBookmarkStore) else 0,
        version=__version__,
    )
