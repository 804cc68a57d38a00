"""
FastAPI application factory for the feed API.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from social_feed import __version__
from social_feed.api.middleware.request_context import RequestContextMiddleware
from social_feed.api.middleware.timeout import TimeoutMiddleware
from social_feed.api.routes import bookmarks, feed, health, refresh
from social_feed.config.settings import Settings, get_settings
from social_feed.feed.aggregator import FeedAggregator
from social_feed.feed.bookmarks import BookmarkStore, InMemoryBookmarkStore
from social_feed.feed.service import FeedService
from social_feed.ingestion.registry import AdapterRegistry, create_adapter_registry

logger = structlog.get_logger(__name__)

API_DESCRIPTION = """
Aggregates posts from JSONPlaceholder and Mastodon into one feed.

## Filtering

- **query**: every whitespace-separated term must appear in the content,
  author name or handle (case-insensitive)
- **startDate / endDate**: inclusive calendar-day bounds
- **platforms**: comma-separated list; unknown names are ignored
"""

OPENAPI_TAGS = [
    {"name": "feed", "description": "Aggregated, filtered feed"},
    {"name": "bookmarks", "description": "Process-local bookmark set"},
    {"name": "refresh", "description": "Platform refresh acknowledgment"},
    {"name": "health", "description": "Source configuration and cache status"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    registry: AdapterRegistry = app.state.registry
    logger.info(
        "Feed API starting",
        sources=[p.value for p in registry.platforms],
        unconfigured=[a.platform.value for a in registry if not a.is_configured()],
    )
    yield
    logger.info("Feed API stopped")


def create_app(
    settings: Settings | None = None,
    registry: AdapterRegistry | None = None,
    bookmark_store: BookmarkStore | None = None,
    use_mock: bool = False,
) -> FastAPI:
    """
    Build the feed API.

    Adapters and the bookmark set live on app.state for the lifetime of the
    application, so adapter caches survive across requests.

    Args:
        settings: Application settings (defaults to cached settings)
        registry: Source adapters (defaults to one per known platform)
        bookmark_store: Bookmark backend (defaults to a process-local set)
        use_mock: Build synthetic adapters instead of real sources
    """
    settings = settings or get_settings()
    if registry is None:
        registry = create_adapter_registry(settings, use_mock=use_mock)
    if bookmark_store is None:
        bookmark_store = InMemoryBookmarkStore()

    app = FastAPI(
        title="Social Feed API",
        description=API_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )
    app.state.registry = registry
    app.state.bookmarks = bookmark_store
    app.state.feed_service = FeedService(FeedAggregator(registry), bookmark_store)

    # Last registered runs outermost: request context, deadline, CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    if settings.request_timeout_seconds > 0:
        app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal"},
        )

    for router, tag in (
        (feed.router, "feed"),
        (bookmarks.router, "bookmarks"),
        (refresh.router, "refresh"),
        (health.router, "health"),
    ):
        app.include_router(router, tags=[tag])

    @app.get("/", include_in_schema=False)
    async def root():
        return {"service": "Social Feed API", "version": __version__, "docs": "/docs"}

    return app
