"""
Bookmark endpoints.

The bookmark set is process-local and lost on restart; it stands in for
real storage behind the BookmarkStore interface.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from social_feed.api.dependencies import get_bookmark_store
from social_feed.api.models import BookmarkResponse, BookmarkStatusResponse, ErrorResponse
from social_feed.feed.bookmarks import BookmarkStore, BookmarkStoreError

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/bookmarks/{item_id}",
    response_model=BookmarkResponse,
    responses={500: {"model": ErrorResponse, "description": "Server error"}},
    summary="Bookmark an item",
)
async def add_bookmark(
    item_id: str,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkResponse:
    try:
        await store.add(item_id)
    except BookmarkStoreError as e:
        logger.error("add_bookmark_failed", item_id=item_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to bookmark item",
        )

    logger.info("Bookmark added", item_id=item_id)
    return BookmarkResponse(id=item_id)


@router.delete(
    "/bookmarks/{item_id}",
    response_model=BookmarkResponse,
    responses={500: {"model": ErrorResponse, "description": "Server error"}},
    summary="Remove a bookmark",
)
async def remove_bookmark(
    item_id: str,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkResponse:
    try:
        await store.remove(item_id)
    except BookmarkStoreError as e:
        logger.error("remove_bookmark_failed", item_id=item_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove bookmark",
        )

    logger.info("Bookmark removed", item_id=item_id)
    return BookmarkResponse(id=item_id)


@router.get(
    "/bookmarks/{item_id}",
    response_model=BookmarkStatusResponse,
    responses={500: {"model": ErrorResponse, "description": "Server error"}},
    summary="Check whether an item is bookmarked",
)
async def get_bookmark(
    item_id: str,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkStatusResponse:
    try:
        bookmarked = await store.contains(item_id)
    except BookmarkStoreError as e:
        logger.error("get_bookmark_failed", item_id=item_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read bookmark",
        )
    return BookmarkStatusResponse(id=item_id, bookmarked=bookmarked)
