"""
FastAPI feed service.

Provides REST API for the aggregated feed with:
- GET /feed - Filtered, merged feed across sources
- POST/DELETE /bookmarks/{id} - Bookmark toggling
- POST /refresh/{platform} - Refresh acknowledgment
- GET /health - Source configuration status
"""

from social_feed.api.app import create_app

__all__ = ["create_app"]
