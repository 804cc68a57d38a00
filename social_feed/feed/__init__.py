"""Feed aggregation, filtering, bookmarks and the orchestration service."""
