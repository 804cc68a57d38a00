"""
Command-line interface for social-feed.

Usage:
    social-feed serve                 # Run the feed API
    social-feed fetch --query python  # Print the aggregated feed
    social-feed bookmark ID           # Bookmark an item via the API
    social-feed health                # Show source configuration
"""

import asyncio
import json

import click

from social_feed.config.settings import get_settings
from social_feed.observability.logging import setup_logging
from social_feed.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Social Feed - Multi-source social post aggregation."""
    setup_logging("DEBUG" if debug else None)


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics/--no-metrics", default=True, help="Enable metrics server")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(
    host: str | None,
    port: int | None,
    reload: bool,
    metrics: bool,
    metrics_port: int | None,
) -> None:
    """Start the feed API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    if metrics:
        metrics_port = metrics_port or settings.metrics_port
        get_metrics().start_server(port=metrics_port)
        click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "social_feed.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@main.command()
@click.option("--query", "-q", default=None, help="Free-text filter")
@click.option("--start-date", default=None, help="Inclusive start day (YYYY-MM-DD)")
@click.option("--end-date", default=None, help="Inclusive end day (YYYY-MM-DD)")
@click.option("--platform", "platforms", multiple=True, help="Platform to include (can repeat)")
@click.option("--page", default=1, show_default=True, help="Page to print")
@click.option("--mock", is_flag=True, help="Use mock adapters")
@click.option("--json", "as_json", is_flag=True, help="Print items as JSON")
@click.option("--state-file", default=None, help="Client state file")
def fetch(
    query: str | None,
    start_date: str | None,
    end_date: str | None,
    platforms: tuple[str, ...],
    page: int,
    mock: bool,
    as_json: bool,
    state_file: str | None,
) -> None:
    """Fetch and print the aggregated feed."""
    from social_feed.client.state import FeedStore, StatePersistence
    from social_feed.feed.aggregator import FeedAggregator
    from social_feed.feed.bookmarks import HTTPBookmarkStore
    from social_feed.feed.service import FeedService
    from social_feed.ingestion.registry import create_adapter_registry

    settings = get_settings()
    store = FeedStore.restore(StatePersistence(state_file or settings.state_file))

    # Options left out keep the persisted filters
    changes = {
        "platforms": list(platforms),
        "query": query,
        "start_date": start_date,
        "end_date": end_date,
    }
    try:
        store.set_filters(**{key: value for key, value in changes.items() if value})
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    service = FeedService(
        FeedAggregator(create_adapter_registry(settings, use_mock=mock)),
        HTTPBookmarkStore(settings.api_base_url),
    )

    asyncio.run(store.load(service))

    if store.error:
        click.echo(click.style(store.error, fg="red"), err=True)
        raise SystemExit(1)

    store.set_page(page)
    items = store.page_items()

    if as_json:
        click.echo(json.dumps([item.model_dump(mode="json") for item in items], indent=2))
    else:
        click.echo(
            f"Page {store.current_page}/{max(store.total_pages, 1)} "
            f"({len(store.items)} items)"
        )
        click.echo("-" * 60)
        for item in items:
            marker = "*" if item.is_bookmarked else " "
            click.echo(
                f"{marker} [{item.platform.value}] {item.created_at:%Y-%m-%d %H:%M} "
                f"@{item.author.username} ({item.id})"
            )
            click.echo(f"    {item.content[:140]}")
            click.echo(
                f"    likes={item.likes} shares={item.shares} comments={item.comments}"
            )

    store.persist()


@main.command()
@click.argument("item_id")
@click.option("--remove", is_flag=True, help="Remove the bookmark instead of adding it")
def bookmark(item_id: str, remove: bool) -> None:
    """Add or remove a bookmark through the feed API."""
    from social_feed.feed.aggregator import FeedAggregator
    from social_feed.feed.bookmarks import HTTPBookmarkStore
    from social_feed.feed.service import FeedService
    from social_feed.ingestion.registry import AdapterRegistry

    settings = get_settings()
    service = FeedService(
        FeedAggregator(AdapterRegistry({})),
        HTTPBookmarkStore(settings.api_base_url),
    )

    ok = asyncio.run(service.toggle_bookmark(item_id, currently_bookmarked=remove))
    if not ok:
        click.echo(click.style(f"Failed to update bookmark {item_id}", fg="red"), err=True)
        raise SystemExit(1)

    action = "Removed bookmark" if remove else "Bookmarked"
    click.echo(click.style(f"{action} {item_id}", fg="green"))


@main.command()
def health() -> None:
    """Show source configuration."""
    from social_feed.ingestion.registry import create_adapter_registry

    settings = get_settings()
    registry = create_adapter_registry(settings)

    click.echo("\nSource Configuration:")
    click.echo("-" * 40)
    for adapter in registry:
        configured = adapter.is_configured()
        icon = "✓" if configured else "✗"
        color = "green" if configured else "yellow"
        click.echo(click.style(
            f"  {icon} {adapter.platform.value}: "
            f"configured={configured}, cache_ttl={adapter.cache_ttl_seconds:.0f}s",
            fg=color,
        ))
    click.echo("-" * 40)
    click.echo(f"  API base URL: {settings.api_base_url}")


if __name__ == "__main__":
    main()
