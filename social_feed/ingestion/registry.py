"""
Adapter registry.

Maps each Platform to exactly one adapter instance. Adapters own their
caches, so the registry is the single place they are constructed and the
same instances must be reused across requests for caching to work.
"""

import logging
from collections.abc import Iterable, Mapping

from social_feed.config.settings import Settings, get_settings
from social_feed.ingestion.base_adapter import BaseAdapter
from social_feed.ingestion.http_client import RetryConfig
from social_feed.ingestion.jsonplaceholder_adapter import JSONPlaceholderAdapter
from social_feed.ingestion.mastodon_adapter import MastodonAdapter
from social_feed.ingestion.schemas import Platform

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Closed mapping from Platform to its source adapter."""

    def __init__(self, adapters: Mapping[Platform, BaseAdapter]):
        for platform, adapter in adapters.items():
            if adapter.platform != platform:
                raise ValueError(
                    f"Adapter {adapter.name} registered under {platform.value}"
                )
        self._adapters = dict(adapters)

    @property
    def platforms(self) -> list[Platform]:
        """Registered platforms in declaration order."""
        return [p for p in Platform if p in self._adapters]

    def get(self, platform: Platform) -> BaseAdapter:
        try:
            return self._adapters[platform]
        except KeyError:
            raise KeyError(f"No adapter registered for {platform.value}") from None

    def resolve(self, platforms: Iterable[Platform] | None) -> list[BaseAdapter]:
        """
        Adapters for the requested platforms.

        An empty selection resolves to every registered adapter. Platforms
        without a registered adapter are skipped.
        """
        selected = Platform.parse_many(platforms)
        if not selected:
            selected = self.platforms

        adapters = []
        for platform in selected:
            adapter = self._adapters.get(platform)
            if adapter is None:
                logger.warning(f"No adapter registered for {platform.value}, skipping")
                continue
            adapters.append(adapter)
        return adapters

    def __iter__(self):
        return iter(self._adapters[p] for p in self.platforms)

    def __len__(self) -> int:
        return len(self._adapters)


def create_adapter_registry(
    settings: Settings | None = None,
    use_mock: bool = False,
) -> AdapterRegistry:
    """
    Build the registry with one adapter per known platform.

    Args:
        settings: Application settings (defaults to cached settings)
        use_mock: Use synthetic adapters instead of real sources
    """
    if use_mock:
        from social_feed.ingestion.mock_adapter import create_mock_adapters

        return AdapterRegistry(create_mock_adapters())

    settings = settings or get_settings()
    retry_config = RetryConfig(
        max_retries=settings.max_http_retries,
        max_backoff_seconds=settings.max_backoff_seconds,
    )
    return AdapterRegistry(
        {
            Platform.JSONPLACEHOLDER: JSONPlaceholderAdapter(
                base_url=settings.jsonplaceholder_base_url,
                cache_ttl_seconds=settings.jsonplaceholder_cache_ttl_seconds,
                retry_config=retry_config,
                timeout=settings.http_timeout_seconds,
            ),
            Platform.MASTODON: MastodonAdapter(
                instance=settings.mastodon_instance,
                access_token=settings.mastodon_access_token,
                cache_ttl_seconds=settings.mastodon_cache_ttl_seconds,
                timeline_limit=settings.mastodon_timeline_limit,
                retry_config=retry_config,
                timeout=settings.http_timeout_seconds,
            ),
        }
    )
