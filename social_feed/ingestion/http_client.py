"""
Retrying HTTP transport shared by the source adapters and the bookmark client.

Upstream sources are public APIs that rate limit (Mastodon answers 429 with
a reset window) or hiccup with 5xx, so every call goes through one retry
policy. Adapters never see httpx exceptions directly: anything that survives
the retries surfaces as HTTPClientError.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})
RETRYABLE_EXCEPTIONS = (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError)
SUPPORTED_METHODS = ("GET", "POST", "DELETE")


@dataclass
class RetryConfig:
    """
    Exponential backoff policy.

    Delay for attempt n (0-indexed) is
    min(max_backoff_seconds, base_delay * 2**n) plus up to jitter_factor of
    that delay at random.
    """

    max_retries: int = 3
    max_backoff_seconds: float = 60.0
    base_delay: float = 1.0
    jitter_factor: float = 0.1

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def calculate_backoff(self, attempt: int) -> float:
        """Seconds to wait before retrying after the given attempt."""
        delay = min(self.base_delay * (2**attempt), self.max_backoff_seconds)
        return delay + delay * self.jitter_factor * random.random()

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in RETRYABLE_STATUSES

    def is_retryable_exception(self, exc: Exception) -> bool:
        return isinstance(exc, RETRYABLE_EXCEPTIONS)


class HTTPClientError(Exception):
    """A request failed for good: non-retryable status or retries exhausted."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(HTTPClientError):
    """Still rate limited (429) after the last retry."""


class HTTPClient:
    """
    Async context manager around httpx.AsyncClient with retries.

    Example:
        async with HTTPClient(RetryConfig(max_retries=2), timeout=10) as client:
            response = await client.get(
                "https://mastodon.social/api/v1/timelines/public",
                params={"limit": 40},
            )
    """

    def __init__(
        self,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
    ):
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        GET with retries.

        Raises:
            RateLimitError: Still rate limited after the last attempt
            HTTPClientError: Any other failure
        """
        return await self.request("GET", url, params=params, headers=headers)

    async def post(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        return await self.request(
            "POST", url, params=params, headers=headers, json_body=json_body
        )

    async def delete(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return await self.request("DELETE", url, params=params, headers=headers)

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transient statuses and transport errors."""
        if self._client is None:
            raise RuntimeError("HTTPClient must be used as async context manager")
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        config = self.retry_config
        attempt = 0
        while True:
            try:
                response = await self._client.request(
                    method,
                    url,
                    params=params or None,
                    headers=headers or None,
                    json=json_body,
                )
            except RETRYABLE_EXCEPTIONS as e:
                if attempt >= config.max_retries:
                    raise HTTPClientError(
                        f"{method} {url} failed after {attempt + 1} attempts: {e}"
                    ) from e
                await self._backoff(attempt, url, type(e).__name__)
                attempt += 1
                continue
            except httpx.HTTPError as e:
                raise HTTPClientError(f"{method} {url} failed: {e}") from e

            if config.is_retryable_status(response.status_code):
                if attempt >= config.max_retries:
                    raise self._exhausted(method, url, response, attempt + 1)
                await self._backoff(attempt, url, f"status {response.status_code}")
                attempt += 1
                continue

            if response.status_code >= 400:
                raise HTTPClientError(
                    f"{method} {url} failed with status {response.status_code}",
                    status_code=response.status_code,
                    response_body=response.text,
                )
            return response

    async def _backoff(self, attempt: int, url: str, reason: str) -> None:
        delay = self.retry_config.calculate_backoff(attempt)
        logger.warning(
            f"Retrying {url} after {reason} "
            f"(attempt {attempt + 1}/{self.retry_config.max_attempts}, "
            f"sleeping {delay:.2f}s)"
        )
        await asyncio.sleep(delay)

    @staticmethod
    def _exhausted(
        method: str,
        url: str,
        response: httpx.Response,
        attempts: int,
    ) -> HTTPClientError:
        error_cls = RateLimitError if response.status_code == 429 else HTTPClientError
        reason = "rate limited" if response.status_code == 429 else f"status {response.status_code}"
        return error_cls(
            f"{method} {url} still {reason} after {attempts} attempts",
            status_code=response.status_code,
            response_body=response.text,
        )
