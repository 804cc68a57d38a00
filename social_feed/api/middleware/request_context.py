"""Request correlation and access logging."""

import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from social_feed.observability.logging import bind_context, clear_context

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADERS = ("X-Request-ID", "X-Correlation-ID")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Bind a request id to every log line emitted while serving a request.

    The id is taken from the first correlation header the caller sent, or
    generated, and echoed back as X-Request-ID.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = next(
            (request.headers[h] for h in REQUEST_ID_HEADERS if h in request.headers),
            None,
        ) or uuid.uuid4().hex

        bind_context(request_id=request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "Request served",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query) or None,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return response
        finally:
            clear_context()
