"""Request deadline middleware."""

import asyncio
from collections.abc import Iterable

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


class TimeoutMiddleware(BaseHTTPMiddleware):
    """
    Answer 504 when a request outlives its deadline.

    A feed request waits for every selected source, so one hung upstream
    holds it open until the transport timeout fires. The deadline caps that
    wait for the client. Paths under an exempt prefix (by default /health)
    are never cut off.
    """

    def __init__(
        self,
        app,
        timeout_seconds: float = 30.0,
        exempt_prefixes: Iterable[str] = ("/health",),
    ):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds
        self.exempt_prefixes = tuple(exempt_prefixes)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path.startswith(self.exempt_prefixes):
            return await call_next(request)

        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await call_next(request)
        except TimeoutError:
            logger.warning(
                "Request deadline exceeded",
                method=request.method,
                path=path,
                timeout_seconds=self.timeout_seconds,
            )
            return JSONResponse(
                status_code=504,
                content={
                    "detail": f"Request timed out after {self.timeout_seconds}s",
                    "timeout_seconds": self.timeout_seconds,
                },
            )
