"""
Structured logging setup.

API and service modules log through structlog with keyword fields;
ingestion modules use stdlib loggers. Both end up in the same handler, so
setup_logging() configures structlog on top of the stdlib root logger.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from social_feed.config.settings import get_settings

# Capped at WARNING: they log every upstream request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def _renderer(production: bool) -> list[Processor]:
    if production:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def setup_logging(level: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level name overriding LOG_LEVEL from settings

    Production environments emit one JSON object per line; everything else
    gets the colored console renderer.
    """
    settings = get_settings()
    level = level or settings.log_level

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        *_renderer(settings.is_production),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**kwargs) -> None:
    """Attach fields (e.g. request_id) to every log line of the current task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
