"""
Date and text filtering for feed items.

Pure, stateless helpers shared by every source adapter and the
aggregation engine. Date comparison happens on calendar-day keys
(YYYY-MM-DD, UTC) rather than exact instants so that an item posted
late in the evening is not excluded by a bound that lands on the same day.
"""

from collections.abc import Iterable
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

from dateutil import parser as date_parser

if TYPE_CHECKING:
    from social_feed.ingestion.schemas import FeedItem

DateLike = str | date | datetime


def _parse_datetime(text: str) -> datetime | date:
    text = text.strip()
    # fromisoformat rejects a lowercase "z" suffix on some interpreters
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    # Free-form input such as "2024/01/10" or RFC 2822 timestamps
    try:
        return date_parser.parse(text)
    except (ValueError, OverflowError):
        raise ValueError(f"Unrecognized date: {text!r}") from None


def normalize_date(value: DateLike | None) -> str | None:
    """
    Reduce a date/time value to a calendar-day key.

    Args:
        value: Date/time string (ISO-8601 or any format dateutil
            understands), date or datetime. Aware datetimes are
            converted to UTC first; naive ones are taken as UTC.

    Returns:
        "YYYY-MM-DD", or None for empty input

    Raises:
        ValueError: If a non-empty string cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        value = _parse_datetime(value)

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    return value.isoformat()


def is_in_range(
    timestamp: DateLike,
    start: DateLike | None = None,
    end: DateLike | None = None,
) -> bool:
    """Check whether a timestamp falls within inclusive day bounds."""
    day = normalize_date(timestamp)
    start_day = normalize_date(start)
    end_day = normalize_date(end)

    after_start = start_day is None or day >= start_day
    before_end = end_day is None or day <= end_day
    return after_start and before_end


def matches_query(item: "FeedItem", query: str | None) -> bool:
    """
    Case-insensitive substring match.

    Every whitespace-separated term must appear in at least one of the
    content, author display name or author handle.
    """
    if not query:
        return True

    terms = query.lower().split()
    fields = (
        item.content.lower(),
        item.author.name.lower(),
        item.author.username.lower(),
    )
    return all(any(term in field for field in fields) for term in terms)


def filter_items(
    items: Iterable["FeedItem"],
    query: str | None = None,
    start: DateLike | None = None,
    end: DateLike | None = None,
) -> list["FeedItem"]:
    """Apply the text filter, then the date filter."""
    filtered = list(items)
    if query:
        filtered = [item for item in filtered if matches_query(item, query)]
    if start or end:
        filtered = [item for item in filtered if is_in_range(item.created_at, start, end)]
    return filtered


def dedupe_by_id(items: Iterable["FeedItem"]) -> list["FeedItem"]:
    """
    Collapse items sharing an id.

    The last occurrence wins; the surviving item keeps the position where
    the id was first seen.
    """
    by_id: dict[str, "FeedItem"] = {}
    for item in items:
        by_id[item.id] = item
    return list(by_id.values())


def sort_newest_first(items: Iterable["FeedItem"]) -> list["FeedItem"]:
    """Stable sort by creation time, most recent first."""
    return sorted(items, key=lambda item: item.created_at, reverse=True)
