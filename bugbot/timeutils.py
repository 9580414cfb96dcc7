"""Datetime helpers.

All persisted timestamps are naive UTC so that SQLite and PostgreSQL
round-trips compare equal to freshly parsed values.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_github_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp as returned by the GitHub API.

    Raises:
        ValueError: If the value is not a valid ISO-8601 string
        TypeError: If the value is not a string
    """
    return to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
