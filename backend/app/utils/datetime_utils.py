"""Datetime conversion utilities."""

from datetime import UTC, date, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def datetime_to_iso(value: datetime | None) -> str | None:
    """Convert a datetime to an ISO-8601 string, or None."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def datetime_from_iso(value: str | None) -> datetime | None:
    """Convert an ISO-8601 string to a timezone-aware datetime, or None.

    Naive values are taken as UTC. A trailing ``Z`` is accepted.

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp.
    """
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def utc_date_str(value: datetime) -> str:
    """Return the UTC calendar date of ``value`` as ``YYYY-MM-DD``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).date().isoformat()


def parse_date_only(raw: str) -> date | None:
    """Parse a ``YYYY-MM-DD`` string, returning None when it is invalid."""
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        return None
