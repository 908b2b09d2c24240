"""Timestamp helpers shared by the fasting models."""

from datetime import datetime, timedelta

HOUR = timedelta(hours=1)


def local_now() -> datetime:
    """Current time as an aware datetime in the local timezone."""
    return datetime.now().astimezone()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 string into an aware local datetime.

    A trailing ``Z`` is accepted; naive values are taken as local wall-clock time.

    Raises:
        ValueError: If *value* is not a valid ISO 8601 timestamp
    """
    return datetime.fromisoformat(value.replace("Z", "+00:00")).astimezone()


def hours_between(start: datetime, end: datetime) -> float:
    """Signed number of hours from *start* to *end*."""
    return (end - start) / HOUR
