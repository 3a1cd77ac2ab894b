"""Date helpers shared by the model, services and schemas.

Arrival dates are stored as naive UTC datetimes so the same values work on
PostgreSQL ``timestamp`` columns and on SQLite.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

END_OF_DAY = time(23, 59, 59, 999000)


def utcnow() -> datetime:
    """Current time as naive UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalise a datetime to naive UTC. Naive input is taken as UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive stored datetime for serialization"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def day_window(day: date) -> Tuple[datetime, datetime]:
    """Inclusive [00:00:00.000, 23:59:59.999] bounds of a calendar day"""
    return datetime.combine(day, time.min), datetime.combine(day, END_OF_DAY)


def parse_day(value: str) -> date:
    """Parse the date part of an ISO date or date-time string.

    Raises ValueError when the value is not a valid date.
    """
    return date.fromisoformat(value.strip().split("T")[0])


def display_date(value: datetime, offset_hours: int) -> str:
    """Calendar date of a stored UTC datetime in a fixed-offset display zone"""
    return (to_naive_utc(value) + timedelta(hours=offset_hours)).date().isoformat()
