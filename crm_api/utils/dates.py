"""
Date helpers.

MongoDB stores datetimes as UTC milliseconds and pymongo hands them back
naive, so everything persisted by this service is a naive UTC datetime.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as a naive UTC datetime, truncated to BSON precision."""
    now = datetime.now(UTC).replace(tzinfo=None)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive input is assumed UTC."""
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def to_iso_utc(value: datetime) -> str:
    """Render a stored datetime as ISO-8601 with a ``Z`` suffix."""
    return to_naive_utc(value).isoformat(timespec="milliseconds") + "Z"


def month_start(value: datetime) -> datetime:
    """First instant of the calendar month containing ``value``."""
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def add_months(value: datetime, months: int) -> datetime:
    """
    Shift the first day of ``value``'s month by ``months`` calendar months.

    Args:
        value: Any datetime; only its year and month are used
        months: Offset, may be negative

    Returns:
        datetime: Start of the target month
    """
    index = value.year * 12 + (value.month - 1) + months
    return month_start(value).replace(year=index // 12, month=index % 12 + 1)
