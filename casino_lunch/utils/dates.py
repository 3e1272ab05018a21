"""
Date wire-format helpers

Reservation dates travel as local ``YYYY-MM-DD`` strings. When a date string
is parsed back into an instant it is anchored at midday local time so that a
daylight-saving jump or a UTC conversion cannot push it onto the adjacent day.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterator, Tuple, Union

DateLike = Union[date, datetime]

MIDDAY = time(12, 0)


def to_ymd(value: DateLike) -> str:
    """Format a date or a local datetime as ``YYYY-MM-DD``"""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        value = value.date()
    return value.isoformat()


def parse_ymd(value: str) -> datetime:
    """Parse ``YYYY-MM-DD`` into a naive local datetime anchored at 12:00"""
    return anchor_midday(date.fromisoformat(value.strip()[:10]))


def anchor_midday(value: DateLike) -> datetime:
    """Instant used for a calendar day: midday local time"""
    return datetime.combine(as_date(value), MIDDAY)


def as_date(value: DateLike) -> date:
    """Calendar date of a date or datetime (local for aware datetimes)"""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def week_range(anchor: DateLike) -> Tuple[date, date]:
    """Monday..Sunday week containing ``anchor``, both ends inclusive"""
    day = as_date(anchor)
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def month_range(anchor: DateLike) -> Tuple[date, date]:
    """First..last day of the month containing ``anchor``"""
    day = as_date(anchor)
    start = day.replace(day=1)
    if start.month == 12:
        next_month = start.replace(year=start.year + 1, month=1)
    else:
        next_month = start.replace(month=start.month + 1)
    return start, next_month - timedelta(days=1)


def month_grid_range(anchor: DateLike) -> Tuple[date, date]:
    """Month range widened to whole Monday-start weeks"""
    first, last = month_range(anchor)
    return week_range(first)[0], week_range(last)[1]


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
