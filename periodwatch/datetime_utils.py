"""
periodwatch.datetime_utils
==========================

Small date helpers shared by the period calculator, the preset navigator
and the simulated clock.

All instants handled by periodwatch are *naive* datetimes in local
wall-clock time.  Aware values are converted on the way in.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

# Last representable millisecond of a day; period windows end here.
END_OF_DAY = time(23, 59, 59, 999000)
ONE_MS = timedelta(milliseconds=1)


def now_local() -> datetime:
    """Current local time.

    Wrapped so tests can patch it.
    """
    return datetime.now()


def as_local(value: datetime | date) -> datetime:
    """Return *value* as a naive local datetime (dates become midnight)."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime string into a naive local datetime."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return as_local(datetime.fromisoformat(text))


def format_instant(value: datetime) -> str:
    """ISO-8601 with microseconds, so :func:`parse_instant` round-trips exactly."""
    return as_local(value).isoformat(timespec="microseconds")


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY)


def last_day_of_month(year: int, month: int) -> date:
    """Last calendar day of *month* (handles leap years and December 9999)."""
    return date(year, month, calendar.monthrange(year, month)[1])


def add_months(value: datetime, months: int) -> datetime:
    """
    Calendar-aware month arithmetic.

    The day of month is clamped to the target month's length, so
    Jan 31 + 1 month is Feb 28 (or 29), never a day in March.
    """
    month_index = value.year * 12 + (value.month - 1) + months
    year, month0 = divmod(month_index, 12)
    day = min(value.day, last_day_of_month(year, month0 + 1).day)
    return value.replace(year=year, month=month0 + 1, day=day)


def add_years(value: datetime, years: int) -> datetime:
    """Calendar-aware year arithmetic (Feb 29 clamps to Feb 28)."""
    return add_months(value, years * 12)
