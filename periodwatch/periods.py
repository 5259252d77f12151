"""
periodwatch.periods
===================

Period identifier calculator.

Maps an instant plus a :class:`~periodwatch.models.Frequency` to the
canonical period identifier used as a join key against compliance records,
and maps identifiers back to their :class:`~periodwatch.models.PeriodWindow`.

Canonical identifiers
---------------------
=========  ============  ===========
frequency  format        example
=========  ============  ===========
annual     ``YYYY``      ``2025``
quarterly  ``YYYY-Qn``   ``2025-Q2``
monthly    ``YYYY-MM``   ``2025-05``
bi-annual  ``YYYY-Hn``   ``2025-H1``
weekly     ``YYYY-Wnn``  ``2025-W01``
=========  ============  ===========

Every identifier is zero-padded, so identifiers of one frequency also sort
correctly as plain strings.

>>> from datetime import date
>>> period_identifier_for(date(2025, 5, 15), "quarterly")
'2025-Q2'
>>> period_identifier_for(date(2024, 12, 31), "weekly")
'2025-W01'
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import List

from .datetime_utils import ONE_MS, as_local, end_of_day, last_day_of_month, start_of_day
from .exceptions import MalformedPeriodError
from .models import Frequency, Period, PeriodWindow

# ---------------------------------------------------------------------
# Identifier grammar: frequency → regex with (year, number) groups
# ---------------------------------------------------------------------
_PATTERNS = {
    Frequency.ANNUAL:    re.compile(r"^(\d{4})$"),
    Frequency.QUARTERLY: re.compile(r"^(\d{4})-Q(\d)$"),
    Frequency.MONTHLY:   re.compile(r"^(\d{4})-(\d{2})$"),
    Frequency.BI_ANNUAL: re.compile(r"^(\d{4})-H(\d)$"),
    Frequency.WEEKLY:    re.compile(r"^(\d{4})-W(\d{2})$"),
}

# Highest valid period number per frequency (weekly depends on the year).
_MAX_NUMBER = {
    Frequency.ANNUAL: 1,
    Frequency.QUARTERLY: 4,
    Frequency.MONTHLY: 12,
    Frequency.BI_ANNUAL: 2,
}

# Supported years.  Windows of 9999 (the last weekly one ends in year 10000)
# cannot be represented by ``datetime``.
MIN_YEAR = 1
MAX_YEAR = 9998


def _check_year(year: int, frequency: Frequency, identifier: str) -> None:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise MalformedPeriodError(
            identifier, frequency.value, f"year must be between {MIN_YEAR} and {MAX_YEAR}"
        )


# ---------------------------------------------------------------------
# ISO week helpers
# ---------------------------------------------------------------------
def iso_week(day: date) -> tuple[int, int]:
    """
    Return ``(iso_year, week)`` for *day*.

    Shift to the Thursday of the day's ISO week; that Thursday's calendar
    year is the ISO year and ``ceil(day_of_year / 7)`` is the week number.
    """
    thursday = day + timedelta(days=4 - day.isoweekday())
    day_of_year = thursday.timetuple().tm_yday
    return thursday.year, math.ceil(day_of_year / 7)


def iso_week_one_monday(iso_year: int) -> date:
    """Monday of ISO week 1 (the week holding the year's first Thursday)."""
    jan4 = date(iso_year, 1, 4)
    return jan4 - timedelta(days=jan4.isoweekday() - 1)


def weeks_in_iso_year(iso_year: int) -> int:
    """52 or 53.  Dec 28 always falls in the last ISO week of its year."""
    return iso_week(date(iso_year, 12, 28))[1]


# ---------------------------------------------------------------------
# instant → period
# ---------------------------------------------------------------------
def period_for(instant: datetime | date, frequency: Frequency | str) -> Period:
    """Return the :class:`Period` of *frequency* that contains *instant*."""
    frequency = Frequency.parse(frequency)
    instant = as_local(instant)
    year, month = instant.year, instant.month

    if frequency is Frequency.ANNUAL:
        return Period(frequency, year, 1)
    if frequency is Frequency.QUARTERLY:
        return Period(frequency, year, (month - 1) // 3 + 1)
    if frequency is Frequency.MONTHLY:
        return Period(frequency, year, month)
    if frequency is Frequency.BI_ANNUAL:
        return Period(frequency, year, 1 if month <= 6 else 2)
    if frequency is Frequency.WEEKLY:
        iso_year, week = iso_week(instant.date())
        return Period(frequency, iso_year, week)
    raise AssertionError(f"unhandled frequency {frequency!r}")


def period_identifier_for(instant: datetime | date, frequency: Frequency | str) -> str:
    """Canonical identifier of the period containing *instant*."""
    return str(period_for(instant, frequency))


# ---------------------------------------------------------------------
# identifier → period
# ---------------------------------------------------------------------
def parse_period(identifier: str, frequency: Frequency | str) -> Period:
    """
    Parse a canonical identifier strictly.

    Raises
    ------
    MalformedPeriodError
        Wrong shape for *frequency*, year outside ``MIN_YEAR..MAX_YEAR``,
        or quarter/month/half/week out of range.
    UnknownFrequencyError
        *frequency* is not a known frequency.
    """
    frequency = Frequency.parse(frequency)
    if not isinstance(identifier, str):
        raise MalformedPeriodError(repr(identifier), frequency.value, "not a string")

    match = _PATTERNS[frequency].match(identifier)
    if match is None:
        raise MalformedPeriodError(identifier, frequency.value, "unexpected format")

    year = int(match.group(1))
    number = int(match.group(2)) if match.lastindex and match.lastindex > 1 else 1
    _check_year(year, frequency, identifier)

    if frequency is Frequency.WEEKLY:
        max_number = weeks_in_iso_year(year)
    else:
        max_number = _MAX_NUMBER[frequency]
    if not 1 <= number <= max_number:
        raise MalformedPeriodError(
            identifier, frequency.value, f"period number must be between 1 and {max_number}"
        )
    return Period(frequency, year, number)


# ---------------------------------------------------------------------
# period → window
# ---------------------------------------------------------------------
def window_for(period: Period) -> PeriodWindow:
    """Return the inclusive window of *period*."""
    freq, year, n = period.frequency, period.year, period.number
    _check_year(year, freq, str(period))

    if freq is Frequency.ANNUAL:
        first_month, last_month = 1, 12
    elif freq is Frequency.QUARTERLY:
        first_month, last_month = n * 3 - 2, n * 3
    elif freq is Frequency.MONTHLY:
        first_month, last_month = n, n
    elif freq is Frequency.BI_ANNUAL:
        first_month, last_month = (1, 6) if n == 1 else (7, 12)
    elif freq is Frequency.WEEKLY:
        monday = iso_week_one_monday(year) + timedelta(weeks=n - 1)
        return PeriodWindow(start_of_day(monday), end_of_day(monday + timedelta(days=6)))
    else:
        raise AssertionError(f"unhandled frequency {freq!r}")

    return PeriodWindow(
        start=start_of_day(date(year, first_month, 1)),
        end=end_of_day(last_day_of_month(year, last_month)),
    )


def period_window(identifier: str, frequency: Frequency | str) -> PeriodWindow:
    """Parse *identifier* and return its window; malformed input raises."""
    return window_for(parse_period(identifier, frequency))


# ---------------------------------------------------------------------
# navigation
# ---------------------------------------------------------------------
def next_period(period: Period) -> Period:
    """The period that starts one millisecond after *period* ends."""
    return period_for(window_for(period).end + ONE_MS, period.frequency)


def previous_period(period: Period) -> Period:
    """The period that ends one millisecond before *period* starts."""
    return period_for(window_for(period).start - ONE_MS, period.frequency)


def periods_in_year(year: int, frequency: Frequency | str) -> List[Period]:
    """
    Every period of *frequency* belonging to *year*, oldest first.

    For weekly frequency these are the ISO weeks of ISO year *year*.
    Years outside ``MIN_YEAR..MAX_YEAR`` raise :class:`MalformedPeriodError`.
    """
    frequency = Frequency.parse(frequency)
    _check_year(year, frequency, str(year))
    if frequency is Frequency.WEEKLY:
        count = weeks_in_iso_year(year)
    else:
        count = _MAX_NUMBER[frequency]
    return [Period(frequency, year, n) for n in range(1, count + 1)]
