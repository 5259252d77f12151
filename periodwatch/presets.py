"""
periodwatch.presets
===================

Preset navigator for test mode.

Deterministic transforms of the current (usually simulated) date that
operator tooling uses to jump the simulated clock to interesting boundary
dates.  Nothing here touches the clock; the caller feeds the result into
:meth:`periodwatch.clock.SimulatedClock.set_simulated_instant`.

>>> from datetime import datetime
>>> end_of_current_period(datetime(2025, 6, 15), "annual")
datetime.datetime(2025, 12, 31, 23, 59, 59, 999000)
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from .clock import ClockSource, RealClock
from .datetime_utils import add_months, add_years, as_local
from .models import Frequency
from .periods import period_for, window_for

# Length of one period in calendar months (weekly is handled separately).
_MONTHS_PER_PERIOD = {
    Frequency.ANNUAL: 12,
    Frequency.BI_ANNUAL: 6,
    Frequency.QUARTERLY: 3,
    Frequency.MONTHLY: 1,
}


class Preset(str, Enum):
    """Named jump targets offered by the test-mode panel."""
    END_OF_PERIOD = "end-of-period"
    START_OF_NEXT_PERIOD = "start-of-next-period"
    ONE_YEAR_AGO = "one-year-ago"
    FIVE_YEARS_AGO = "five-years-ago"
    NOW = "now"

    def __str__(self) -> str:
        return self.value


def end_of_current_period(current: datetime, frequency: Frequency | str) -> datetime:
    """Last millisecond of the period containing *current*."""
    return window_for(period_for(current, frequency)).end


def start_of_next_period(current: datetime, frequency: Frequency | str) -> datetime:
    """
    End of the current period advanced by one frequency unit.

    Calendar-aware: a monthly jump from Jan 31 lands on the last day of
    February.
    """
    frequency = Frequency.parse(frequency)
    end = end_of_current_period(current, frequency)
    if frequency is Frequency.WEEKLY:
        return end + timedelta(weeks=1)
    return add_months(end, _MONTHS_PER_PERIOD[frequency])


def one_year_ago(current: datetime) -> datetime:
    return add_years(as_local(current), -1)


def five_years_ago(current: datetime) -> datetime:
    return add_years(as_local(current), -5)


def real_now(clock: Optional[ClockSource] = None) -> datetime:
    """Wall-clock time, ignoring any simulation."""
    return (clock or RealClock()).now()


def preset_date(
    preset: Preset | str,
    current: datetime,
    frequency: Frequency | str,
    real_clock: Optional[ClockSource] = None,
) -> datetime:
    """
    Resolve *preset* against *current*.

    Raises
    ------
    ValueError
        *preset* is not a known preset name.
    """
    preset = Preset(preset)
    if preset is Preset.END_OF_PERIOD:
        return end_of_current_period(current, frequency)
    if preset is Preset.START_OF_NEXT_PERIOD:
        return start_of_next_period(current, frequency)
    if preset is Preset.ONE_YEAR_AGO:
        return one_year_ago(current)
    if preset is Preset.FIVE_YEARS_AGO:
        return five_years_ago(current)
    return real_now(real_clock)
