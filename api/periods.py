"""
Period endpoints.

Expose the period identifier calculator: the period containing a date,
the window of an identifier, overdue checks and the periods of a year.
Every endpoint takes an optional ``at`` instant; without it the current
(possibly simulated) clock time is used.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from api.deps import get_clock
from periodwatch.clock import ClockSource
from periodwatch.datetime_utils import as_local
from periodwatch.models import DerivedStatus, Frequency
from periodwatch.periods import period_for, period_window, periods_in_year, window_for
from periodwatch.status import classify, is_overdue

router = APIRouter(prefix="/periods", tags=["periods"])


class PeriodOut(BaseModel):
    period_identifier: str
    frequency: Frequency
    start: datetime
    end: datetime


class OverdueOut(BaseModel):
    period_identifier: str
    frequency: Frequency
    at: datetime
    overdue: bool
    status: DerivedStatus


def _at(at: Optional[datetime], clock: ClockSource) -> datetime:
    return as_local(at) if at is not None else clock.now()


@router.get("/current", response_model=PeriodOut)
def current_period(
    frequency: Frequency = Query(..., description="Compliance frequency"),
    at: Optional[datetime] = Query(None, description="Instant to evaluate; defaults to the clock"),
    clock: ClockSource = Depends(get_clock),
):
    """Period containing *at* (or now) and its window."""
    period = period_for(_at(at, clock), frequency)
    window = window_for(period)
    return PeriodOut(period_identifier=str(period), frequency=frequency, start=window.start, end=window.end)


@router.get("/year/{year}", response_model=List[str])
def year_periods(year: int, frequency: Frequency = Query(...)):
    """Identifiers of every period of *year*, oldest first."""
    return [str(p) for p in periods_in_year(year, frequency)]


@router.get("/{identifier}/window", response_model=PeriodOut)
def identifier_window(identifier: str, frequency: Frequency = Query(...)):
    """Window of a period identifier; 400 if the identifier is malformed."""
    window = period_window(identifier, frequency)
    return PeriodOut(period_identifier=identifier, frequency=frequency, start=window.start, end=window.end)


@router.get("/{identifier}/overdue", response_model=OverdueOut)
def identifier_overdue(
    identifier: str,
    frequency: Frequency = Query(...),
    at: Optional[datetime] = Query(None),
    clock: ClockSource = Depends(get_clock),
):
    """Overdue flag and record-less status of a period."""
    current = _at(at, clock)
    return OverdueOut(
        period_identifier=identifier,
        frequency=frequency,
        at=current,
        overdue=is_overdue(identifier, frequency, current),
        status=classify(None, identifier, frequency, current),
    )
