"""
periodwatch.reporting
=====================

Per-period completion statistics for the period-management view.

Records are kept for six years: a period's records become downloadable in
October five years after its year, and archiving is due on January 1st six
years after it.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Sequence

from .datetime_utils import as_local
from .models import ComplianceRecord, Frequency, PeriodStats
from .periods import parse_period, period_for, periods_in_year, window_for

ARCHIVE_AFTER_YEARS = 6


def period_stats(
    period_identifier: str,
    frequency: Frequency | str,
    entity_ids: Sequence[str],
    records: Sequence[ComplianceRecord],
    current: datetime,
) -> PeriodStats:
    """
    Completion statistics of one period.

    ``completion_rate`` is the percentage of *entity_ids* with a completed
    record; a record with a completion date counts as completed whatever
    its status says.  *records* should already be filtered to one
    compliance type.
    """
    period = parse_period(period_identifier, frequency)
    current = as_local(current)
    identifier = str(period)

    in_period = [r for r in records if r.period_identifier == identifier]
    population = set(entity_ids)
    completed = {
        r.entity_id for r in in_period
        if r.entity_id in population and (r.is_completed or r.completion_date is not None)
    }
    rate = len(completed) / len(population) * 100 if population else 0.0

    download_available = current.year - period.year >= 1
    archive_year = period.year + ARCHIVE_AFTER_YEARS
    return PeriodStats(
        period_identifier=identifier,
        year=period.year,
        record_count=len(in_period),
        completion_rate=rate,
        is_current=period == period_for(current, period.frequency),
        download_available=download_available,
        archive_due_date=date(archive_year, 1, 1) if download_available else None,
        download_available_date=date(archive_year - 1, 10, 1) if download_available else None,
    )


def year_report(
    year: int,
    frequency: Frequency | str,
    entity_ids: Sequence[str],
    records: Sequence[ComplianceRecord],
    current: datetime,
) -> List[PeriodStats]:
    """Stats for every period of *year* that has started by *current*, newest first."""
    current = as_local(current)
    started = [p for p in periods_in_year(year, frequency) if window_for(p).start <= current]
    return [
        period_stats(str(p), p.frequency, entity_ids, records, current)
        for p in reversed(started)
    ]
