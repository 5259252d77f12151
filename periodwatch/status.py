"""
periodwatch.status
==================

Overdue detection and derived-status assembly.

Everything here is a pure function of its arguments: the caller supplies
"now" (usually from a :class:`~periodwatch.clock.ClockSource`) and the
compliance records fetched from the persistence layer.

Classification rule
-------------------
1. a completed record                       → ``completed``
2. the period's window ended before *now*   → ``overdue``
3. the period contains *now*                → ``due``
4. otherwise (period is in the future)      → ``upcoming``
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .datetime_utils import add_months, as_local
from .models import (
    ComplianceItem,
    ComplianceRecord,
    ComplianceSummary,
    ComplianceType,
    DerivedStatus,
    Frequency,
    Period,
    QuarterlyPeriod,
)
from .periods import parse_period, period_for, window_for

QUARTER_LABELS = {
    1: "Q1 Jan to Mar",
    2: "Q2 Apr to Jun",
    3: "Q3 Jul to Sep",
    4: "Q4 Oct to Dec",
}

DEFAULT_SUMMARY_LIMIT = 5
DEFAULT_RECENT_MONTHS = 3


# ---------------------------------------------------------------------
# Single period
# ---------------------------------------------------------------------
def _ended_before(period: Period, current: datetime) -> bool:
    # end < current at millisecond resolution
    return current >= window_for(period).next_start


def is_overdue(period_identifier: str, frequency: Frequency | str, current: datetime) -> bool:
    """True iff the period's window ended strictly before *current*."""
    period = parse_period(period_identifier, frequency)
    return _ended_before(period, as_local(current))


def classify(
    record: Optional[ComplianceRecord],
    period_identifier: str,
    frequency: Frequency | str,
    current: datetime,
) -> DerivedStatus:
    """
    Derive the presentation status of one (entity, period) pair.

    *record* may be ``None`` when nothing has been recorded for the period
    yet; the status then follows from the dates alone.
    """
    period = parse_period(period_identifier, frequency)
    if record is not None and record.is_completed:
        return DerivedStatus.COMPLETED

    current = as_local(current)
    if _ended_before(period, current):
        return DerivedStatus.OVERDUE
    if period == period_for(current, period.frequency):
        return DerivedStatus.DUE
    return DerivedStatus.UPCOMING


def find_record(
    records: Iterable[ComplianceRecord],
    compliance_type_id: str,
    period_identifier: str,
    entity_id: Optional[str] = None,
) -> Optional[ComplianceRecord]:
    """
    Return the record for (entity, type, period), or None.

    When the persistence layer holds several rows for the same key a
    completed one wins; otherwise the first row in input order is used.
    """
    found = None
    for rec in records:
        if rec.compliance_type_id != compliance_type_id:
            continue
        if rec.period_identifier != period_identifier:
            continue
        if entity_id is not None and rec.entity_id != entity_id:
            continue
        if rec.is_completed:
            return rec
        if found is None:
            found = rec
    return found


# ---------------------------------------------------------------------
# Batch views
# ---------------------------------------------------------------------
def quarterly_timeline(
    records: Sequence[ComplianceRecord],
    compliance_type_id: str,
    year: int,
    current: datetime,
    entity_id: Optional[str] = None,
) -> List[QuarterlyPeriod]:
    """Classify Q1..Q4 of *year* independently."""
    timeline = []
    for quarter in range(1, 5):
        identifier = str(Period(Frequency.QUARTERLY, year, quarter))
        record = find_record(records, compliance_type_id, identifier, entity_id)
        status = classify(record, identifier, Frequency.QUARTERLY, current)
        timeline.append(
            QuarterlyPeriod(
                quarter=quarter,
                period=identifier,
                label=QUARTER_LABELS[quarter],
                status=status,
                completed_date=record.completed_at if record is not None else None,
            )
        )
    return timeline


def current_period_item(
    compliance_type: ComplianceType,
    records: Sequence[ComplianceRecord],
    current: datetime,
    entity_id: str,
) -> ComplianceItem:
    """
    Status of *compliance_type*'s current period for one entity.

    Quarterly types additionally carry the timeline of the current year.
    """
    period = period_for(current, compliance_type.frequency)
    identifier = str(period)
    record = find_record(records, compliance_type.id, identifier, entity_id)

    item = ComplianceItem(
        entity_id=entity_id,
        compliance_type_id=compliance_type.id,
        name=compliance_type.name,
        frequency=compliance_type.frequency,
        period=identifier,
        status=classify(record, identifier, compliance_type.frequency, current),
        completed_date=record.completed_at if record is not None else None,
    )
    if compliance_type.frequency is Frequency.QUARTERLY:
        item.quarterly_timeline = quarterly_timeline(
            records, compliance_type.id, period.year, current, entity_id
        )
    return item


def summarize(
    entity_id: str,
    compliance_types: Sequence[ComplianceType],
    records: Sequence[ComplianceRecord],
    current: datetime,
    limit: int = DEFAULT_SUMMARY_LIMIT,
    recent_months: int = DEFAULT_RECENT_MONTHS,
) -> ComplianceSummary:
    """
    Build the due / completed overview for one entity.

    * one current-period item per compliance type;
    * plus records completed in the trailing *recent_months* calendar
      months, newest first, so recently finished work stays visible after
      its period rolls over;
    * an (entity, type, period) key appears at most once across both lists;
    * each list is capped to *limit* entries.
    """
    current = as_local(current)
    own = [r for r in records if r.entity_id == entity_id]
    types_by_id: Dict[str, ComplianceType] = {t.id: t for t in compliance_types}

    due: List[ComplianceItem] = []
    completed: List[ComplianceItem] = []
    seen: set[Tuple[str, str, str]] = set()

    for ctype in compliance_types:
        item = current_period_item(ctype, own, current, entity_id)
        if item.key in seen:
            continue
        seen.add(item.key)
        if item.status is DerivedStatus.COMPLETED:
            completed.append(item)
        else:
            due.append(item)

    window_start = add_months(current, -recent_months)
    recent = [
        r for r in own
        if r.is_completed
        and r.completed_at is not None
        and window_start <= as_local(r.completed_at) <= current
        and r.compliance_type_id in types_by_id
    ]
    recent.sort(key=lambda r: as_local(r.completed_at), reverse=True)

    for rec in recent:
        key = (entity_id, rec.compliance_type_id, rec.period_identifier)
        if key in seen:
            continue
        seen.add(key)
        ctype = types_by_id[rec.compliance_type_id]
        completed.append(
            ComplianceItem(
                entity_id=entity_id,
                compliance_type_id=ctype.id,
                name=ctype.name,
                frequency=ctype.frequency,
                period=rec.period_identifier,
                status=DerivedStatus.COMPLETED,
                completed_date=rec.completed_at,
            )
        )

    return ComplianceSummary(entity_id=entity_id, due=due[:limit], completed=completed[:limit])


def classify_entities(
    entity_ids: Iterable[str],
    records: Sequence[ComplianceRecord],
    compliance_type_id: str,
    period_identifier: str,
    frequency: Frequency | str,
    current: datetime,
) -> Dict[str, DerivedStatus]:
    """Roster view: status of every entity for one period of one type."""
    return {
        entity_id: classify(
            find_record(records, compliance_type_id, period_identifier, entity_id),
            period_identifier,
            frequency,
            current,
        )
        for entity_id in entity_ids
    }
