"""
periodwatch.models
==================

Dataclasses and enums for compliance periods, compliance records and the
statuses derived from them.  Like the rest of the core these objects carry
no external-library dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from functools import total_ordering
from typing import List, Optional

from .datetime_utils import ONE_MS
from .exceptions import UnknownFrequencyError


class Frequency(str, Enum):
    """How often a compliance obligation recurs."""
    ANNUAL = "annual"
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    BI_ANNUAL = "bi-annual"
    WEEKLY = "weekly"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "Frequency | str") -> "Frequency":
        """
        Coerce *value* to a Frequency.

        Strings are matched case-insensitively against the enum values.
        Anything else raises :class:`UnknownFrequencyError`; there is no
        silent fallback to annual.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnknownFrequencyError(value)


class RecordStatus(str, Enum):
    """Status stored on a compliance record by the persistence layer."""
    COMPLETED = "completed"
    PENDING = "pending"
    OVERDUE = "overdue"
    NEW = "new"
    COMPLIANT = "compliant"  # legacy rows, same meaning as COMPLETED

    def __str__(self) -> str:
        return self.value

    @property
    def is_completed(self) -> bool:
        return self in (RecordStatus.COMPLETED, RecordStatus.COMPLIANT)


class DerivedStatus(str, Enum):
    """Presentation status of an (entity, period) pair.  Never persisted."""
    COMPLETED = "completed"
    DUE = "due"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"

    def __str__(self) -> str:
        return self.value


@total_ordering
@dataclass(frozen=True)
class Period:
    """
    One recurrence window of a frequency.

    Parameters
    ----------
    frequency : Frequency
        Frequency the period belongs to.
    year : int
        Calendar year (ISO week-numbering year for weekly periods).
    number : int
        Quarter (1-4), month (1-12), half (1-2) or ISO week (1-53).
        Always 1 for annual periods.

    ``str(period)`` is the canonical, zero-padded identifier used as the
    lookup key against persisted records.
    """
    frequency: Frequency
    year: int
    number: int = 1

    def __post_init__(self):
        object.__setattr__(self, "frequency", Frequency.parse(self.frequency))

    def __str__(self) -> str:
        freq = self.frequency
        if freq is Frequency.ANNUAL:
            return f"{self.year:04d}"
        if freq is Frequency.QUARTERLY:
            return f"{self.year:04d}-Q{self.number}"
        if freq is Frequency.MONTHLY:
            return f"{self.year:04d}-{self.number:02d}"
        if freq is Frequency.BI_ANNUAL:
            return f"{self.year:04d}-H{self.number}"
        if freq is Frequency.WEEKLY:
            return f"{self.year:04d}-W{self.number:02d}"
        raise UnknownFrequencyError(freq)

    @property
    def identifier(self) -> str:
        return str(self)

    def __lt__(self, other: "Period") -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        if other.frequency is not self.frequency:
            raise TypeError(
                f"cannot order {self.frequency} period against {other.frequency} period"
            )
        return (self.year, self.number) < (other.year, other.number)


@dataclass(frozen=True)
class PeriodWindow:
    """
    Bounds of a period, ``end`` at 23:59:59.999 of its last day.

    Windows have millisecond resolution: the instant after ``end`` is
    ``end + 1ms``, which is the next period's ``start``.  Sub-millisecond
    instants inside that last millisecond still belong to this window.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError("period window start must not be after its end")

    @property
    def next_start(self) -> datetime:
        return self.end + ONE_MS

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.next_start


@dataclass
class ComplianceType:
    """
    A recurring obligation (supervision, appraisal, spot check ...).

    Parameters
    ----------
    id : str
        Stable identifier referenced by records.
    name : str
        Display name.
    frequency : Frequency
        Recurrence; strings are coerced.
    target : str, default="employees"
        Which population the obligation applies to ("employees" or "clients").
    """
    id: str
    name: str
    frequency: Frequency
    target: str = "employees"

    def __post_init__(self):
        self.frequency = Frequency.parse(self.frequency)


@dataclass
class ComplianceRecord:
    """
    A persisted compliance row, consumed read-only.

    Parameters
    ----------
    entity_id : str
        Employee or client the record belongs to.
    compliance_type_id : str
        The :class:`ComplianceType` it fulfils.
    period_identifier : str
        Canonical identifier of the period it covers.
    status : RecordStatus
        Stored status; strings are coerced.
    completion_date : datetime | None
        When the obligation was completed.
    completion_method : str | None
        Free text, e.g. "in person", "remote".
    updated_at : datetime | None
        Last modification time of the row.
    """
    entity_id: str
    compliance_type_id: str
    period_identifier: str
    status: RecordStatus = RecordStatus.NEW
    completion_date: Optional[datetime] = None
    completion_method: Optional[str] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.status, RecordStatus):
            self.status = RecordStatus(str(self.status).strip().lower())

    @property
    def is_completed(self) -> bool:
        return self.status.is_completed

    @property
    def completed_at(self) -> Optional[datetime]:
        """Completion date, falling back to the last update time."""
        return self.completion_date or self.updated_at


@dataclass
class QuarterlyPeriod:
    """One quarter of a yearly quarterly-compliance timeline."""
    quarter: int
    period: str
    label: str
    status: DerivedStatus
    completed_date: Optional[datetime] = None


@dataclass
class ComplianceItem:
    """One line of an entity's compliance summary."""
    entity_id: str
    compliance_type_id: str
    name: str
    frequency: Frequency
    period: str
    status: DerivedStatus
    completed_date: Optional[datetime] = None
    quarterly_timeline: List[QuarterlyPeriod] = field(default_factory=list)

    @property
    def key(self) -> tuple:
        return (self.entity_id, self.compliance_type_id, self.period)


@dataclass
class ComplianceSummary:
    """Due and completed items for one entity, as shown on its dashboard."""
    entity_id: str
    due: List[ComplianceItem] = field(default_factory=list)
    completed: List[ComplianceItem] = field(default_factory=list)


@dataclass
class PeriodStats:
    """Completion statistics of one period across a population of entities."""
    period_identifier: str
    year: int
    record_count: int
    completion_rate: float
    is_current: bool
    download_available: bool
    archive_due_date: Optional[date] = None
    download_available_date: Optional[date] = None
