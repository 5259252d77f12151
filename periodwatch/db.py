"""
periodwatch.db
==============

SQLite persistence layer for compliance types, compliance records and
test-mode preferences.

This module exposes:

* ``engine`` - a global SQLModel engine built from ``settings.db_url``
* ``SessionLocal`` - a session factory used via ``with SessionLocal() as s:``
* ``create_all()`` - helper to create tables at first run
* ``DBPreferenceStore`` - preference store for the simulated clock
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Session, SQLModel, create_engine, select

from periodwatch.models import ComplianceRecord, ComplianceType
from periodwatch.settings import settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
def make_engine(url: str | None = None, echo: bool | None = None):
    """Create an engine; in-memory SQLite URLs share one connection."""
    url = url or settings.db_url
    echo = settings.db_echo if echo is None else echo
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo)


engine = make_engine()


# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
def SessionLocal() -> Session:  # noqa: N802 (factory camel-case for consistency with FastAPI docs)
    """Return a new Session bound to the global engine."""
    return Session(engine)


# ---------------------------------------------------------------------------
# ORM models mirroring periodwatch.models
# ---------------------------------------------------------------------------
class ComplianceTypeDB(SQLModel, table=True):
    """Row form of :class:`periodwatch.models.ComplianceType`."""

    __tablename__ = "compliance_types"

    id: str = Field(primary_key=True)
    name: str
    frequency: str
    target: str = "employees"

    @classmethod
    def from_type(cls, ctype: ComplianceType) -> "ComplianceTypeDB":
        return cls(
            id=ctype.id,
            name=ctype.name,
            frequency=ctype.frequency.value,
            target=ctype.target,
        )

    def to_type(self) -> ComplianceType:
        return ComplianceType(
            id=self.id,
            name=self.name,
            frequency=self.frequency,
            target=self.target,
        )


class ComplianceRecordDB(SQLModel, table=True):
    """
    Row form of :class:`periodwatch.models.ComplianceRecord`.

    Filtering columns (entity, type, period) are indexed because every
    status view looks records up by them.  Datetime columns hold naive
    local time, so they are declared ``timezone=False`` explicitly.
    """

    __tablename__ = "compliance_records"

    id: Optional[int] = Field(default=None, primary_key=True)
    entity_id: str = Field(index=True)
    compliance_type_id: str = Field(index=True)
    period_identifier: str = Field(index=True)
    status: str = "new"
    completion_date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False)))
    completion_method: Optional[str] = None
    updated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False)))

    @classmethod
    def from_record(cls, rec: ComplianceRecord) -> "ComplianceRecordDB":
        return cls(
            entity_id=rec.entity_id,
            compliance_type_id=rec.compliance_type_id,
            period_identifier=rec.period_identifier,
            status=rec.status.value,
            completion_date=rec.completion_date,
            completion_method=rec.completion_method,
            updated_at=rec.updated_at,
        )

    def to_record(self) -> ComplianceRecord:
        return ComplianceRecord(
            entity_id=self.entity_id,
            compliance_type_id=self.compliance_type_id,
            period_identifier=self.period_identifier,
            status=self.status,
            completion_date=self.completion_date,
            completion_method=self.completion_method,
            updated_at=self.updated_at,
        )


class PreferenceDB(SQLModel, table=True):
    """Key-value preference row (test-mode flag and simulated date)."""

    __tablename__ = "preferences"

    key: str = Field(primary_key=True)
    value: str


# ---------------------------------------------------------------------------
# Convenience CRUD helpers
# ---------------------------------------------------------------------------
def upsert_type(s: Session, ctype: ComplianceType) -> None:
    """Insert or update a compliance type row."""
    s.merge(ComplianceTypeDB.from_type(ctype))
    s.commit()


def get_type(s: Session, type_id: str) -> ComplianceType | None:
    """Return a compliance type by id or *None* if missing."""
    row = s.get(ComplianceTypeDB, type_id)
    return row.to_type() if row else None


def all_types(s: Session) -> list[ComplianceType]:
    """Return every compliance type, ordered by name."""
    rows = s.exec(select(ComplianceTypeDB).order_by(ComplianceTypeDB.name)).all()
    return [row.to_type() for row in rows]


def add_record(s: Session, rec: ComplianceRecord) -> None:
    """Append a compliance record row."""
    s.add(ComplianceRecordDB.from_record(rec))
    s.commit()


def find_records(
    s: Session,
    compliance_type_id: str | None = None,
    period_identifier: str | None = None,
    entity_id: str | None = None,
) -> list[ComplianceRecord]:
    """Return records matching every filter given, in insertion order."""
    stmt = select(ComplianceRecordDB)
    if compliance_type_id is not None:
        stmt = stmt.where(ComplianceRecordDB.compliance_type_id == compliance_type_id)
    if period_identifier is not None:
        stmt = stmt.where(ComplianceRecordDB.period_identifier == period_identifier)
    if entity_id is not None:
        stmt = stmt.where(ComplianceRecordDB.entity_id == entity_id)
    rows = s.exec(stmt.order_by(ComplianceRecordDB.id)).all()
    return [row.to_record() for row in rows]


def get_preference(s: Session, key: str) -> str | None:
    row = s.get(PreferenceDB, key)
    return row.value if row else None


def set_preference(s: Session, key: str, value: str) -> None:
    s.merge(PreferenceDB(key=key, value=value))
    s.commit()


class DBPreferenceStore:
    """
    :class:`periodwatch.clock.PreferenceStore` backed by the ``preferences``
    table.  Every ``set`` commits, so a following ``get`` (from any session)
    sees the new value.
    """

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session = session or SessionLocal()

    def get(self, key: str) -> str | None:
        return get_preference(self._session, key)

    def set(self, key: str, value: str) -> None:
        set_preference(self._session, key, value)


# ---------------------------------------------------------------------------
# Utility: create tables
# ---------------------------------------------------------------------------
def create_all(bind=None) -> None:
    """Create all periodwatch tables on *bind* (defaults to the global engine)."""
    SQLModel.metadata.create_all(bind or engine)
    logger.debug("periodwatch schema ensured")
