"""
periodwatch.registry_db
=======================

SQLite-backed implementation of the RecordRegistry public surface.

This adapter wraps the CRUD helpers in :pymod:`periodwatch.db` so that any
code expecting the in-memory RecordRegistry can switch to a persistent
store without changing its API calls.
"""

from __future__ import annotations

import logging
from typing import Iterator, List

from sqlmodel import Session

from periodwatch.db import SessionLocal, add_record, all_types, find_records, get_type, upsert_type
from periodwatch.models import ComplianceRecord, ComplianceType

logger = logging.getLogger(__name__)


class DBRecordRegistry:
    """
    Drop-in replacement backed by SQLite.

    Methods mirror the in-memory RecordRegistry:
    * add_type(ctype) / get_type(type_id) / types()
    * add_record(rec) / records(...)
    * iteration / len()
    """

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session = session or SessionLocal()

    # ------------------------------------------------------------ types
    def add_type(self, ctype: ComplianceType) -> None:
        upsert_type(self._session, ctype)
        logger.info(f"Saved compliance type {ctype.id!r} ({ctype.frequency})")

    def get_type(self, type_id: str) -> ComplianceType:
        ctype = get_type(self._session, type_id)
        if ctype is None:
            raise KeyError(type_id)
        return ctype

    def types(self) -> List[ComplianceType]:
        return all_types(self._session)

    # ---------------------------------------------------------- records
    def add_record(self, rec: ComplianceRecord) -> None:
        add_record(self._session, rec)
        logger.debug(
            f"Stored {rec.status} record for {rec.entity_id}/{rec.compliance_type_id}/{rec.period_identifier}"
        )

    def records(
        self,
        compliance_type_id: str | None = None,
        period_identifier: str | None = None,
        entity_id: str | None = None,
    ) -> List[ComplianceRecord]:
        return find_records(
            self._session,
            compliance_type_id=compliance_type_id,
            period_identifier=period_identifier,
            entity_id=entity_id,
        )

    # ------------------------------------------------------ dunder helpers
    def __iter__(self) -> Iterator[ComplianceRecord]:
        yield from find_records(self._session)

    def __len__(self) -> int:
        return len(find_records(self._session))

    # ----------------------------------------------------- context manager
    def __enter__(self) -> "DBRecordRegistry":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._session.close()
