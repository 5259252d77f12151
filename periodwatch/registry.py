"""
periodwatch.registry
====================

An in-memory registry of compliance types and compliance records.

This module is intentionally simple, standard library only, so status
derivation can be unit-tested without a database.  Its public surface is
mirrored by :class:`periodwatch.registry_db.DBRecordRegistry`.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from .models import ComplianceRecord, ComplianceType


class RecordRegistry:
    """
    List-backed store of records plus a dict of compliance types.

    Example
    -------
    >>> from periodwatch.models import ComplianceRecord, ComplianceType
    >>> reg = RecordRegistry()
    >>> reg.add_type(ComplianceType("supervision", "Supervision", "quarterly"))
    >>> reg.add_record(ComplianceRecord("emp-1", "supervision", "2025-Q1", "completed"))
    >>> [r.period_identifier for r in reg.records(compliance_type_id="supervision")]
    ['2025-Q1']
    """

    def __init__(self) -> None:
        self._types: Dict[str, ComplianceType] = {}
        self._records: List[ComplianceRecord] = []

    # ------------------------------------------------------------------
    # Compliance types
    # ------------------------------------------------------------------
    def add_type(self, ctype: ComplianceType) -> None:
        """Insert or overwrite a compliance type."""
        self._types[ctype.id] = ctype

    def get_type(self, type_id: str) -> ComplianceType:
        """Retrieve by id (raise KeyError if not present)."""
        return self._types[type_id]

    def types(self) -> List[ComplianceType]:
        return sorted(self._types.values(), key=lambda t: t.name)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------
    def add_record(self, rec: ComplianceRecord) -> None:
        self._records.append(rec)

    def records(
        self,
        compliance_type_id: Optional[str] = None,
        period_identifier: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> List[ComplianceRecord]:
        """Return records matching every filter given, in insertion order."""
        return [
            r for r in self._records
            if (compliance_type_id is None or r.compliance_type_id == compliance_type_id)
            and (period_identifier is None or r.period_identifier == period_identifier)
            and (entity_id is None or r.entity_id == entity_id)
        ]

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[ComplianceRecord]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)
