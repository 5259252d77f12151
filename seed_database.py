#!/usr/bin/env python
"""
Seed database with sample compliance types and records.

This script creates sample data so the API and the CLI ``summary`` command
have something meaningful to show.
"""

import sys
from datetime import datetime

from periodwatch.db import create_all
from periodwatch.models import ComplianceRecord, ComplianceType, RecordStatus
from periodwatch.registry_db import DBRecordRegistry

# Compliance types with every supported frequency
SAMPLE_TYPES = [
    ComplianceType(id="supervision", name="Supervision", frequency="quarterly"),
    ComplianceType(id="appraisal", name="Annual Appraisal", frequency="annual"),
    ComplianceType(id="spot-check", name="Spot Check", frequency="monthly", target="clients"),
    ComplianceType(id="medication-competency", name="Medication Competency", frequency="bi-annual"),
    ComplianceType(id="timesheet-review", name="Timesheet Review", frequency="weekly"),
]

SAMPLE_EMPLOYEES = ["emp-001", "emp-002", "emp-003"]
SAMPLE_CLIENTS = ["client-001", "client-002"]


def _records():
    """A mix of completed, pending and overdue rows across 2025."""
    yield ComplianceRecord("emp-001", "supervision", "2025-Q1", RecordStatus.COMPLETED,
                           completion_date=datetime(2025, 3, 12, 10, 30), completion_method="in person")
    yield ComplianceRecord("emp-001", "supervision", "2025-Q2", RecordStatus.PENDING)
    yield ComplianceRecord("emp-001", "appraisal", "2025", RecordStatus.COMPLETED,
                           completion_date=datetime(2025, 4, 2, 14, 0), completion_method="remote")
    yield ComplianceRecord("emp-002", "supervision", "2025-Q1", RecordStatus.OVERDUE)
    yield ComplianceRecord("emp-002", "medication-competency", "2025-H1", RecordStatus.COMPLETED,
                           completion_date=datetime(2025, 2, 20, 9, 15))
    yield ComplianceRecord("emp-003", "timesheet-review", "2025-W20", RecordStatus.NEW)
    yield ComplianceRecord("client-001", "spot-check", "2025-05", RecordStatus.COMPLETED,
                           completion_date=datetime(2025, 5, 8, 11, 0), completion_method="site visit")
    yield ComplianceRecord("client-002", "spot-check", "2025-04", RecordStatus.COMPLIANT,
                           updated_at=datetime(2025, 4, 28, 16, 45))


def seed_database():
    """Populate the database with sample compliance data."""
    create_all()
    with DBRecordRegistry() as reg:
        for ctype in SAMPLE_TYPES:
            reg.add_type(ctype)
            print(f"Added compliance type: {ctype.name} ({ctype.frequency})")

        count = 0
        for rec in _records():
            reg.add_record(rec)
            count += 1
        print(f"Added {count} compliance records")
        print(f"Employees: {', '.join(SAMPLE_EMPLOYEES)}; clients: {', '.join(SAMPLE_CLIENTS)}")


if __name__ == "__main__":
    try:
        seed_database()
        print("Database seeded successfully!")
    except Exception as e:
        print(f"Error seeding database: {e}")
        sys.exit(1)
