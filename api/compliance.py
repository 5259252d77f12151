"""
Compliance endpoints.

Compliance types and records are stored through the registry; statuses are
derived on every read against the current (possibly simulated) clock.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from api.deps import get_clock, get_settings, get_registry
from periodwatch.clock import ClockSource
from periodwatch.datetime_utils import as_local
from periodwatch.models import (
    ComplianceRecord,
    ComplianceSummary,
    ComplianceType,
    DerivedStatus,
    Frequency,
    PeriodStats,
    QuarterlyPeriod,
    RecordStatus,
)
from periodwatch.periods import parse_period
from periodwatch.reporting import year_report
from periodwatch.settings import Settings
from periodwatch.status import classify_entities, quarterly_timeline, summarize

logger = logging.getLogger(__name__)

router = APIRouter(tags=["compliance"])


# ---------- request bodies ----------
class ComplianceTypeIn(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    frequency: Frequency
    target: str = "employees"


class ComplianceRecordIn(BaseModel):
    entity_id: str = Field(..., min_length=1)
    compliance_type_id: str = Field(..., min_length=1)
    period_identifier: str
    status: RecordStatus = RecordStatus.NEW
    completion_date: Optional[datetime] = None
    completion_method: Optional[str] = None
    updated_at: Optional[datetime] = None


def _type_or_404(registry, type_id: str) -> ComplianceType:
    try:
        return registry.get_type(type_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Compliance type not found")


# ---------- compliance types ----------
@router.get("/compliance-types", response_model=List[ComplianceType])
def list_types(registry=Depends(get_registry)):
    return registry.types()


@router.post("/compliance-types", status_code=201, response_model=ComplianceType)
def add_type(body: ComplianceTypeIn, registry=Depends(get_registry)):
    ctype = ComplianceType(id=body.id, name=body.name, frequency=body.frequency, target=body.target)
    registry.add_type(ctype)
    return ctype


# ---------- records ----------
@router.post("/records", status_code=201, response_model=ComplianceRecord)
def add_record(body: ComplianceRecordIn, registry=Depends(get_registry)):
    """
    Store a compliance record.

    The period identifier is validated against the type's frequency so a
    malformed key never reaches the store.
    """
    ctype = _type_or_404(registry, body.compliance_type_id)
    parse_period(body.period_identifier, ctype.frequency)
    rec = ComplianceRecord(
        entity_id=body.entity_id,
        compliance_type_id=ctype.id,
        period_identifier=body.period_identifier,
        status=body.status,
        completion_date=as_local(body.completion_date) if body.completion_date else None,
        completion_method=body.completion_method,
        updated_at=as_local(body.updated_at) if body.updated_at else None,
    )
    registry.add_record(rec)
    return rec


# ---------- derived views ----------
@router.get("/entities/{entity_id}/compliance", response_model=ComplianceSummary)
def entity_summary(
    entity_id: str,
    registry=Depends(get_registry),
    clock: ClockSource = Depends(get_clock),
    cfg: Settings = Depends(get_settings),
):
    """Due and completed items of one employee or client."""
    return summarize(
        entity_id,
        registry.types(),
        registry.records(entity_id=entity_id),
        clock.now(),
        limit=cfg.summary_limit,
        recent_months=cfg.recent_completed_months,
    )


@router.get("/compliance-types/{type_id}/timeline", response_model=List[QuarterlyPeriod])
def type_timeline(
    type_id: str,
    entity_id: str = Query(..., min_length=1),
    year: Optional[int] = Query(None, ge=1, le=9999),
    registry=Depends(get_registry),
    clock: ClockSource = Depends(get_clock),
):
    """Q1..Q4 statuses of a quarterly compliance type for one entity."""
    ctype = _type_or_404(registry, type_id)
    if ctype.frequency is not Frequency.QUARTERLY:
        raise HTTPException(status_code=400, detail="Timeline is only available for quarterly compliance types")
    current = clock.now()
    records = registry.records(compliance_type_id=type_id, entity_id=entity_id)
    return quarterly_timeline(records, type_id, year or current.year, current, entity_id)


@router.get(
    "/compliance-types/{type_id}/periods/{identifier}/entities",
    response_model=Dict[str, DerivedStatus],
)
def period_roster(
    type_id: str,
    identifier: str,
    entity_id: List[str] = Query(..., description="Entities to classify"),
    registry=Depends(get_registry),
    clock: ClockSource = Depends(get_clock),
):
    """Status of each requested entity for one period."""
    ctype = _type_or_404(registry, type_id)
    records = registry.records(compliance_type_id=type_id, period_identifier=identifier)
    return classify_entities(entity_id, records, type_id, identifier, ctype.frequency, clock.now())


@router.get("/compliance-types/{type_id}/report", response_model=List[PeriodStats])
def type_report(
    type_id: str,
    entity_id: List[str] = Query(..., description="Population the completion rate is computed over"),
    year: Optional[int] = Query(None, ge=1, le=9999),
    registry=Depends(get_registry),
    clock: ClockSource = Depends(get_clock),
):
    """Per-period completion statistics for a year, newest first."""
    ctype = _type_or_404(registry, type_id)
    current = clock.now()
    records = registry.records(compliance_type_id=type_id)
    logger.debug(f"Building {ctype.frequency} report for {type_id} over {len(entity_id)} entities")
    return year_report(year or current.year, ctype.frequency, entity_id, records, current)
