"""
tests/test_api.py
=================

HTTP tests for the FastAPI app.  The registry and the clock are swapped
through ``app.dependency_overrides`` so every request sees an in-memory
registry and a simulated clock parked on 2025-05-15 12:00.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from conftest import REAL_NOW, FixedClock
from api.deps import get_clock, get_registry
from api.main import app
from periodwatch.clock import MemoryPreferenceStore, RealClock, SimulatedClock
from periodwatch.models import ComplianceRecord, ComplianceType
from periodwatch.registry import RecordRegistry

NOW = datetime(2025, 5, 15, 12, 0)


def _dt(value: str) -> datetime:
    return datetime.fromisoformat(value)


@pytest.fixture
def registry():
    reg = RecordRegistry()
    reg.add_type(ComplianceType("supervision", "Supervision", "quarterly"))
    reg.add_type(ComplianceType("appraisal", "Annual Appraisal", "annual"))
    reg.add_record(ComplianceRecord("emp-1", "supervision", "2025-Q1", "completed",
                                    completion_date=datetime(2025, 3, 12)))
    reg.add_record(ComplianceRecord("emp-2", "supervision", "2025-Q1", "pending"))
    return reg


@pytest.fixture
def clock():
    sim = SimulatedClock(MemoryPreferenceStore(), FixedClock())
    sim.set_simulated_instant(NOW)
    sim.set_simulation_enabled(True)
    return sim


@pytest.fixture
def client(registry, clock):
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_health_check(client):
    assert client.get("/").json()["status"] == "ok"


# ---------------------------------------------------------------------------
# /periods
# ---------------------------------------------------------------------------
def test_current_period_uses_simulated_clock(client):
    r = client.get("/periods/current", params={"frequency": "quarterly"})
    assert r.status_code == 200
    body = r.json()
    assert body["period_identifier"] == "2025-Q2"
    assert _dt(body["start"]) == datetime(2025, 4, 1)
    assert _dt(body["end"]) == datetime(2025, 6, 30, 23, 59, 59, 999000)


def test_current_period_at_explicit_instant(client):
    r = client.get("/periods/current", params={"frequency": "weekly", "at": "2024-12-31T10:00:00"})
    assert r.json()["period_identifier"] == "2025-W01"


def test_year_periods(client):
    r = client.get("/periods/year/2025", params={"frequency": "bi-annual"})
    assert r.json() == ["2025-H1", "2025-H2"]


def test_window_of_identifier(client):
    r = client.get("/periods/2024-02/window", params={"frequency": "monthly"})
    assert _dt(r.json()["end"]) == datetime(2024, 2, 29, 23, 59, 59, 999000)


def test_malformed_identifier_is_400(client):
    r = client.get("/periods/2025-Q5/window", params={"frequency": "quarterly"})
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "unable to compute compliance status"
    assert "2025-Q5" in body["reason"]


def test_unknown_frequency_is_rejected(client):
    r = client.get("/periods/current", params={"frequency": "yearly"})
    assert r.status_code == 422


def test_overdue_endpoint(client):
    body = client.get("/periods/2025-Q1/overdue", params={"frequency": "quarterly"}).json()
    assert body["overdue"] is True
    assert body["status"] == "overdue"
    assert _dt(body["at"]) == NOW

    body = client.get("/periods/2025-Q3/overdue", params={"frequency": "quarterly"}).json()
    assert body["overdue"] is False
    assert body["status"] == "upcoming"


# ---------------------------------------------------------------------------
# compliance types and records
# ---------------------------------------------------------------------------
def test_add_and_list_types(client):
    r = client.post("/compliance-types", json={"id": "spot-check", "name": "Spot Check",
                                               "frequency": "monthly", "target": "clients"})
    assert r.status_code == 201
    ids = [t["id"] for t in client.get("/compliance-types").json()]
    assert ids == ["appraisal", "spot-check", "supervision"]


def test_add_record(client, registry):
    r = client.post("/records", json={"entity_id": "emp-3", "compliance_type_id": "appraisal",
                                      "period_identifier": "2025", "status": "completed",
                                      "completion_date": "2025-05-01T09:00:00"})
    assert r.status_code == 201
    stored = registry.records(entity_id="emp-3")
    assert stored[0].completion_date == datetime(2025, 5, 1, 9)


def test_add_record_for_unknown_type_is_404(client):
    r = client.post("/records", json={"entity_id": "emp-3", "compliance_type_id": "nope",
                                      "period_identifier": "2025"})
    assert r.status_code == 404


def test_add_record_with_wrong_identifier_shape_is_400(client, registry):
    r = client.post("/records", json={"entity_id": "emp-3", "compliance_type_id": "supervision",
                                      "period_identifier": "2025-05"})
    assert r.status_code == 400
    assert registry.records(entity_id="emp-3") == []


# ---------------------------------------------------------------------------
# derived views
# ---------------------------------------------------------------------------
def test_entity_summary(client):
    body = client.get("/entities/emp-1/compliance").json()
    assert body["entity_id"] == "emp-1"
    due = {(i["compliance_type_id"], i["period"], i["status"]) for i in body["due"]}
    assert due == {("supervision", "2025-Q2", "due"), ("appraisal", "2025", "due")}
    assert [(i["period"], i["status"]) for i in body["completed"]] == [("2025-Q1", "completed")]

    supervision = next(i for i in body["due"] if i["compliance_type_id"] == "supervision")
    assert [q["status"] for q in supervision["quarterly_timeline"]] == ["completed", "due", "upcoming", "upcoming"]


def test_summary_follows_the_clock(client, clock):
    clock.set_simulated_instant(datetime(2025, 8, 1))
    body = client.get("/entities/emp-1/compliance").json()
    assert ("supervision", "2025-Q3") in {(i["compliance_type_id"], i["period"]) for i in body["due"]}


def test_timeline(client):
    r = client.get("/compliance-types/supervision/timeline", params={"entity_id": "emp-2"})
    assert [q["status"] for q in r.json()] == ["overdue", "due", "upcoming", "upcoming"]
    assert r.json()[0]["label"] == "Q1 Jan to Mar"


def test_timeline_for_non_quarterly_type_is_400(client):
    r = client.get("/compliance-types/appraisal/timeline", params={"entity_id": "emp-1"})
    assert r.status_code == 400


def test_period_roster(client):
    r = client.get("/compliance-types/supervision/periods/2025-Q1/entities",
                   params=[("entity_id", "emp-1"), ("entity_id", "emp-2")])
    assert r.json() == {"emp-1": "completed", "emp-2": "overdue"}


def test_report(client):
    r = client.get("/compliance-types/supervision/report",
                   params=[("entity_id", "emp-1"), ("entity_id", "emp-2")])
    body = r.json()
    assert [s["period_identifier"] for s in body] == ["2025-Q2", "2025-Q1"]
    assert body[1]["completion_rate"] == pytest.approx(50.0)
    assert body[0]["is_current"] is True


# ---------------------------------------------------------------------------
# /test-mode
# ---------------------------------------------------------------------------
def test_test_mode_state(client):
    body = client.get("/test-mode").json()
    assert body["enabled"] is True
    assert _dt(body["now"]) == NOW


def test_disable_test_mode(client):
    body = client.put("/test-mode", json={"enabled": False}).json()
    assert body["enabled"] is False
    assert _dt(body["now"]) == REAL_NOW
    assert _dt(body["simulated_instant"]) == REAL_NOW


def test_set_instant_and_enable_in_one_call(client, clock):
    clock.set_simulation_enabled(False)
    body = client.put("/test-mode", json={"enabled": True, "instant": "2025-03-31T23:59:59.999"}).json()
    assert _dt(body["now"]) == datetime(2025, 3, 31, 23, 59, 59, 999000)
    assert client.get("/periods/2025-Q1/overdue", params={"frequency": "quarterly"}).json()["overdue"] is False


def test_apply_preset(client):
    r = client.post("/test-mode/presets/end-of-period", params={"frequency": "quarterly"})
    assert _dt(r.json()["simulated_instant"]) == datetime(2025, 6, 30, 23, 59, 59, 999000)

    r = client.post("/test-mode/presets/now")
    assert _dt(r.json()["simulated_instant"]) == REAL_NOW


def test_unknown_preset_is_422(client):
    assert client.post("/test-mode/presets/next-tuesday").status_code == 422


def test_test_mode_unavailable_with_real_clock(client):
    app.dependency_overrides[get_clock] = RealClock
    assert client.get("/test-mode").status_code == 409


# ---------------------------------------------------------------------------
# database-backed registry
# ---------------------------------------------------------------------------
@pytest.fixture
def db_client(engine, clock):
    from sqlmodel import Session

    from periodwatch.registry_db import DBRecordRegistry

    with Session(engine) as s:
        app.dependency_overrides[get_registry] = lambda: DBRecordRegistry(s)
        app.dependency_overrides[get_clock] = lambda: clock
        with TestClient(app) as c:
            yield c
    app.dependency_overrides.clear()


def test_record_with_completion_date_is_stored_in_database(db_client):
    r = db_client.post("/compliance-types", json={"id": "supervision", "name": "Supervision",
                                                  "frequency": "quarterly"})
    assert r.status_code == 201
    r = db_client.post("/records", json={"entity_id": "emp-1", "compliance_type_id": "supervision",
                                         "period_identifier": "2025-Q1", "status": "completed",
                                         "completion_date": "2025-03-12T09:00:00",
                                         "updated_at": "2025-03-12T09:05:00"})
    assert r.status_code == 201

    body = db_client.get("/entities/emp-1/compliance").json()
    assert [(i["period"], _dt(i["completed_date"])) for i in body["completed"]] == [
        ("2025-Q1", datetime(2025, 3, 12, 9, 0)),
    ]


def test_out_of_range_years_are_400(client):
    assert client.get("/periods/year/0", params={"frequency": "weekly"}).status_code == 400
    assert client.get("/periods/year/0", params={"frequency": "annual"}).status_code == 400
    r = client.get("/periods/9999/overdue", params={"frequency": "annual"})
    assert r.status_code == 400
    assert "9999" in r.json()["reason"]
