"""
tests/test_cli.py
=================

Tests for the ``periodwatch`` command-line front end.  The clock and the
registry are monkeypatched so nothing touches the real database.
"""

import json
from datetime import datetime

import pytest

from conftest import REAL_NOW, FixedClock
from periodwatch import cli
from periodwatch.clock import MemoryPreferenceStore, SimulatedClock
from periodwatch.models import ComplianceRecord, ComplianceType
from periodwatch.registry import RecordRegistry


@pytest.fixture
def store():
    return MemoryPreferenceStore()


@pytest.fixture(autouse=True)
def wiring(monkeypatch, store):
    reg = RecordRegistry()
    reg.add_type(ComplianceType("supervision", "Supervision", "quarterly"))
    reg.add_record(ComplianceRecord("emp-1", "supervision", "2025-Q1", "completed",
                                    completion_date=datetime(2025, 3, 12)))
    monkeypatch.setattr(cli, "build_clock", lambda: SimulatedClock(store, FixedClock()))
    monkeypatch.setattr(cli, "_registry", lambda: reg)
    return reg


def test_period_at_instant(capsys):
    assert cli.main(["period", "-f", "quarterly", "--at", "2025-05-15"]) == 0
    out = capsys.readouterr().out.strip()
    assert out == "2025-Q2\t2025-04-01T00:00:00.000000\t2025-06-30T23:59:59.999000"


def test_period_uses_real_time_when_test_mode_is_off(capsys):
    cli.main(["period", "-f", "annual"])
    assert capsys.readouterr().out.startswith(f"{REAL_NOW.year}\t")


def test_window(capsys):
    assert cli.main(["window", "2025-W01", "-f", "weekly"]) == 0
    assert capsys.readouterr().out.strip() == "2024-12-30T00:00:00.000000\t2025-01-05T23:59:59.999000"


def test_overdue(capsys):
    cli.main(["overdue", "2025-Q1", "-f", "quarterly", "--at", "2025-04-01T00:00:00"])
    assert capsys.readouterr().out.strip() == "2025-Q1\toverdue=yes\tstatus=overdue"


def test_malformed_identifier_exits_2(capsys):
    assert cli.main(["window", "2025-Q5", "-f", "quarterly"]) == 2
    assert "2025-Q5" in capsys.readouterr().err


def test_unknown_frequency_exits_2(capsys):
    assert cli.main(["period", "-f", "fortnightly", "--at", "2025-05-15"]) == 2
    assert "fortnightly" in capsys.readouterr().err


def test_bad_instant_exits_2(capsys):
    assert cli.main(["period", "-f", "annual", "--at", "yesterday"]) == 2
    assert "invalid input" in capsys.readouterr().err


def test_test_mode_round_trip(capsys, store):
    assert cli.main(["test-mode", "set", "2025-05-15T12:00:00"]) == 0
    assert cli.main(["test-mode", "on"]) == 0
    out = capsys.readouterr().out.splitlines()[-1]
    assert out.startswith("test mode enabled\tsimulated=2025-05-15T12:00:00.000000")
    assert out.endswith("now=2025-05-15T12:00:00.000000")

    cli.main(["period", "-f", "monthly"])
    assert capsys.readouterr().out.startswith("2025-05\t")

    cli.main(["test-mode", "off"])
    assert capsys.readouterr().out.startswith("test mode disabled")


def test_test_mode_set_requires_instant(capsys):
    assert cli.main(["test-mode", "set"]) == 1
    assert "requires" in capsys.readouterr().err


def test_preset_apply(capsys):
    cli.main(["test-mode", "set", "2025-06-15T00:00:00"])
    cli.main(["test-mode", "on"])
    capsys.readouterr()
    assert cli.main(["preset", "start-of-next-period", "-f", "annual", "--apply"]) == 0
    assert capsys.readouterr().out.strip() == "2026-12-31T23:59:59.999000"

    cli.main(["test-mode", "status"])
    assert "simulated=2026-12-31T23:59:59.999000" in capsys.readouterr().out


def test_preset_now_uses_real_clock(capsys):
    cli.main(["preset", "now"])
    assert capsys.readouterr().out.strip() == REAL_NOW.isoformat(timespec="microseconds")


def test_summary_json(capsys):
    assert cli.main(["summary", "emp-1", "--at", "2025-05-15T12:00:00", "--json"]) == 0
    body = json.loads(capsys.readouterr().out)
    assert [i["period"] for i in body["due"]] == ["2025-Q2"]
    assert [i["period"] for i in body["completed"]] == ["2025-Q1"]


def test_summary_text(capsys):
    cli.main(["summary", "emp-1", "--at", "2025-05-15T12:00:00"])
    out = capsys.readouterr().out
    assert "Due (1)" in out
    assert "Completed (1)" in out


def test_chart(tmp_path, capsys):
    out = tmp_path / "charts" / "emp-1.png"
    assert cli.main(["chart", "emp-1", "--at", "2025-05-15", "--out", str(out)]) == 0
    assert out.exists()


def test_chart_honours_summary_settings(monkeypatch, wiring, tmp_path):
    from periodwatch import viz
    from periodwatch.settings import settings

    wiring.add_type(ComplianceType("appraisal", "Annual Appraisal", "annual"))
    monkeypatch.setattr(settings, "summary_limit", 1)
    monkeypatch.setattr(settings, "recent_completed_months", 0)
    charted = []
    monkeypatch.setattr(viz, "status_summary", lambda summary, *a: charted.append(summary) or tmp_path)

    assert cli.main(["chart", "emp-1", "--at", "2025-05-15T12:00:00"]) == 0
    summary = charted[0]
    assert len(summary.due) == 1
    assert summary.completed == []
