"""
tests/test_clock.py
===================

Unit tests for the real and simulated clocks, including persistence of
test-mode state through both preference stores.
"""

import logging
from datetime import datetime, timezone

import pytest

from conftest import REAL_NOW, FixedClock
from periodwatch.clock import (
    ENABLED_KEY,
    INSTANT_KEY,
    MemoryPreferenceStore,
    RealClock,
    SimulatedClock,
)
from periodwatch.db import DBPreferenceStore


def test_real_clock_returns_naive_local_time():
    before = datetime.now()
    now = RealClock().now()
    assert now.tzinfo is None
    assert before <= now <= datetime.now()


def test_default_state_is_disabled_real_time(real_clock):
    clock = SimulatedClock(MemoryPreferenceStore(), real_clock)
    assert clock.enabled is False
    assert clock.simulated_instant == REAL_NOW
    assert clock.now() == REAL_NOW


def test_setting_instant_does_not_enable(real_clock):
    clock = SimulatedClock(MemoryPreferenceStore(), real_clock)
    clock.set_simulated_instant(datetime(2025, 5, 15))
    assert clock.simulated_instant == datetime(2025, 5, 15)
    assert clock.now() == REAL_NOW


def test_enable_returns_simulated_instant(real_clock):
    clock = SimulatedClock(MemoryPreferenceStore(), real_clock)
    clock.set_simulated_instant(datetime(2025, 5, 15, 12))
    clock.set_simulation_enabled(True)
    assert clock.now() == datetime(2025, 5, 15, 12)


def test_disable_resets_instant_to_real_now(real_clock):
    clock = SimulatedClock(MemoryPreferenceStore(), real_clock)
    clock.set_simulated_instant(datetime(2025, 5, 15, 12))
    clock.set_simulation_enabled(True)
    clock.set_simulation_enabled(False)
    assert clock.now() == REAL_NOW
    assert clock.simulated_instant == REAL_NOW


def test_real_time_is_read_fresh_on_every_call():
    real = FixedClock(datetime(2025, 1, 1))
    clock = SimulatedClock(MemoryPreferenceStore(), real)
    real.instant = datetime(2025, 1, 2)
    assert clock.now() == datetime(2025, 1, 2)


def test_aware_instants_are_converted_to_local():
    clock = SimulatedClock(MemoryPreferenceStore(), FixedClock())
    aware = datetime(2025, 5, 15, 12, tzinfo=timezone.utc)
    clock.set_simulated_instant(aware)
    assert clock.simulated_instant.tzinfo is None
    assert clock.simulated_instant == aware.astimezone().replace(tzinfo=None)


def test_state_is_persisted_on_every_change(real_clock):
    store = MemoryPreferenceStore()
    clock = SimulatedClock(store, real_clock)
    clock.set_simulated_instant(datetime(2025, 5, 15, 12, 0, 0, 123456))
    assert store.get(ENABLED_KEY) == "false"
    assert store.get(INSTANT_KEY) == "2025-05-15T12:00:00.123456"
    clock.set_simulation_enabled(True)
    assert store.get(ENABLED_KEY) == "true"


def test_state_survives_restart(real_clock):
    store = MemoryPreferenceStore()
    first = SimulatedClock(store, real_clock)
    first.set_simulated_instant(datetime(2024, 2, 29, 23, 59, 59, 999000))
    first.set_simulation_enabled(True)

    second = SimulatedClock(store, real_clock)
    assert second.enabled is True
    assert second.now() == datetime(2024, 2, 29, 23, 59, 59, 999000)


def test_zulu_instants_are_accepted(real_clock):
    store = MemoryPreferenceStore({ENABLED_KEY: "true", INSTANT_KEY: "2025-05-15T12:00:00Z"})
    clock = SimulatedClock(store, real_clock)
    expected = datetime(2025, 5, 15, 12, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert clock.now() == expected


@pytest.mark.parametrize("stored", [
    {ENABLED_KEY: "yes please", INSTANT_KEY: "2025-05-15T12:00:00"},
    {ENABLED_KEY: "true"},
    {ENABLED_KEY: "true", INSTANT_KEY: "not a date"},
    {ENABLED_KEY: "true", INSTANT_KEY: "2025-13-40"},
])
def test_corrupted_state_falls_back_to_real_time(stored, real_clock, caplog):
    with caplog.at_level(logging.WARNING, logger="periodwatch.clock"):
        clock = SimulatedClock(MemoryPreferenceStore(stored), real_clock)
    assert clock.enabled is False
    assert clock.now() == REAL_NOW
    assert caplog.records, "fallback should be logged"


def test_recovers_after_corrupted_state(real_clock):
    store = MemoryPreferenceStore({ENABLED_KEY: "true", INSTANT_KEY: "garbage"})
    clock = SimulatedClock(store, real_clock)
    clock.set_simulated_instant(datetime(2025, 5, 15))
    clock.set_simulation_enabled(True)
    assert SimulatedClock(store, real_clock).now() == datetime(2025, 5, 15)


# ---------------------------------------------------------------------------
# Database-backed preferences
# ---------------------------------------------------------------------------
def test_db_preference_store_round_trip(session):
    store = DBPreferenceStore(session)
    assert store.get(ENABLED_KEY) is None
    store.set(ENABLED_KEY, "true")
    store.set(ENABLED_KEY, "false")
    assert store.get(ENABLED_KEY) == "false"


def test_simulated_clock_persists_through_database(engine, real_clock):
    from sqlmodel import Session

    with Session(engine) as s:
        clock = SimulatedClock(DBPreferenceStore(s), real_clock)
        clock.set_simulated_instant(datetime(2025, 3, 31, 23, 59, 59, 999000))
        clock.set_simulation_enabled(True)

    with Session(engine) as s:
        restored = SimulatedClock(DBPreferenceStore(s), real_clock)
        assert restored.enabled is True
        assert restored.now() == datetime(2025, 3, 31, 23, 59, 59, 999000)
