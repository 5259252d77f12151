"""
api.deps
========

FastAPI dependency providers.

`get_registry` returns a **DBRecordRegistry** so every request reads the
persistent SQLite store; `get_clock` returns the process-wide clock
(simulated when test mode is allowed).  Tests swap either one through
``app.dependency_overrides``.
"""

from functools import lru_cache

from periodwatch.clock import ClockSource, RealClock, SimulatedClock
from periodwatch.db import DBPreferenceStore, create_all
from periodwatch.registry_db import DBRecordRegistry
from periodwatch.settings import Settings, settings


@lru_cache
def get_settings() -> Settings:
    """Return application settings."""
    return settings


@lru_cache
def get_registry() -> DBRecordRegistry:
    """Singleton DB-backed record registry (persists across requests)."""
    create_all()
    return DBRecordRegistry()


@lru_cache
def get_clock() -> ClockSource:
    """Singleton clock; simulated when test mode is allowed."""
    if settings.test_mode_allowed:
        create_all()
        return SimulatedClock(DBPreferenceStore())
    return RealClock()
