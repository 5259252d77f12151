"""
Pytest configuration: make sure `import periodwatch` works regardless of
where pytest is invoked.

It prepends the project root (one directory above *tests/*) to
``sys.path`` **before** any tests are collected, and points the global
database engine at an in-memory SQLite URL so no test touches
*periodwatch.db*.
"""

import os
import sys
from datetime import datetime
from pathlib import Path

import pytest

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("PERIODWATCH_DB_URL", "sqlite://")
os.environ.setdefault("MPLBACKEND", "Agg")

from periodwatch.clock import ClockSource  # noqa: E402

# Wall-clock time seen by every FixedClock unless a test says otherwise.
REAL_NOW = datetime(2026, 10, 18, 9, 30)


class FixedClock(ClockSource):
    """Real-clock stand-in that always returns the same instant."""

    def __init__(self, instant: datetime = REAL_NOW) -> None:
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


@pytest.fixture
def real_clock():
    return FixedClock()


@pytest.fixture
def engine():
    """Fresh in-memory database with every periodwatch table."""
    from periodwatch.db import create_all, make_engine

    eng = make_engine("sqlite://")
    create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    from sqlmodel import Session

    with Session(engine) as s:
        yield s
