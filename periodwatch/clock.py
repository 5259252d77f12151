"""
periodwatch.clock
=================

Injectable "current time" for status derivation.

Two implementations of :class:`ClockSource` are chosen at wiring time:

* :class:`RealClock`      - wall-clock time, read fresh on every call.
* :class:`SimulatedClock` - operator test mode.  When enabled, ``now()``
  returns a chosen instant so overdue/due classification can be previewed
  on arbitrary dates without touching production records.

Simulated-clock state is written through a :class:`PreferenceStore` on
every change and read back on construction, so it survives restarts.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional, Protocol

from .datetime_utils import as_local, format_instant, now_local, parse_instant

logger = logging.getLogger(__name__)

ENABLED_KEY = "periodwatch.test_mode.enabled"
INSTANT_KEY = "periodwatch.test_mode.instant"


class ClockSource(ABC):
    """Anything that can say what time it is."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current instant as a naive local datetime."""
        ...


class RealClock(ClockSource):
    """Wall-clock time."""

    def now(self) -> datetime:
        return now_local()


class PreferenceStore(Protocol):
    """Minimal key-value persistence used by :class:`SimulatedClock`."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryPreferenceStore:
    """Dictionary-backed store; state lives as long as the object."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class SimulatedClock(ClockSource):
    """
    Test-mode clock backed by a preference store.

    Parameters
    ----------
    store : PreferenceStore
        Where ``enabled`` and the simulated instant are persisted.
    real_clock : ClockSource, optional
        Source of real time; defaults to :class:`RealClock`.

    Example
    -------
    >>> clock = SimulatedClock(MemoryPreferenceStore())
    >>> clock.set_simulated_instant(datetime(2025, 5, 15))
    >>> clock.set_simulation_enabled(True)
    >>> clock.now()
    datetime.datetime(2025, 5, 15, 0, 0)
    """

    def __init__(self, store: PreferenceStore, real_clock: Optional[ClockSource] = None) -> None:
        self._store = store
        self._real = real_clock or RealClock()
        self._enabled, self._instant = self._load()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _load(self) -> tuple[bool, datetime]:
        raw_enabled = self._store.get(ENABLED_KEY)
        raw_instant = self._store.get(INSTANT_KEY)

        if raw_enabled is None and raw_instant is None:
            return False, self._real.now()

        if raw_enabled not in (None, "true", "false"):
            logger.warning(f"Ignoring corrupted test-mode flag {raw_enabled!r}; using real time")
            return False, self._real.now()

        if raw_instant is None:
            if raw_enabled == "true":
                logger.warning("Test mode enabled without a simulated date; using real time")
            return False, self._real.now()

        try:
            instant = parse_instant(raw_instant)
        except ValueError:
            logger.warning(f"Ignoring unparseable simulated date {raw_instant!r}; using real time")
            return False, self._real.now()

        return raw_enabled == "true", instant

    def _persist(self) -> None:
        self._store.set(ENABLED_KEY, "true" if self._enabled else "false")
        self._store.set(INSTANT_KEY, format_instant(self._instant))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def simulated_instant(self) -> datetime:
        return self._instant

    @property
    def real_clock(self) -> ClockSource:
        return self._real

    def now(self) -> datetime:
        if self._enabled:
            return self._instant
        return self._real.now()

    def set_simulation_enabled(self, enabled: bool) -> None:
        """Toggle test mode.  Disabling discards the chosen date."""
        self._enabled = bool(enabled)
        if not self._enabled:
            self._instant = self._real.now()
        logger.info(f"Test mode {'enabled' if self._enabled else 'disabled'}")
        self._persist()

    def set_simulated_instant(self, instant: datetime) -> None:
        """Store *instant*; does not enable simulation by itself."""
        self._instant = as_local(instant)
        logger.info(f"Simulated date set to {format_instant(self._instant)}")
        self._persist()
