"""
periodwatch.exceptions
======================

Errors raised by the period calculator and status deriver.

Both subclass :class:`ValueError` so callers that already guard period
arithmetic with ``except ValueError`` keep working.
"""


class PeriodError(ValueError):
    """Base class for compliance-period calculation errors."""


class MalformedPeriodError(PeriodError):
    """A period identifier does not have the shape its frequency requires."""

    def __init__(self, identifier: str, frequency: str, reason: str = "") -> None:
        self.identifier = identifier
        self.frequency = frequency
        msg = f"malformed {frequency} period identifier {identifier!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class UnknownFrequencyError(PeriodError):
    """Frequency is not one of annual, quarterly, monthly, bi-annual, weekly."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"unknown compliance frequency {value!r}")
