"""
periodwatch
===========

Compliance-period calculation and status derivation for recurring HR
obligations (supervisions, appraisals, spot checks ...).

Import structure
----------------
`import periodwatch` is intentionally cheap: none of the sub-modules are
imported by default.  The database layer (*sqlmodel*) and the charts
(*matplotlib*) are only loaded when you import :pymod:`periodwatch.db` or
:pymod:`periodwatch.viz`.

Sub-modules
~~~~~~~~~~~
- :pymod:`periodwatch.models`      – frequencies, periods, records, derived statuses
- :pymod:`periodwatch.periods`     – period identifier ↔ window calculator
- :pymod:`periodwatch.status`      – overdue detection, classification, summaries
- :pymod:`periodwatch.presets`     – test-mode jump targets
- :pymod:`periodwatch.clock`       – real and simulated clocks
- :pymod:`periodwatch.reporting`   – per-period completion statistics
- :pymod:`periodwatch.registry`    – in-memory record registry
- :pymod:`periodwatch.registry_db` – SQLite record registry
- :pymod:`periodwatch.viz`         – plotting helpers

Quick start
-----------
>>> from datetime import datetime
>>> from periodwatch.periods import period_identifier_for
>>> from periodwatch.status import classify
>>> now = datetime(2025, 5, 15)
>>> period_identifier_for(now, "quarterly")
'2025-Q2'
>>> classify(None, "2025-Q1", "quarterly", now)
<DerivedStatus.OVERDUE: 'overdue'>
"""

__all__ = [
    "models",
    "periods",
    "status",
    "presets",
    "clock",
    "reporting",
    "registry",
    "registry_db",
    "viz",
]

__version__ = "0.1.0"
