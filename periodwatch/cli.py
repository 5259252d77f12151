"""
periodwatch.cli
===============

Command-line front end.

Examples
--------
$ periodwatch period --frequency quarterly --at 2025-05-15
$ periodwatch overdue 2025-Q1 --frequency quarterly
$ periodwatch test-mode set 2025-12-31T23:59:59
$ periodwatch test-mode on
$ periodwatch preset start-of-next-period --frequency monthly --apply
$ periodwatch summary emp-001 --json
$ periodwatch init-db
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
import textwrap
from datetime import datetime
from typing import Optional, Sequence

from periodwatch.clock import ClockSource, RealClock, SimulatedClock
from periodwatch.datetime_utils import format_instant, parse_instant
from periodwatch.exceptions import PeriodError
from periodwatch.models import Frequency
from periodwatch.periods import period_for, period_window, window_for
from periodwatch.presets import Preset, preset_date
from periodwatch.settings import API_HOST, API_PORT, settings
from periodwatch.status import classify, is_overdue, summarize

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------
def _preference_store():
    from periodwatch.db import DBPreferenceStore, create_all

    create_all()
    return DBPreferenceStore()


def _registry():
    from periodwatch.db import create_all
    from periodwatch.registry_db import DBRecordRegistry

    create_all()
    return DBRecordRegistry()


def build_clock() -> ClockSource:
    """Simulated clock when test mode is allowed, otherwise the real clock."""
    if settings.test_mode_allowed:
        return SimulatedClock(_preference_store())
    return RealClock()


def _current(args, clock: Optional[ClockSource] = None) -> datetime:
    if getattr(args, "at", None):
        return parse_instant(args.at)
    return (clock or build_clock()).now()


# ---------------------------------------------------------------------------
# Sub-commands
# ---------------------------------------------------------------------------
def cmd_period(args) -> int:
    period = period_for(_current(args), args.frequency)
    window = window_for(period)
    print(f"{period}\t{format_instant(window.start)}\t{format_instant(window.end)}")
    return 0


def cmd_window(args) -> int:
    window = period_window(args.identifier, args.frequency)
    print(f"{format_instant(window.start)}\t{format_instant(window.end)}")
    return 0


def cmd_overdue(args) -> int:
    current = _current(args)
    overdue = is_overdue(args.identifier, args.frequency, current)
    status = classify(None, args.identifier, args.frequency, current)
    print(f"{args.identifier}\toverdue={'yes' if overdue else 'no'}\tstatus={status}")
    return 0


def cmd_summary(args) -> int:
    current = _current(args)
    reg = _registry()
    summary = summarize(
        args.entity_id,
        reg.types(),
        reg.records(entity_id=args.entity_id),
        current,
        limit=settings.summary_limit,
        recent_months=settings.recent_completed_months,
    )
    if args.json:
        print(json.dumps(dataclasses.asdict(summary), default=str, indent=2))
        return 0
    print(f"Compliance for {summary.entity_id} as of {format_instant(current)}")
    for heading, items in (("Due", summary.due), ("Completed", summary.completed)):
        print(f"{heading} ({len(items)})")
        for item in items:
            print(f"  {item.name:<30} {item.period:<10} {item.status}")
    return 0


def cmd_preset(args) -> int:
    clock = build_clock()
    real = clock.real_clock if isinstance(clock, SimulatedClock) else clock
    target = preset_date(args.preset, clock.now(), args.frequency, real_clock=real)
    if args.apply:
        if not isinstance(clock, SimulatedClock):
            print("test mode is not allowed in this configuration", file=sys.stderr)
            return 1
        clock.set_simulated_instant(target)
    print(format_instant(target))
    return 0


def cmd_test_mode(args) -> int:
    clock = build_clock()
    if not isinstance(clock, SimulatedClock):
        print("test mode is not allowed in this configuration", file=sys.stderr)
        return 1
    if args.action == "on":
        clock.set_simulation_enabled(True)
    elif args.action == "off":
        clock.set_simulation_enabled(False)
    elif args.action == "set":
        if not args.instant:
            print("test-mode set requires an ISO-8601 instant", file=sys.stderr)
            return 1
        clock.set_simulated_instant(parse_instant(args.instant))
    state = "enabled" if clock.enabled else "disabled"
    print(f"test mode {state}\tsimulated={format_instant(clock.simulated_instant)}\tnow={format_instant(clock.now())}")
    return 0


def cmd_init_db(args) -> int:
    from periodwatch.db import create_all

    create_all()
    print("✅ periodwatch schema initialised")
    return 0


def cmd_chart(args) -> int:
    from periodwatch import viz

    current = _current(args)
    reg = _registry()
    summary = summarize(
        args.entity_id,
        reg.types(),
        reg.records(entity_id=args.entity_id),
        current,
        limit=settings.summary_limit,
        recent_months=settings.recent_completed_months,
    )
    out = viz.status_summary(summary, args.out) if args.out else viz.status_summary(summary)
    print(f"chart saved to {out}")
    return 0


def cmd_serve(args) -> int:
    import uvicorn

    uvicorn.run("api.main:app", host=args.host, port=args.port)
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="periodwatch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            periodwatch utilities
            ---------------------
            Period identifiers, overdue checks, compliance summaries and the
            test-mode (simulated) clock.
            """
        ),
    )
    sub = parser.add_subparsers(dest="command", required=True)
    frequencies = ", ".join(f.value for f in Frequency)

    p = sub.add_parser("period", help="current period identifier and window")
    p.add_argument("--frequency", "-f", required=True, help=frequencies)
    p.add_argument("--at", help="ISO-8601 instant instead of the clock")
    p.set_defaults(func=cmd_period)

    p = sub.add_parser("window", help="start/end of a period identifier")
    p.add_argument("identifier")
    p.add_argument("--frequency", "-f", required=True, help=frequencies)
    p.set_defaults(func=cmd_window)

    p = sub.add_parser("overdue", help="is a period overdue?")
    p.add_argument("identifier")
    p.add_argument("--frequency", "-f", required=True, help=frequencies)
    p.add_argument("--at", help="ISO-8601 instant instead of the clock")
    p.set_defaults(func=cmd_overdue)

    p = sub.add_parser("summary", help="due/completed overview of one entity")
    p.add_argument("entity_id")
    p.add_argument("--at", help="ISO-8601 instant instead of the clock")
    p.add_argument("--json", action="store_true", help="print JSON")
    p.set_defaults(func=cmd_summary)

    p = sub.add_parser("preset", help="compute a test-mode jump target")
    p.add_argument("preset", choices=[x.value for x in Preset])
    p.add_argument("--frequency", "-f", default=Frequency.ANNUAL.value, help=frequencies)
    p.add_argument("--apply", action="store_true", help="set it as the simulated date")
    p.set_defaults(func=cmd_preset)

    p = sub.add_parser("test-mode", help="show or change the simulated clock")
    p.add_argument("action", choices=["status", "on", "off", "set"])
    p.add_argument("instant", nargs="?", help="ISO-8601 instant for 'set'")
    p.set_defaults(func=cmd_test_mode)

    p = sub.add_parser("init-db", help="create database tables")
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser("chart", help="PNG bar chart of an entity's statuses")
    p.add_argument("entity_id")
    p.add_argument("--at", help="ISO-8601 instant instead of the clock")
    p.add_argument("--out", help="output path")
    p.set_defaults(func=cmd_chart)

    p = sub.add_parser("serve", help="run the HTTP API with uvicorn")
    p.add_argument("--host", default=API_HOST)
    p.add_argument("--port", type=int, default=API_PORT)
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except PeriodError as exc:
        print(f"⛔ {exc}", file=sys.stderr)
        return 2
    except ValueError as exc:
        # unparseable --at / instant arguments
        print(f"⛔ invalid input: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
