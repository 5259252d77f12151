"""
periodwatch.viz
===============

Minimal plotting helpers used by the CLI ``chart`` command.  The module
imports *matplotlib*, so it is not imported by ``import periodwatch``.

Outputs are PNGs written to the *images/* folder (auto-created when a
chart is saved).  Filenames can be overridden via keyword argument.
"""
from __future__ import annotations

import os
from collections import Counter
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt

from .models import ComplianceSummary, DerivedStatus, QuarterlyPeriod

# default output dir
_IMG_DIR = Path("images")

STATUS_COLOURS = {
    DerivedStatus.COMPLETED: "#2b9348",
    DerivedStatus.DUE: "#f4a261",
    DerivedStatus.OVERDUE: "#d62828",
    DerivedStatus.UPCOMING: "#8d99ae",
}


def _save(out_path: str | os.PathLike) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_path, dpi=120, bbox_inches="tight")
    plt.close()
    return out_path


# ---------------------------------------------------------------------
# Plot 1 – bar chart of item counts by derived status
# ---------------------------------------------------------------------
def status_summary(
    summary: ComplianceSummary,
    out_path: str | os.PathLike = _IMG_DIR / "compliance_status.png",
) -> Path:
    """
    Generate a bar chart of how many summary items are in each status.

    Parameters
    ----------
    summary : ComplianceSummary
        Output of :func:`periodwatch.status.summarize`.
    out_path : str or Path, default='images/compliance_status.png'
        Where to save the PNG.

    Returns
    -------
    pathlib.Path
        Final image path for convenience.
    """
    counts = Counter(item.status for item in summary.due + summary.completed)
    statuses = list(DerivedStatus)
    ys = [counts.get(s, 0) for s in statuses]

    plt.figure()
    bars = plt.bar([s.value for s in statuses], ys,
                   color=[STATUS_COLOURS[s] for s in statuses], edgecolor="#333")
    # add counts on top of each bar
    for rect, cnt in zip(bars, ys):
        plt.text(rect.get_x() + rect.get_width() / 2,
                 cnt + 0.05,
                 str(cnt),
                 ha="center", va="bottom",
                 fontsize=8, color="#333")
    plt.grid(axis="y", linestyle=":", alpha=0.3)
    plt.title(f"Compliance status – {summary.entity_id}")
    plt.ylabel("Items")
    plt.tight_layout()
    return _save(out_path)


# ---------------------------------------------------------------------
# Plot 2 – quarterly timeline strip
# ---------------------------------------------------------------------
def timeline_chart(
    timeline: Sequence[QuarterlyPeriod],
    out_path: str | os.PathLike = _IMG_DIR / "quarterly_timeline.png",
) -> Path:
    """
    Draw the four quarters of a timeline as coloured blocks labelled with
    their status.
    """
    plt.figure(figsize=(8, 1.8))
    for i, q in enumerate(timeline):
        plt.barh(0, 1, left=i, color=STATUS_COLOURS[q.status], edgecolor="white")
        plt.text(i + 0.5, 0, f"{q.label}\n{q.status.value}",
                 ha="center", va="center", fontsize=8, color="white")
    plt.xlim(0, max(len(timeline), 1))
    plt.axis("off")
    if timeline:
        plt.title(f"Quarterly timeline {timeline[0].period[:4]}")
    plt.tight_layout()
    return _save(out_path)
