"""Text reports for a resolved ViewModel.

statistics_table() gives one row per category (plus an "(all)" row for the
whole retained sample set); statistics_report() renders parameters, the
statistics table and the profiling summary as multi-section TSV suitable for
print() or copy/paste into a spreadsheet.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from violinkit.violin.models import Statistics, ViewModel
from violinkit.violin.settings import ViolinSettings

ALL_ROW = "(all)"

# Columns of the statistics table, in order (after "category").
STATS_COLUMNS = [
    "count",
    "min",
    "confidence_lower",
    "quartile1",
    "median",
    "mean",
    "quartile3",
    "confidence_upper",
    "max",
    "deviation",
    "iqr",
    "span",
    "bandwidth_silverman",
    "bandwidth_actual",
]


def _stats_row(name: str, statistics: Statistics) -> dict:
    values = statistics.to_dict()
    row = {"category": name}
    row.update({k: values[k] for k in STATS_COLUMNS})
    return row


def statistics_table(vm: ViewModel, *, include_all: bool = True) -> pd.DataFrame:
    """One row per category in display order, optionally followed by the "(all)" row."""
    rows = [_stats_row(c.name, c.statistics) for c in vm.categories]
    if include_all and vm.should_render:
        rows.append(_stats_row(ALL_ROW, vm.statistics))
    return pd.DataFrame(rows, columns=["category"] + STATS_COLUMNS)


def profiling_table(vm: ViewModel) -> pd.DataFrame:
    return pd.DataFrame(
        [e.to_dict() for e in vm.profiling],
        columns=["name", "start", "end", "duration_ms"],
    )


def statistics_report(vm: ViewModel, settings: Optional[ViolinSettings] = None) -> str:
    """Produce a TSV report: parameters, statistics table, profiling."""
    settings = settings or ViolinSettings()
    lines: list[str] = []

    lines.append("# Parameters")
    lines.append(f"measure\t{vm.measure_name}")
    lines.append(f"category\t{vm.category_name if vm.category_name else '(none)'}")
    lines.append(f"kernel\t{settings.violin.kernel.value}")
    lines.append(f"resolution\t{settings.violin.resolution.name.lower()}")
    lines.append(f"clamp\t{settings.violin.clamp}")
    lines.append(f"categories_reduced\t{vm.categories_reduced}")
    lines.append("")

    lines.append("# Stats (one row per category)")
    stats_df = statistics_table(vm)
    if len(stats_df) > 0:
        lines.append(stats_df.to_csv(sep="\t", index=False).rstrip("\n"))
    else:
        lines.append("(no data)")
    lines.append("")

    lines.append("# Profiling")
    prof_df = profiling_table(vm)
    if len(prof_df) > 0:
        lines.append(prof_df.to_csv(sep="\t", index=False).rstrip("\n"))
    else:
        lines.append("(none)")

    return "\n".join(lines)
