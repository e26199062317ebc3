"""Regional Flood Mitigation Efficiency report."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd

from ..utils.logging_config import resolve_logger
from ..utils.numeric import clamp_0_100, percent_where, safe_median, safe_mean, safe_sum

if TYPE_CHECKING:
    from loguru import Logger

COLUMNS = [
    "Region",
    "MainIsland",
    "TotalApprovedBudget",
    "MedianSavings",
    "AvgDelay",
    "Delay30Rate",
    "EfficiencyScore",
]


def efficiency_score(
    median_savings: float | None, avg_delay: float | None, min_delay_floor: float = 0.5
) -> float | None:
    """clamp_0_100(MedianSavings / max(AvgDelay, floor) * 100); None if an input is None."""
    if median_savings is None or avg_delay is None:
        return None
    return clamp_0_100(median_savings / max(avg_delay, min_delay_floor) * 100)


def build_regional_efficiency(
    df: pd.DataFrame,
    delay_threshold_days: float = 30,
    min_delay_floor: float = 0.5,
    log: Logger | None = None,
) -> pd.DataFrame:
    """Aggregate budget, savings and delay per (Region, MainIsland).

    Sorted by EfficiencyScore descending, then Region and MainIsland ascending;
    missing scores sort last.
    """
    log = resolve_logger(log, "report1")

    rows = []
    for (region, island), group in df.groupby(["Region", "MainIsland"], dropna=False, sort=True):
        median_savings = safe_median(group["CostSavings"])
        avg_delay = safe_mean(group["CompletionDelayDays"])
        rows.append(
            {
                "Region": region,
                "MainIsland": island,
                "TotalApprovedBudget": safe_sum(group["ApprovedBudgetForContract"]),
                "MedianSavings": median_savings,
                "AvgDelay": avg_delay,
                "Delay30Rate": percent_where(
                    group["CompletionDelayDays"], lambda d: d > delay_threshold_days
                ),
                "EfficiencyScore": efficiency_score(median_savings, avg_delay, min_delay_floor),
            }
        )

    report = pd.DataFrame(rows, columns=COLUMNS)
    for col in COLUMNS[2:]:
        report[col] = pd.to_numeric(report[col], errors="coerce").astype("float64")

    report = report.sort_values(
        ["EfficiencyScore", "Region", "MainIsland"],
        ascending=[False, True, True],
        na_position="last",
        kind="mergesort",
    ).reset_index(drop=True)

    log.info(f"report1 generated rows={len(report)}")
    return report
