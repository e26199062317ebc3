"""Annual Project Type Cost Overrun Trends report."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pandas as pd

from ..utils.logging_config import resolve_logger
from ..utils.numeric import is_missing, percent_where, safe_mean

if TYPE_CHECKING:
    from loguru import Logger

COLUMNS = ["FundingYear", "TypeOfWork", "N", "AvgSavings", "OverrunRate", "YoY_vs_2021"]


def _key(value: Any) -> Any:
    # NaN keys never compare equal, so missing types share one dict key.
    return None if is_missing(value) else value


def yoy_change(avg_savings: float | None, baseline: float | None) -> float | None:
    """100 * (AvgSavings - baseline) / |baseline|; None without a usable baseline."""
    if avg_savings is None or baseline is None or baseline == 0:
        return None
    return 100 * (avg_savings - baseline) / abs(baseline)


def build_overrun_trends(
    df: pd.DataFrame,
    baseline_year: int = 2021,
    log: Logger | None = None,
) -> pd.DataFrame:
    """Per (FundingYear, TypeOfWork): count, mean savings, overrun rate and YoY change.

    YoY is measured against the same TypeOfWork's AvgSavings in ``baseline_year``
    and is null for baseline-year rows and for types without a baseline. Rows are
    sorted by FundingYear ascending, then AvgSavings descending.
    """
    log = resolve_logger(log, "report3")

    rows = []
    for (year, work_type), group in df.groupby(
        ["FundingYear", "TypeOfWork"], dropna=False, sort=True
    ):
        rows.append(
            {
                "FundingYear": None if is_missing(year) else int(year),
                "TypeOfWork": work_type,
                "N": len(group),
                "AvgSavings": safe_mean(group["CostSavings"]),
                "OverrunRate": percent_where(group["CostSavings"], lambda s: s < 0),
            }
        )

    baseline = {
        _key(row["TypeOfWork"]): row["AvgSavings"]
        for row in rows
        if row["FundingYear"] == baseline_year
    }
    for row in rows:
        if row["FundingYear"] == baseline_year:
            row["YoY_vs_2021"] = None
        else:
            row["YoY_vs_2021"] = yoy_change(row["AvgSavings"], baseline.get(_key(row["TypeOfWork"])))

    report = pd.DataFrame(rows, columns=COLUMNS)
    report["FundingYear"] = pd.array(report["FundingYear"].tolist(), dtype="Int64")
    report["N"] = report["N"].astype("int64")
    for col in ("AvgSavings", "OverrunRate", "YoY_vs_2021"):
        report[col] = pd.to_numeric(report[col], errors="coerce").astype("float64")

    report = report.sort_values(
        ["FundingYear", "AvgSavings"],
        ascending=[True, False],
        na_position="last",
        kind="mergesort",
    ).reset_index(drop=True)

    log.info(f"report3 generated rows={len(report)}")
    return report
