"""Top Contractors Performance Ranking report."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd

from ..utils.logging_config import resolve_logger
from ..utils.numeric import clamp_0_100, safe_mean, safe_sum, to_optional_float

if TYPE_CHECKING:
    from loguru import Logger

COLUMNS = [
    "Contractor",
    "NProjects",
    "TotalCost",
    "AvgDelay",
    "TotalSavings",
    "ReliabilityIndex",
    "RiskFlag",
]

HIGH_RISK = "High Risk"
OK = "OK"


def reliability_index(
    avg_delay: float | None,
    total_savings: float | None,
    total_cost: float | None,
    horizon_days: float = 90,
) -> float | None:
    """clamp_0_100((1 - AvgDelay/horizon) * (TotalSavings / max(TotalCost, 1)) * 100)."""
    if avg_delay is None or total_savings is None or total_cost is None:
        return None
    return clamp_0_100((1 - avg_delay / horizon_days) * (total_savings / max(total_cost, 1)) * 100)


def risk_flag(index: float | None, threshold: float = 50) -> str:
    """'High Risk' below the threshold; a missing index is reported as 'OK'."""
    if index is not None and index < threshold:
        return HIGH_RISK
    return OK


def aggregate_contractors(df: pd.DataFrame) -> pd.DataFrame:
    """Per-contractor project count, cost, delay and savings, in contractor order."""
    rows = [
        {
            "Contractor": contractor,
            "NProjects": len(group),
            "TotalCost": safe_sum(group["ContractCost"]),
            "AvgDelay": safe_mean(group["CompletionDelayDays"]),
            "TotalSavings": safe_sum(group["CostSavings"]),
        }
        for contractor, group in df.groupby("Contractor", dropna=False, sort=True)
    ]
    aggregated = pd.DataFrame(rows, columns=COLUMNS[:5])
    aggregated["NProjects"] = aggregated["NProjects"].astype("int64")
    for col in ("TotalCost", "AvgDelay", "TotalSavings"):
        aggregated[col] = pd.to_numeric(aggregated[col], errors="coerce").astype("float64")
    return aggregated


def build_contractor_reliability(
    df: pd.DataFrame,
    min_projects: int = 5,
    top_n: int = 15,
    horizon_days: float = 90,
    high_risk_threshold: float = 50,
    log: Logger | None = None,
) -> pd.DataFrame:
    """Rank eligible contractors by reliability.

    Contractors with fewer than ``min_projects`` projects are dropped, the
    ``top_n`` by TotalCost are kept, then rows are sorted by ReliabilityIndex
    descending, TotalCost descending and Contractor ascending.
    """
    log = resolve_logger(log, "report2")

    aggregated = aggregate_contractors(df)
    eligible = aggregated[aggregated["NProjects"] >= min_projects]
    top = eligible.sort_values(
        "TotalCost", ascending=False, na_position="last", kind="mergesort"
    ).head(top_n)

    report = top.copy()
    report["ReliabilityIndex"] = [
        reliability_index(
            to_optional_float(row.AvgDelay),
            to_optional_float(row.TotalSavings),
            to_optional_float(row.TotalCost),
            horizon_days,
        )
        for row in report.itertuples(index=False)
    ]
    report["ReliabilityIndex"] = pd.to_numeric(report["ReliabilityIndex"], errors="coerce").astype(
        "float64"
    )
    report["RiskFlag"] = [
        risk_flag(to_optional_float(v), high_risk_threshold) for v in report["ReliabilityIndex"]
    ]

    report = (
        report[COLUMNS]
        .sort_values(
            ["ReliabilityIndex", "TotalCost", "Contractor"],
            ascending=[False, False, True],
            na_position="last",
            kind="mergesort",
        )
        .reset_index(drop=True)
    )

    log.info(
        f"report2 generated rows={len(report)} eligible={len(eligible)} "
        f"high_risk={int((report['RiskFlag'] == HIGH_RISK).sum())}"
    )
    return report
