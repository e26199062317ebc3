"""Summary metrics for the run."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd

from ..models.summary import SummaryMetrics
from ..utils.logging_config import resolve_logger
from ..utils.numeric import na_ignoring_sum, safe_mean

if TYPE_CHECKING:
    from loguru import Logger


def build_summary(df: pd.DataFrame, log: Logger | None = None) -> SummaryMetrics:
    """Count projects, contractors and provinces; average delay; total savings.

    Unlike the per-group report aggregates, ``total_savings`` is a plain
    NA-ignoring sum and is 0 for an empty or all-null input.
    """
    log = resolve_logger(log, "summary")

    summary = SummaryMetrics(
        total_projects=len(df),
        total_contractors=int(df["Contractor"].nunique(dropna=True)),
        total_provinces=int(df["Province"].nunique(dropna=True)),
        global_avg_delay=safe_mean(df["CompletionDelayDays"]),
        total_savings=na_ignoring_sum(df["CostSavings"]),
    )

    log.info(f"summary computed projects={summary.total_projects}")
    return summary
