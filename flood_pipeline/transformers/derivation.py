"""Derived analytic columns and the funding-year filter."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import pandas as pd

from ..utils.logging_config import resolve_logger

if TYPE_CHECKING:
    from loguru import Logger


def derive_fields(df: pd.DataFrame, log: Logger | None = None) -> pd.DataFrame:
    """Add ``CostSavings`` and ``CompletionDelayDays``.

    CostSavings = ApprovedBudgetForContract - ContractCost (negative is an overrun).
    CompletionDelayDays = ActualCompletionDate - StartDate in whole days, negative
    allowed. Missing inputs give missing outputs.
    """
    log = resolve_logger(log, "derive")
    out = df.copy()

    out["CostSavings"] = out["ApprovedBudgetForContract"] - out["ContractCost"]
    start = pd.to_datetime(out["StartDate"], errors="coerce")
    end = pd.to_datetime(out["ActualCompletionDate"], errors="coerce")
    out["CompletionDelayDays"] = (end - start).dt.days.astype("float64")

    overruns = int((out["CostSavings"] < 0).sum())
    na_delays = int(out["CompletionDelayDays"].isna().sum())
    log.info(f"derivations complete overruns={overruns} na_delays={na_delays}")
    return out


def filter_years(
    df: pd.DataFrame,
    years: Iterable[int] = (2021, 2022, 2023),
    log: Logger | None = None,
) -> pd.DataFrame:
    """Keep rows whose FundingYear is non-null and in ``years``."""
    log = resolve_logger(log, "filter")
    allowed = [int(y) for y in years]

    keep = df["FundingYear"].notna() & df["FundingYear"].isin(allowed)
    filtered = df[keep.fillna(False).astype(bool)].copy()

    log.info(f"year filter applied dropped={len(df) - len(filtered)}")
    return filtered
