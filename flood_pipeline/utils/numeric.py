"""Null-propagating numeric helpers shared by the report builders.

Aggregates return ``None`` (an explicit optional number) when every input is
missing, never a sentinel such as zero, so that downstream formulas stay null.
"""

from __future__ import annotations

import math
from typing import Any

import pandas as pd


def is_missing(value: Any) -> bool:
    """True for None, NaN, NaT and pandas.NA."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def to_optional_float(value: Any) -> float | None:
    if is_missing(value):
        return None
    return float(value)


def _present(values: pd.Series) -> pd.Series:
    return pd.to_numeric(values, errors="coerce").dropna()


def safe_mean(values: pd.Series) -> float | None:
    """Mean ignoring missing values; None when no value is present."""
    present = _present(values)
    if present.empty:
        return None
    return float(present.mean())


def safe_median(values: pd.Series) -> float | None:
    """Median ignoring missing values; None when no value is present."""
    present = _present(values)
    if present.empty:
        return None
    return float(present.median())


def safe_sum(values: pd.Series) -> float | None:
    """Sum ignoring missing values; None when no value is present."""
    present = _present(values)
    if present.empty:
        return None
    return float(present.sum())


def na_ignoring_sum(values: pd.Series) -> float:
    """Plain sum ignoring missing values; 0.0 for an empty or all-missing input."""
    return float(_present(values).sum())


def percent_where(values: pd.Series, predicate) -> float | None:
    """Percentage of present values satisfying ``predicate``.

    ``predicate`` receives the non-missing values as a float Series and returns a
    boolean Series. None when no value is present.
    """
    present = _present(values).astype(float)
    if present.empty:
        return None
    return float(predicate(present).mean() * 100)


def clamp_0_100(value: float | None) -> float | None:
    """Clamp to [0, 100], preserving None and NaN as None."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return float(min(100.0, max(0.0, value)))
