"""Presentation formatting for report frames."""

from __future__ import annotations

import re
from collections.abc import Iterable

import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

DEFAULT_PLAIN_COLUMNS = ("FundingYear", "Year", "N", "NProjects")


def format_number(value, decimals: int = 2, thousands_separator: bool = True) -> str:
    """Render a number rounded to ``decimals``; missing values render as ''."""
    if value is None or pd.isna(value):
        return ""
    pattern = f",.{decimals}f" if thousands_separator else f".{decimals}f"
    return format(round(float(value), decimals), pattern)


def format_report_frame(
    df: pd.DataFrame,
    decimals: int = 2,
    thousands_separator: bool = True,
    exclude: Iterable[str] | None = None,
    exclude_regex: str | None = None,
) -> pd.DataFrame:
    """Format numeric columns of a report for presentation.

    Identifier-like columns (``DEFAULT_PLAIN_COLUMNS`` plus ``exclude``) and
    columns matching ``exclude_regex`` keep their values; integer identifiers
    with missing cells are rendered without a trailing ``.0``.
    """
    out = df.copy()
    plain = set(DEFAULT_PLAIN_COLUMNS) | set(exclude or ())
    pattern = re.compile(exclude_regex) if exclude_regex else None

    for col in out.columns:
        series = out[col]
        if not is_numeric_dtype(series) or is_bool_dtype(series):
            continue
        if col in plain or (pattern is not None and pattern.search(str(col))):
            if series.isna().any() and (series.dropna() % 1 == 0).all():
                out[col] = series.astype("Int64")
            continue
        out[col] = series.map(
            lambda v: format_number(v, decimals=decimals, thousands_separator=thousands_separator)
        )
    return out
