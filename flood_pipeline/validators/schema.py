"""Schema validation and the post-filter funding-year invariant.

`validate_schema` fails fast before any transformation; `assert_year_filter`
re-checks the funding-year window after the year filter has run.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

import pandas as pd

from ..config.schemas import REQUIRED_COLUMNS
from ..exceptions import RangeError, SchemaError
from ..utils.logging_config import resolve_logger

if TYPE_CHECKING:
    from loguru import Logger

# Tolerance for "whole number" FundingYear values such as 2021.0000001
INTEGRAL_TOLERANCE = 1e-6


def check_header_duplicates(columns: Iterable[Any]) -> None:
    """Raise SchemaError when any column header appears more than once."""
    counts = Counter(str(c) for c in columns)
    duplicates = [name for name, n in counts.items() if n > 1]
    if duplicates:
        raise SchemaError(
            f"Duplicate column headers found: {', '.join(duplicates)}",
            operation="check_header_duplicates",
            details={"duplicate_columns": duplicates},
        )


def coerce_numeric(values: pd.Series) -> pd.Series:
    """Numeric coercion that tolerates surrounding whitespace; failures become NaN."""
    stripped = values.map(lambda v: v.strip() if isinstance(v, str) else v)
    return pd.to_numeric(stripped, errors="coerce")


def validate_schema(
    df: pd.DataFrame,
    required_columns: Sequence[str] = REQUIRED_COLUMNS,
    log: Logger | None = None,
) -> pd.DataFrame:
    """Validate dataset structure and FundingYear typing.

    Args:
        df: Raw dataset
        required_columns: Columns that must be present
        log: Bound logger for the validate stage

    Returns:
        The input DataFrame, unchanged

    Raises:
        SchemaError: on the first violated rule
    """
    log = resolve_logger(log, "validate")

    if not isinstance(df, pd.DataFrame):
        raise SchemaError("validate_schema expects a DataFrame", operation="validate_schema")
    if len(df) == 0:
        raise SchemaError("Dataset must contain at least one row", operation="validate_schema")

    check_header_duplicates(df.columns)

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise SchemaError(
            f"Missing required columns: {', '.join(missing)}",
            operation="validate_schema",
            details={"missing_columns": missing},
        )

    raw_years = df["FundingYear"]
    numeric = coerce_numeric(raw_years)
    non_numeric = raw_years.notna() & numeric.isna()
    if non_numeric.any():
        examples = raw_years[non_numeric].astype(str).unique()[:5].tolist()
        raise SchemaError(
            "FundingYear contains non-numeric values",
            operation="validate_schema",
            details={"examples": examples, "count": int(non_numeric.sum())},
        )

    fractional = numeric.notna() & ((numeric - numeric.round()).abs() > INTEGRAL_TOLERANCE)
    if fractional.any():
        examples = raw_years[fractional].astype(str).unique()[:5].tolist()
        raise SchemaError(
            "FundingYear must be whole numbers",
            operation="validate_schema",
            details={"examples": examples, "count": int(fractional.sum())},
        )

    log.info(f"schema validated rows={len(df)}")
    return df


def assert_year_filter(
    df: pd.DataFrame,
    allowed_years: Iterable[int] = (2021, 2022, 2023),
    log: Logger | None = None,
) -> pd.DataFrame:
    """Ensure every non-null FundingYear lies in ``allowed_years``.

    Raises:
        RangeError: when any year outside the window remains
    """
    log = resolve_logger(log, "filter")
    allowed = sorted(set(int(y) for y in allowed_years))

    years = coerce_numeric(df["FundingYear"]).dropna().unique()
    invalid = sorted(int(y) if float(y).is_integer() else float(y) for y in years if y not in allowed)
    if invalid:
        raise RangeError(
            f"FundingYear outside allowed range: {', '.join(str(y) for y in invalid)}",
            operation="assert_year_filter",
            invalid_values=invalid,
            allowed_values=allowed,
        )

    log.debug(f"year window verified allowed={allowed}")
    return df
