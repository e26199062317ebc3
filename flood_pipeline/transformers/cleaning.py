"""Cleaning and normalization of raw project records.

Per-cell parse failures are not errors: they degrade to missing values so that
one bad cell cannot abort a batch. The cleaned frame has exactly the input's
columns in the input's order.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from ..config.schemas import DEFAULT_DATE_FORMATS
from ..exceptions import ConfigurationError
from ..utils.date_utils import parse_date_series
from ..utils.logging_config import resolve_logger
from ..utils.text_normalization import squish_series, title_case_series
from ..validators.schema import coerce_numeric
from .geo_imputation import (
    both_coordinates_missing,
    impute_coordinates_by_province,
    impute_coordinates_from_lookup,
)

if TYPE_CHECKING:
    from loguru import Logger

TITLE_CASE_COLUMNS = ("Region", "MainIsland", "Province", "Contractor")
SQUISH_COLUMNS = ("TypeOfWork",)
MONEY_COLUMNS = ("ApprovedBudgetForContract", "ContractCost")
DATE_COLUMNS = ("StartDate", "ActualCompletionDate")
COORDINATE_RANGES = {"Latitude": (-90.0, 90.0), "Longitude": (-180.0, 180.0)}

_NON_MONEY_CHARS = re.compile(r"[^0-9.\-]")


def parse_money(value: Any) -> float | None:
    """Strip everything but digits, '.' and '-', then parse; None if unparsable.

    Examples:
        >>> parse_money("Php 1,250.50")
        1250.5
        >>> parse_money("n/a") is None
        True
    """
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return None if pd.isna(value) else float(value)
    cleaned = _NON_MONEY_CHARS.sub("", str(value))
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_money_series(values: pd.Series) -> pd.Series:
    return pd.Series(
        [parse_money(v) for v in values], index=values.index, name=values.name, dtype="float64"
    )


def coerce_coordinate(values: pd.Series, min_val: float, max_val: float) -> pd.Series:
    """Numeric coercion; values outside [min_val, max_val] become missing, never clamped."""
    numeric = coerce_numeric(values).astype("float64")
    return numeric.where(numeric.isna() | numeric.between(min_val, max_val))


def coerce_funding_year(values: pd.Series) -> pd.Series:
    """Round to the nearest integer after numeric coercion (nullable Int64)."""
    numeric = coerce_numeric(values).astype("float64").replace([np.inf, -np.inf], np.nan)
    return numeric.round().astype("Int64")


def normalize_fields(
    df: pd.DataFrame, date_formats: Sequence[str] = DEFAULT_DATE_FORMATS
) -> pd.DataFrame:
    """Type and normalize every known field; unknown columns pass through."""
    out = df.copy()
    for col in DATE_COLUMNS:
        out[col] = parse_date_series(out[col], date_formats)
    for col in MONEY_COLUMNS:
        out[col] = parse_money_series(out[col])
    out["FundingYear"] = coerce_funding_year(out["FundingYear"])
    for col, (low, high) in COORDINATE_RANGES.items():
        out[col] = coerce_coordinate(out[col], low, high)
    for col in TITLE_CASE_COLUMNS:
        out[col] = title_case_series(out[col])
    for col in SQUISH_COLUMNS:
        out[col] = squish_series(out[col])
    return out


def clean_data(
    df: pd.DataFrame,
    date_formats: Sequence[str] = DEFAULT_DATE_FORMATS,
    imputation_strategy: str = "province_mean",
    geo_lookup: pd.DataFrame | None = None,
    lookup_key: str = "ProjectId",
    log: Logger | None = None,
) -> pd.DataFrame:
    """Normalize raw records and impute coordinates where both are missing.

    Args:
        df: Validated raw dataset
        date_formats: Date layouts tried in order
        imputation_strategy: ``province_mean`` or ``lookup``
        geo_lookup: Reference coordinates for the ``lookup`` strategy
        lookup_key: Join column for the ``lookup`` strategy
        log: Bound logger for the clean stage

    Returns:
        Cleaned copy with the original columns in the original order
    """
    log = resolve_logger(log, "clean")
    original_columns = list(df.columns)

    # Counted on the coerced values: an out-of-range coordinate counts as missing.
    before = normalize_fields(df, date_formats)
    pairs_missing_before = int(both_coordinates_missing(before).sum())

    if imputation_strategy == "lookup":
        if geo_lookup is None:
            raise ConfigurationError(
                "geo_lookup is required for the lookup imputation strategy",
                config_key="cleaning.lookup_path",
                operation="clean_data",
            )
        cleaned, imputed = impute_coordinates_from_lookup(before, geo_lookup, lookup_key)
    else:
        cleaned, imputed = impute_coordinates_by_province(before)

    pairs_missing_after = int(both_coordinates_missing(cleaned).sum())
    log.info(f"cleaning applied imputed_pairs={pairs_missing_before - pairs_missing_after}")
    log.debug(f"imputation strategy={imputation_strategy} rows_imputed={int(imputed.sum())}")

    return cleaned[original_columns]
