"""Conservative coordinate imputation.

Both strategies share one rule: a row is a candidate only when its latitude AND
longitude are both missing. A row holding a single coordinate is never touched,
whatever reference data exists for it.

- `impute_coordinates_by_province`: fill from the mean of the province's rows
  that carry both coordinates.
- `impute_coordinates_from_lookup`: fill from a reference table keyed on an
  identifier column, when that table holds a complete pair for the key.

Both return ``(imputed_copy, imputed_mask)``; the input frame is not modified.
"""

from __future__ import annotations

import pandas as pd

from ..exceptions import SchemaError
from ..validators.schema import coerce_numeric

LAT = "Latitude"
LON = "Longitude"


def both_coordinates_missing(df: pd.DataFrame) -> pd.Series:
    return df[LAT].isna() & df[LON].isna()


def compute_province_geo_stats(df: pd.DataFrame) -> pd.DataFrame:
    """Mean latitude/longitude per province over rows with both coordinates.

    Returns:
        DataFrame indexed by Province with columns ``lat_mean`` and ``lon_mean``;
        provinces without a complete-coordinate row are absent.
    """
    complete = df[df["Province"].notna() & df[LAT].notna() & df[LON].notna()]
    return complete.groupby("Province", sort=True).agg(
        lat_mean=(LAT, "mean"), lon_mean=(LON, "mean")
    )


def impute_coordinates_by_province(
    df: pd.DataFrame, geo_stats: pd.DataFrame | None = None
) -> tuple[pd.DataFrame, pd.Series]:
    """Fill both coordinates from the province mean where both are missing."""
    out = df.copy()
    if geo_stats is None:
        geo_stats = compute_province_geo_stats(out)

    lat_fill = out["Province"].map(geo_stats["lat_mean"])
    lon_fill = out["Province"].map(geo_stats["lon_mean"])
    mask = both_coordinates_missing(out) & out["Province"].notna() & lat_fill.notna()

    out.loc[mask, LAT] = lat_fill[mask]
    out.loc[mask, LON] = lon_fill[mask]
    return out, mask


def _normalize_key(values: pd.Series) -> pd.Series:
    return values.map(lambda v: str(v).strip(), na_action="ignore")


def impute_coordinates_from_lookup(
    df: pd.DataFrame, geo_lookup: pd.DataFrame, key: str
) -> tuple[pd.DataFrame, pd.Series]:
    """Fill both coordinates from a reference table keyed on ``key``.

    Lookup keys are trimmed and lookup coordinates numerically coerced (blank
    strings count as missing). The first lookup row wins for a repeated key.

    Raises:
        SchemaError: when ``key`` or a coordinate column is absent from either table
    """
    required = [key, LAT, LON]
    for name, table in (("dataset", df), ("geo lookup", geo_lookup)):
        missing = [c for c in required if c not in table.columns]
        if missing:
            raise SchemaError(
                f"{name} is missing columns required for lookup imputation: {', '.join(missing)}",
                operation="impute_coordinates_from_lookup",
                details={"missing_columns": missing, "key": key},
            )

    out = df.copy()
    for col in (LAT, LON):
        out[col] = coerce_numeric(out[col])

    lookup = pd.DataFrame(
        {
            "key": _normalize_key(geo_lookup[key]),
            LAT: coerce_numeric(geo_lookup[LAT]),
            LON: coerce_numeric(geo_lookup[LON]),
        }
    )
    lookup = lookup.dropna(subset=["key"]).drop_duplicates(subset="key", keep="first")
    lookup = lookup.set_index("key")

    row_keys = _normalize_key(out[key])
    lat_fill = row_keys.map(lookup[LAT])
    lon_fill = row_keys.map(lookup[LON])
    mask = both_coordinates_missing(out) & lat_fill.notna() & lon_fill.notna()

    out.loc[mask, LAT] = lat_fill[mask]
    out.loc[mask, LON] = lon_fill[mask]
    return out, mask
