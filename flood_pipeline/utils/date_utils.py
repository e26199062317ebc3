"""Date parsing utilities for heterogeneous source layouts."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

import pandas as pd

from ..config.schemas import DEFAULT_DATE_FORMATS

# Dates a nanosecond Timestamp can hold; Timestamp.min falls after midnight.
EARLIEST_DATE = (pd.Timestamp.min + pd.Timedelta(days=1)).date()
LATEST_DATE = pd.Timestamp.max.date()


def _read_date(value: object, formats: Sequence[str]) -> date | None:
    if value is None:
        return None

    # pandas NaT must be checked before the isinstance checks
    if isinstance(value, (pd.Timestamp, type(pd.NaT))):
        if pd.isna(value):
            return None
        return value.to_pydatetime().date()

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        if pd.isna(value):
            return None
        value = str(value)

    value = " ".join(value.split())
    if not value:
        return None

    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in formats:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    return None


def parse_date(
    value: str | date | datetime | pd.Timestamp | None,
    formats: Sequence[str] = DEFAULT_DATE_FORMATS,
) -> date | None:
    """
    Parse a calendar date from various input layouts.

    ISO strings (including ones with a time part) are tried first, then each
    layout in ``formats`` in order. Unlike a strict parser this never raises:
    anything unparsable becomes None, and so does any date outside
    ``EARLIEST_DATE``..``LATEST_DATE`` (sentinels such as ``9999-12-31``).

    Args:
        value: Date value to parse (string, date, datetime, or pandas Timestamp)
        formats: strptime layouts tried in order

    Returns:
        Parsed date, or None if value is missing, unparsable or out of range
    """
    parsed = _read_date(value, formats)
    if parsed is None or not EARLIEST_DATE <= parsed <= LATEST_DATE:
        return None
    return parsed


def parse_date_series(
    values: pd.Series, formats: Sequence[str] = DEFAULT_DATE_FORMATS
) -> pd.Series:
    """Parse a column into ``datetime64``; unparsable cells become NaT."""
    parsed = pd.Series(
        [parse_date(v, formats) for v in values], index=values.index, name=values.name, dtype=object
    )
    return pd.to_datetime(parsed, errors="coerce")
