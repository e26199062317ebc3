"""Text normalization utilities for categorical and named-entity columns.

- `squish`: collapse whitespace runs to a single space and trim the ends.
- `title_case`: squish, then capitalize the first letter of every word and
  lowercase the rest. Words are runs of letters/digits, so "san-juan" becomes
  "San-Juan" and "o'neil" becomes "O'Neil".

Missing values (None/NaN/pd.NA) pass through unchanged.
"""

from __future__ import annotations

import re
from typing import Any

import pandas as pd

_WHITESPACE = re.compile(r"\s+")
_WORD = re.compile(r"[^\W_]+")


def squish(value: Any) -> Any:
    """Collapse internal whitespace and trim.

    Examples:
        >>> squish("  Flood   Control ")
        'Flood Control'
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return value
    return _WHITESPACE.sub(" ", str(value)).strip()


def title_case(value: Any) -> Any:
    """Squish, then title-case each word.

    Examples:
        >>> title_case("region   ii")
        'Region Ii'
        >>> title_case("ACME builders CORP")
        'Acme Builders Corp'
    """
    squished = squish(value)
    if not isinstance(squished, str):
        return squished
    return _WORD.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), squished)


def squish_series(values: pd.Series) -> pd.Series:
    return values.map(squish, na_action="ignore")


def title_case_series(values: pd.Series) -> pd.Series:
    return values.map(title_case, na_action="ignore")
