"""Schema validation and post-filter invariants."""

from .schema import assert_year_filter, check_header_duplicates, validate_schema

__all__ = [
    "assert_year_filter",
    "check_header_duplicates",
    "validate_schema",
]
