"""Cleaning, geo-imputation and derivation stages."""

from .cleaning import clean_data
from .derivation import derive_fields, filter_years
from .geo_imputation import impute_coordinates_by_province, impute_coordinates_from_lookup

__all__ = [
    "clean_data",
    "derive_fields",
    "filter_years",
    "impute_coordinates_by_province",
    "impute_coordinates_from_lookup",
]
