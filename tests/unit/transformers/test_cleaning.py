"""Tests for cleaning and normalization."""

import numpy as np
import pandas as pd
import pytest

from flood_pipeline.config.schemas import REQUIRED_COLUMNS
from flood_pipeline.exceptions import ConfigurationError
from flood_pipeline.transformers.cleaning import (
    clean_data,
    coerce_coordinate,
    coerce_funding_year,
    normalize_fields,
    parse_money,
)
from flood_pipeline.transformers.derivation import derive_fields

pytestmark = pytest.mark.fast


class TestParseMoney:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1,250.50", 1250.5),
            ("Php 1,250.50", 1250.5),
            ("₱ 2,000,000", 2000000.0),
            ("-300", -300.0),
            (" 42 ", 42.0),
            (1500, 1500.0),
        ],
    )
    def test_parsable(self, value, expected):
        assert parse_money(value) == expected

    @pytest.mark.parametrize("value", [None, "", "n/a", "abc", "1.2.3", np.nan])
    def test_unparsable(self, value):
        assert parse_money(value) is None


class TestCoercions:
    def test_coordinate_out_of_range_becomes_missing(self):
        values = pd.Series(["14.5", "91", "-90", "north", None])

        result = coerce_coordinate(values, -90.0, 90.0)

        assert result.tolist()[0] == 14.5
        assert result.tolist()[2] == -90.0
        assert result.isna().tolist() == [False, True, False, True, True]

    def test_funding_year_rounded(self):
        result = coerce_funding_year(pd.Series(["2021", "2022.0", " 2023 ", None, "inf"]))

        assert str(result.dtype) == "Int64"
        assert result.tolist()[:3] == [2021, 2022, 2023]
        assert result.isna().tolist() == [False, False, False, True, True]


class TestNormalizeFields:
    def test_types_and_text(self, raw_frame):
        df = raw_frame(
            [
                {
                    "Region": "  region   vii ",
                    "Contractor": "ACME  builders",
                    "TypeOfWork": "  Construction   of  Levee ",
                    "StartDate": "01/15/2022",
                    "ActualCompletionDate": "garbage",
                    "ContractCost": "Php 1,500",
                }
            ]
        )

        out = normalize_fields(df)

        assert out.loc[0, "Region"] == "Region Vii"
        assert out.loc[0, "Contractor"] == "Acme Builders"
        assert out.loc[0, "TypeOfWork"] == "Construction of Levee"
        assert out.loc[0, "StartDate"] == pd.Timestamp("2022-01-15")
        assert pd.isna(out.loc[0, "ActualCompletionDate"])
        assert out.loc[0, "ContractCost"] == 1500.0
        assert out.loc[0, "ApprovedBudgetForContract"] == 1000.0
        # input untouched
        assert df.loc[0, "ContractCost"] == "Php 1,500"


class TestCleanData:
    def test_province_mean_imputation(self, raw_frame, log_messages):
        df = raw_frame(
            [
                {"Province": "Cebu", "Latitude": "10", "Longitude": "120"},
                {"Province": "Cebu", "Latitude": "12", "Longitude": "122"},
                {"Province": "Cebu", "Latitude": None, "Longitude": None},
            ]
        )

        cleaned = clean_data(df)

        assert cleaned.loc[2, "Latitude"] == pytest.approx(11.0)
        assert cleaned.loc[2, "Longitude"] == pytest.approx(121.0)
        assert any("cleaning applied imputed_pairs=1" in m for m in log_messages)

    def test_single_missing_coordinate_not_imputed(self, raw_frame):
        df = raw_frame(
            [
                {"Province": "Cebu", "Latitude": "10", "Longitude": "120"},
                {"Province": "Cebu", "Latitude": None, "Longitude": "121"},
            ]
        )

        cleaned = clean_data(df)

        assert pd.isna(cleaned.loc[1, "Latitude"])
        assert cleaned.loc[1, "Longitude"] == 121.0

    def test_out_of_range_pair_is_imputed(self, raw_frame):
        df = raw_frame(
            [
                {"Province": "Leyte", "Latitude": "11", "Longitude": "125"},
                {"Province": "Leyte", "Latitude": "95", "Longitude": "200"},
            ]
        )

        cleaned = clean_data(df)

        assert cleaned.loc[1, "Latitude"] == 11.0
        assert cleaned.loc[1, "Longitude"] == 125.0

    def test_province_without_reference_stays_missing(self, raw_frame):
        df = raw_frame(
            [
                {"Province": "Samar", "Latitude": None, "Longitude": None},
                {"Province": None, "Latitude": None, "Longitude": None},
            ]
        )

        cleaned = clean_data(df)

        assert cleaned["Latitude"].isna().all()
        assert cleaned["Longitude"].isna().all()

    def test_column_order_preserved(self, raw_frame):
        df = raw_frame()
        df.insert(0, "ProjectId", "P-1")

        cleaned = clean_data(df)

        assert list(cleaned.columns) == ["ProjectId", *REQUIRED_COLUMNS]

    def test_lookup_strategy(self, raw_frame):
        df = raw_frame(
            [
                {"Latitude": None, "Longitude": None},
                {"Latitude": None, "Longitude": None},
            ]
        )
        df.insert(0, "ProjectId", ["P-1", "P-2"])
        lookup = pd.DataFrame(
            {"ProjectId": [" P-1 ", "P-3"], "Latitude": ["7.1", "8"], "Longitude": ["125.6", "126"]}
        )

        cleaned = clean_data(df, imputation_strategy="lookup", geo_lookup=lookup)

        assert cleaned.loc[0, "Latitude"] == 7.1
        assert cleaned.loc[0, "Longitude"] == 125.6
        assert pd.isna(cleaned.loc[1, "Latitude"])

    def test_lookup_strategy_requires_table(self, raw_frame):
        with pytest.raises(ConfigurationError, match="geo_lookup is required"):
            clean_data(raw_frame(), imputation_strategy="lookup")


class TestCleanThenDerive:
    """Cleaning chained into derivation, as the pipeline runs them."""

    def test_three_row_imputation_and_derivation(self, raw_frame):
        df = raw_frame(
            [
                {
                    "Province": "Cebu",
                    "Latitude": "10.3",
                    "Longitude": "123.9",
                    "ApprovedBudgetForContract": "1,500,000",
                    "ContractCost": "1,650,000",
                    "StartDate": "2022-03-01",
                    "ActualCompletionDate": "2022-02-20",
                },
                {"Province": "Cebu", "Latitude": None, "Longitude": None},
                {"Province": "Cebu", "Latitude": None, "Longitude": "124.1"},
            ]
        )

        derived = derive_fields(clean_data(df))

        assert derived.loc[0, "Latitude"] == 10.3
        assert derived.loc[0, "Longitude"] == 123.9
        assert derived.loc[1, "Latitude"] == pytest.approx(10.3)
        assert derived.loc[1, "Longitude"] == pytest.approx(123.9)
        assert pd.isna(derived.loc[2, "Latitude"])
        assert derived.loc[2, "Longitude"] == 124.1

        first = derived.loc[0]
        assert first["CostSavings"] == first["ApprovedBudgetForContract"] - first["ContractCost"]
        assert first["CostSavings"] == -150000.0
        assert first["CompletionDelayDays"] == -9.0

    @pytest.mark.parametrize("column", ["StartDate", "ActualCompletionDate"])
    @pytest.mark.parametrize("value", ["9999-12-31", "1/1/2500", "0001-01-01", "12/31/1600"])
    def test_dates_outside_timestamp_range(self, raw_frame, column, value):
        df = raw_frame([{column: value}, {}])

        derived = derive_fields(clean_data(df))

        assert pd.isna(derived.loc[0, column])
        assert np.isnan(derived.loc[0, "CompletionDelayDays"])
        assert derived.loc[1, "CompletionDelayDays"] == 31.0
