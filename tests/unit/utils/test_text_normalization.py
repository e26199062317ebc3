"""Tests for text normalization utilities."""

import numpy as np
import pandas as pd
import pytest

from flood_pipeline.utils.text_normalization import (
    squish,
    squish_series,
    title_case,
    title_case_series,
)

pytestmark = pytest.mark.fast


class TestSquish:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("  Flood   Control ", "Flood Control"),
            ("a\tb\nc", "a b c"),
            ("", ""),
        ],
    )
    def test_squish(self, value, expected):
        assert squish(value) == expected

    def test_missing_passthrough(self):
        assert squish(None) is None
        assert pd.isna(squish(np.nan))


class TestTitleCase:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("region   ii", "Region Ii"),
            ("ACME builders CORP", "Acme Builders Corp"),
            ("san-juan", "San-Juan"),
            ("o'neil", "O'Neil"),
            ("  ncr  ", "Ncr"),
        ],
    )
    def test_title_case(self, value, expected):
        assert title_case(value) == expected

    def test_idempotent(self):
        once = title_case("  mixed CASE   name ")
        assert title_case(once) == once


def test_series_helpers_keep_missing():
    values = pd.Series(["  leyte  ", None, "SAMAR island"])

    assert title_case_series(values).tolist()[0] == "Leyte"
    assert title_case_series(values).isna().tolist() == [False, True, False]
    assert squish_series(values).tolist()[2] == "SAMAR island"
