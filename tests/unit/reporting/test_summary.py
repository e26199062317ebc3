"""Tests for the scalar run summary."""

import pandas as pd
import pytest
from pydantic import ValidationError

from flood_pipeline.models.summary import SummaryMetrics
from flood_pipeline.reporting.summary import build_summary

pytestmark = pytest.mark.fast


class TestBuildSummary:
    def test_counts_and_totals(self, derived_frame, log_messages):
        df = derived_frame(
            [
                {"Contractor": "Alpha", "Province": "Cebu", "CostSavings": 100, "CompletionDelayDays": 10},
                {"Contractor": "Alpha", "Province": "Bohol", "CostSavings": None, "CompletionDelayDays": 20},
                {"Contractor": None, "Province": None, "CostSavings": -40, "CompletionDelayDays": None},
            ]
        )

        summary = build_summary(df)

        assert summary.total_projects == 3
        assert summary.total_contractors == 1
        assert summary.total_provinces == 2
        assert summary.global_avg_delay == 15.0
        assert summary.total_savings == 60.0
        assert any("summary computed projects=3" in m for m in log_messages)

    def test_all_null_savings_sum_to_zero(self, derived_frame):
        df = derived_frame([{"CostSavings": None, "CompletionDelayDays": None}])

        summary = build_summary(df)

        # unlike the per-group report sums, the summary total never goes null
        assert summary.total_savings == 0.0
        assert summary.global_avg_delay is None

    def test_empty_frame(self, derived_frame):
        empty = derived_frame([{}]).iloc[0:0]

        summary = build_summary(empty)

        assert summary.model_dump() == {
            "total_projects": 0,
            "total_contractors": 0,
            "total_provinces": 0,
            "global_avg_delay": None,
            "total_savings": 0.0,
        }


class TestSummaryMetrics:
    def test_frozen(self):
        summary = SummaryMetrics(total_projects=1, total_contractors=1, total_provinces=1)

        with pytest.raises(ValidationError):
            summary.total_projects = 2

    def test_counts_non_negative(self):
        with pytest.raises(ValidationError):
            SummaryMetrics(total_projects=-1, total_contractors=0, total_provinces=0)

    def test_json_field_order(self):
        summary = SummaryMetrics(
            total_projects=2, total_contractors=1, total_provinces=1, global_avg_delay=None
        )

        assert list(summary.model_dump()) == [
            "total_projects",
            "total_contractors",
            "total_provinces",
            "global_avg_delay",
            "total_savings",
        ]
        assert pd.isna(summary.global_avg_delay)
