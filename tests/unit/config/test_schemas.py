"""Tests for configuration schemas."""

import pytest
from pydantic import ValidationError

from flood_pipeline.config.schemas import (
    REQUIRED_COLUMNS,
    CleaningConfig,
    OutputConfig,
    PipelineConfig,
    PipelineSettings,
    ReportConfig,
)

pytestmark = pytest.mark.fast


class TestDefaults:
    """Default values reproduce the documented report formulas."""

    def test_report_defaults(self):
        reports = ReportConfig()

        assert reports.delay_threshold_days == 30
        assert reports.min_delay_floor == 0.5
        assert reports.min_contractor_projects == 5
        assert reports.top_contractors == 15
        assert reports.reliability_horizon_days == 90
        assert reports.high_risk_threshold == 50

    def test_required_columns(self):
        assert len(REQUIRED_COLUMNS) == 12
        assert REQUIRED_COLUMNS[0] == "Region"
        assert "FundingYear" in REQUIRED_COLUMNS

    def test_output_file_names(self):
        output = OutputConfig()

        assert output.regional_efficiency_file == "report1_regional_efficiency.csv"
        assert output.contractor_reliability_file == "report2_top_contractors.csv"
        assert output.overrun_trends_file == "report3_overruns_trend.csv"
        assert output.summary_file == "summary.json"

    def test_to_log_dict(self):
        assert PipelineConfig().to_log_dict() == {
            "allowed_years": [2021, 2022, 2023],
            "baseline_year": 2021,
            "imputation_strategy": "province_mean",
            "parallel_reports": False,
        }


class TestValidators:
    """Field and model validators."""

    def test_allowed_years_sorted_and_deduplicated(self):
        assert PipelineSettings(allowed_years=[2023, 2021, 2023]).allowed_years == [2021, 2023]

    def test_allowed_years_must_not_be_empty(self):
        with pytest.raises(ValidationError):
            PipelineSettings(allowed_years=[])

    def test_strategy_normalized(self):
        assert CleaningConfig(imputation_strategy=" Province_Mean ").imputation_strategy == (
            "province_mean"
        )

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValidationError, match="imputation_strategy"):
            CleaningConfig(imputation_strategy="nearest")

    def test_lookup_requires_path(self):
        with pytest.raises(ValidationError, match="lookup_path"):
            CleaningConfig(imputation_strategy="lookup")

        config = CleaningConfig(imputation_strategy="lookup", lookup_path="geo.csv")
        assert config.lookup_key == "ProjectId"

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError):
            ReportConfig(delay_threshold_days=-1)

    def test_contractor_limits_must_be_positive(self):
        with pytest.raises(ValidationError):
            ReportConfig(top_contractors=0)

    def test_negative_decimals_rejected(self):
        with pytest.raises(ValidationError):
            OutputConfig(decimals=-1)

    def test_assignment_is_validated(self):
        config = PipelineConfig()

        with pytest.raises(ValidationError):
            config.reports = {"top_contractors": 0}
