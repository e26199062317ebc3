"""Configuration schemas using Pydantic for type-safe configuration.

Every constant used by the cleaning, filtering and report stages lives here so
that a run can be re-parameterized from YAML or environment overrides. The
defaults reproduce the documented report formulas exactly.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

REQUIRED_COLUMNS: tuple[str, ...] = (
    "Region",
    "MainIsland",
    "Province",
    "FundingYear",
    "TypeOfWork",
    "StartDate",
    "ActualCompletionDate",
    "ApprovedBudgetForContract",
    "ContractCost",
    "Contractor",
    "Latitude",
    "Longitude",
)

DEFAULT_NA_VALUES: list[str] = ["", "NA", "N/A", "null", "NULL"]

# Tried in order; the first layout that parses wins.
DEFAULT_DATE_FORMATS: list[str] = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y%m%d",
    "%d-%b-%Y",
    "%d-%B-%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%B %d, %Y",
    "%b %d, %Y",
]

IMPUTATION_STRATEGIES = ("province_mean", "lookup")


class PipelineSettings(BaseModel):
    """Run-level settings: environment and the funding-year window."""

    environment: str = Field(default="development", description="Environment name")
    allowed_years: list[int] = Field(
        default_factory=lambda: [2021, 2022, 2023],
        description="FundingYear values retained by the year filter",
    )
    baseline_year: int = Field(default=2021, description="Reference year for YoY savings")
    parallel_reports: bool = Field(
        default=False, description="Build the three reports and the summary concurrently"
    )

    @field_validator("allowed_years")
    @classmethod
    def validate_allowed_years(cls, v: list[int]) -> list[int]:
        """Require a non-empty, de-duplicated, sorted window."""
        if not v:
            raise ValueError("allowed_years must contain at least one year")
        return sorted(set(int(year) for year in v))


class InputConfig(BaseModel):
    """CSV ingestion settings."""

    encoding: str = Field(default="utf-8", description="CSV file encoding")
    na_values: list[str] = Field(
        default_factory=lambda: list(DEFAULT_NA_VALUES),
        description="Tokens read as missing values",
    )


class CleaningConfig(BaseModel):
    """Cleaning and geo-imputation settings."""

    date_formats: list[str] = Field(default_factory=lambda: list(DEFAULT_DATE_FORMATS))
    imputation_strategy: str = Field(
        default="province_mean", description="province_mean | lookup"
    )
    lookup_path: str | None = Field(
        default=None, description="CSV of reference coordinates for the lookup strategy"
    )
    lookup_key: str = Field(default="ProjectId", description="Join key for the lookup strategy")

    @field_validator("imputation_strategy")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in IMPUTATION_STRATEGIES:
            raise ValueError(
                f"imputation_strategy must be one of {list(IMPUTATION_STRATEGIES)}, got {v!r}"
            )
        return v

    @model_validator(mode="after")
    def validate_lookup_path(self) -> "CleaningConfig":
        if self.imputation_strategy == "lookup" and not self.lookup_path:
            raise ValueError("lookup_path is required when imputation_strategy is 'lookup'")
        return self


class ReportConfig(BaseModel):
    """Thresholds used by the three report builders."""

    delay_threshold_days: float = Field(
        default=30, description="Delays strictly above this count towards Delay30Rate"
    )
    min_delay_floor: float = Field(
        default=0.5, description="Lower bound on AvgDelay in the efficiency denominator"
    )
    min_contractor_projects: int = Field(
        default=5, description="Contractors with fewer projects are not ranked"
    )
    top_contractors: int = Field(default=15, description="Maximum contractors ranked by cost")
    reliability_horizon_days: float = Field(
        default=90, description="Delay at which the reliability delay factor reaches zero"
    )
    high_risk_threshold: float = Field(
        default=50, description="ReliabilityIndex below this is flagged High Risk"
    )

    @field_validator(
        "delay_threshold_days",
        "min_delay_floor",
        "reliability_horizon_days",
        "high_risk_threshold",
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Report thresholds must be non-negative")
        return v

    @field_validator("min_contractor_projects", "top_contractors")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Contractor limits must be at least 1")
        return v


class OutputConfig(BaseModel):
    """Artifact names and rendering rules."""

    outdir: str = Field(default="outputs", description="Default output directory")
    regional_efficiency_file: str = "report1_regional_efficiency.csv"
    contractor_reliability_file: str = "report2_top_contractors.csv"
    overrun_trends_file: str = "report3_overruns_trend.csv"
    summary_file: str = "summary.json"
    decimals: int = Field(default=2, description="Decimal places for numeric report values")
    thousands_separator: bool = Field(default=True, description="Render 1,234.00 style numbers")
    plain_integer_columns: list[str] = Field(
        default_factory=lambda: ["FundingYear", "Year", "N", "NProjects"],
        description="Identifier-like numeric columns left unformatted",
    )
    exclude_regex: str | None = Field(
        default=None, description="Additional columns (by regex) left unformatted"
    )

    @field_validator("decimals")
    @classmethod
    def validate_decimals(cls, v: int) -> int:
        if v < 0:
            raise ValueError("decimals must be non-negative")
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="pretty", description="Log format: json or pretty")
    file_path: str | None = Field(default=None, description="Optional log file path")
    max_file_size_mb: int = Field(default=100, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, description="Number of backup log files")
    include_stage: bool = Field(default=True, description="Include pipeline stage in logs")
    include_run_id: bool = Field(default=True, description="Include run ID in logs")
    include_timestamps: bool = Field(default=True, description="Include timestamps in logs")


class PipelineConfig(BaseModel):
    """Root configuration model."""

    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    input: InputConfig = Field(default_factory=InputConfig)
    cleaning: CleaningConfig = Field(default_factory=CleaningConfig)
    reports: ReportConfig = Field(default_factory=ReportConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(validate_assignment=True, extra="allow")

    def to_log_dict(self) -> dict[str, Any]:
        """Compact view of the settings that shape report values."""
        return {
            "allowed_years": self.pipeline.allowed_years,
            "baseline_year": self.pipeline.baseline_year,
            "imputation_strategy": self.cleaning.imputation_strategy,
            "parallel_reports": self.pipeline.parallel_reports,
        }
