"""Pydantic model for the scalar run summary."""

from pydantic import BaseModel, ConfigDict, Field


class SummaryMetrics(BaseModel):
    """Scalar rollup over the filtered, derived dataset."""

    total_projects: int = Field(..., ge=0, description="Number of projects")
    total_contractors: int = Field(..., ge=0, description="Distinct non-null contractors")
    total_provinces: int = Field(..., ge=0, description="Distinct non-null provinces")
    global_avg_delay: float | None = Field(
        None, description="Mean CompletionDelayDays; null when no delay is known"
    )
    total_savings: float = Field(
        0.0, description="Sum of CostSavings ignoring nulls; 0 for an empty set"
    )

    model_config = ConfigDict(frozen=True)
