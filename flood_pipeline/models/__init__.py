"""Pydantic models for pipeline outputs."""

from .summary import SummaryMetrics

__all__ = ["SummaryMetrics"]
