"""Report builders over the filtered, derived project dataset."""

from .contractor_reliability import build_contractor_reliability
from .overrun_trends import build_overrun_trends
from .regional_efficiency import build_regional_efficiency
from .summary import build_summary

__all__ = [
    "build_contractor_reliability",
    "build_overrun_trends",
    "build_regional_efficiency",
    "build_summary",
]
