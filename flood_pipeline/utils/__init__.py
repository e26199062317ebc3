"""Shared utilities for the flood-control project pipeline."""

# Date utilities
from .date_utils import parse_date, parse_date_series

# Output writers
from .file_io import ensure_dir, write_csv_atomic, write_json_atomic

# Presentation formatting
from .formatting import format_number, format_report_frame

# Logging
from .logging_config import (
    configure_logging_from_config,
    resolve_logger,
    setup_logging,
    stage_logger,
)

__all__ = [
    "configure_logging_from_config",
    "ensure_dir",
    "format_number",
    "format_report_frame",
    "parse_date",
    "parse_date_series",
    "resolve_logger",
    "setup_logging",
    "stage_logger",
    "write_csv_atomic",
    "write_json_atomic",
]
