"""Configuration loading utilities."""

from flood_pipeline.config.loader import get_config, load_config_from_files, reload_config
from flood_pipeline.config.schemas import REQUIRED_COLUMNS, PipelineConfig

__all__ = [
    "REQUIRED_COLUMNS",
    "PipelineConfig",
    "get_config",
    "load_config_from_files",
    "reload_config",
]
