"""Loguru sinks and run-scoped logger handles.

Stage context lives on the handle, not in globals: ``run_pipeline`` creates one
handle per run with ``stage_logger(run_id)`` and hands ``handle.bind(stage=...)``
to every stage it calls.
"""

from __future__ import annotations

import sys
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

    from ..config.schemas import PipelineConfig

_DEFAULT_EXTRA = {"stage": "-", "run_id": "-"}


def _line_format(include_timestamps: bool, include_stage: bool, include_run_id: bool) -> str:
    fields = [
        ("<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>", include_timestamps),
        ("<level>{level: <8}</level>", True),
        ("<cyan>{extra[stage]: <10}</cyan>", include_stage),
        ("<magenta>{extra[run_id]: <8}</magenta>", include_run_id),
        ("<level>{message}</level>", True),
    ]
    return " | ".join(field for field, enabled in fields if enabled)


def _known_level(level: str) -> str | None:
    """Upper-cased level name if loguru knows it, else None."""
    name = str(level).upper()
    try:
        logger.level(name)
    except ValueError:
        return None
    return name


def setup_logging(
    level: str = "INFO",
    format: str | None = None,
    format_type: str | None = None,
    file_path: str | None = None,
    max_file_size_mb: int = 100,
    backup_count: int = 5,
    include_stage: bool = True,
    include_run_id: bool = True,
    include_timestamps: bool = True,
) -> None:
    """Replace all loguru sinks with a stderr sink and an optional rotating file.

    ``format_type`` wins over ``format``; either is "pretty" or "json". An unknown
    level name logs a warning and falls back to INFO. Console output goes to stderr
    so stdout stays free for command results.
    """
    logger.remove()
    logger.configure(extra=dict(_DEFAULT_EXTRA))

    as_json = (format_type or format or "pretty") == "json"
    line_format = (
        "{message}"
        if as_json
        else _line_format(include_timestamps, include_stage, include_run_id)
    )
    effective_level = _known_level(level) or "INFO"

    logger.add(
        sys.stderr,
        level=effective_level,
        format=line_format,
        serialize=as_json,
        colorize=not as_json,
    )
    if file_path:
        target = Path(file_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            target,
            level=effective_level,
            format=line_format,
            serialize=as_json,
            rotation=f"{max_file_size_mb} MB",
            retention=backup_count,
            encoding="utf-8",
        )

    if effective_level != str(level).upper():
        logger.warning(f"Invalid logging level '{level}' provided; falling back to 'INFO'")


def configure_logging_from_config(config: PipelineConfig, level: str | None = None) -> None:
    """Apply the ``logging`` section of ``config``; ``level`` overrides its level."""
    settings = config.logging
    setup_logging(
        level=level or settings.level,
        format_type=settings.format,
        file_path=settings.file_path,
        max_file_size_mb=settings.max_file_size_mb,
        backup_count=settings.backup_count,
        include_stage=settings.include_stage,
        include_run_id=settings.include_run_id,
        include_timestamps=settings.include_timestamps,
    )


def new_run_id() -> str:
    return uuid.uuid4().hex[:8]


def stage_logger(run_id: str | None = None, stage: str | None = None) -> Logger:
    """Logger handle bound to ``run_id`` (generated if omitted) and optionally a stage."""
    bound = logger.bind(run_id=run_id or new_run_id())
    return bound if stage is None else bound.bind(stage=stage)


def resolve_logger(log: Logger | None, stage: str) -> Logger:
    """Use the caller's handle, or bind the stage name onto the global logger."""
    return log if log is not None else logger.bind(stage=stage)
