"""End-to-end orchestration of the flood-control project pipeline.

Stages run in a fixed order and each returns a new frame:

    ingest -> validate -> clean -> derive -> filter -> reports + summary -> write

Every stage receives the run's logger explicitly, bound with its stage name.
Artifacts are written only after every stage has succeeded, so a failed run
never leaves a partial output set behind.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from .config.loader import get_config
from .config.schemas import REQUIRED_COLUMNS, PipelineConfig
from .exceptions import FloodPipelineError, OutputError
from .extractors.projects_csv import ingest_csv
from .models.summary import SummaryMetrics
from .reporting import (
    build_contractor_reliability,
    build_overrun_trends,
    build_regional_efficiency,
    build_summary,
)
from .transformers.cleaning import clean_data
from .transformers.derivation import derive_fields, filter_years
from .utils.file_io import ensure_dir, write_csv_atomic, write_json_atomic
from .utils.formatting import format_report_frame
from .utils.logging_config import stage_logger
from .validators.schema import assert_year_filter, validate_schema

if TYPE_CHECKING:
    from loguru import Logger


@dataclass(frozen=True)
class PipelineOutputs:
    """Report frames and summary computed from the filtered dataset."""

    regional_efficiency: pd.DataFrame
    contractor_reliability: pd.DataFrame
    overrun_trends: pd.DataFrame
    summary: SummaryMetrics


@dataclass(frozen=True)
class PipelineResult:
    """Everything a completed run produced."""

    regional_efficiency: pd.DataFrame
    contractor_reliability: pd.DataFrame
    overrun_trends: pd.DataFrame
    summary: SummaryMetrics
    artifacts: dict[str, Path] = field(default_factory=dict)


def build_outputs(
    filtered: pd.DataFrame,
    config: PipelineConfig,
    log: Logger,
) -> PipelineOutputs:
    """Build the three reports and the summary from the filtered dataset.

    The four builders only read ``filtered``; when ``parallel_reports`` is set
    they run on a thread pool and the results are joined before returning.
    """
    reports = config.reports
    tasks = {
        "regional_efficiency": lambda: build_regional_efficiency(
            filtered,
            delay_threshold_days=reports.delay_threshold_days,
            min_delay_floor=reports.min_delay_floor,
            log=log.bind(stage="report1"),
        ),
        "contractor_reliability": lambda: build_contractor_reliability(
            filtered,
            min_projects=reports.min_contractor_projects,
            top_n=reports.top_contractors,
            horizon_days=reports.reliability_horizon_days,
            high_risk_threshold=reports.high_risk_threshold,
            log=log.bind(stage="report2"),
        ),
        "overrun_trends": lambda: build_overrun_trends(
            filtered,
            baseline_year=config.pipeline.baseline_year,
            log=log.bind(stage="report3"),
        ),
        "summary": lambda: build_summary(filtered, log=log.bind(stage="summary")),
    }

    if config.pipeline.parallel_reports:
        with ThreadPoolExecutor(max_workers=len(tasks)) as executor:
            futures = {name: executor.submit(task) for name, task in tasks.items()}
            results = {name: future.result() for name, future in futures.items()}
    else:
        results = {name: task() for name, task in tasks.items()}

    return PipelineOutputs(**results)


def _load_geo_lookup(config: PipelineConfig, log: Logger) -> pd.DataFrame | None:
    if config.cleaning.imputation_strategy != "lookup":
        return None
    return ingest_csv(
        config.cleaning.lookup_path,
        na_values=config.input.na_values,
        encoding=config.input.encoding,
        log=log,
    )


def write_outputs(
    outputs: PipelineOutputs,
    outdir: Path,
    config: PipelineConfig,
    log: Logger,
) -> dict[str, Path]:
    """Format the report frames and write all four artifacts atomically.

    Returns:
        Mapping of artifact name to the path written
    """
    out = config.output
    try:
        outdir = ensure_dir(outdir)
    except OSError as e:
        raise OutputError(
            f"Cannot create output directory {outdir}: {e}",
            file_path=str(outdir),
            operation="write_outputs",
            cause=e,
        ) from e
    targets = {
        "regional_efficiency": outdir / out.regional_efficiency_file,
        "contractor_reliability": outdir / out.contractor_reliability_file,
        "overrun_trends": outdir / out.overrun_trends_file,
        "summary": outdir / out.summary_file,
    }

    for name in ("regional_efficiency", "contractor_reliability", "overrun_trends"):
        formatted = format_report_frame(
            getattr(outputs, name),
            decimals=out.decimals,
            thousands_separator=out.thousands_separator,
            exclude=out.plain_integer_columns,
            exclude_regex=out.exclude_regex,
        )
        write_csv_atomic(formatted, targets[name])
        log.debug(f"wrote {targets[name]}")

    write_json_atomic(targets["summary"], outputs.summary.model_dump())
    log.debug(f"wrote {targets['summary']}")

    log.info(f"outputs written dir={outdir}")
    return targets


def run_pipeline(
    input_path: str | Path,
    outdir: str | Path | None = None,
    config: PipelineConfig | None = None,
    log: Logger | None = None,
) -> PipelineResult:
    """Run every stage over ``input_path`` and write artifacts into ``outdir``.

    Args:
        input_path: Project CSV to process
        outdir: Output directory; defaults to ``config.output.outdir``
        config: Pipeline configuration; loaded via ``get_config()`` when omitted
        log: Run-scoped logger; a fresh run id is bound when omitted

    Returns:
        PipelineResult with the report frames, summary and artifact paths

    Raises:
        FloodPipelineError: Any stage failure; nothing is written in that case
    """
    config = config or get_config()
    log = log or stage_logger()
    outdir = Path(outdir or config.output.outdir)

    log.bind(stage="pipeline").info(f"pipeline started input={input_path} outdir={outdir}")
    log.bind(stage="pipeline").debug(f"settings {config.to_log_dict()}")

    try:
        raw = ingest_csv(
            input_path,
            na_values=config.input.na_values,
            encoding=config.input.encoding,
            log=log.bind(stage="ingest"),
        )
        validated = validate_schema(raw, REQUIRED_COLUMNS, log=log.bind(stage="validate"))
        geo_lookup = _load_geo_lookup(config, log.bind(stage="lookup"))
        cleaned = clean_data(
            validated,
            date_formats=config.cleaning.date_formats,
            imputation_strategy=config.cleaning.imputation_strategy,
            geo_lookup=geo_lookup,
            lookup_key=config.cleaning.lookup_key,
            log=log.bind(stage="clean"),
        )
        derived = derive_fields(cleaned, log=log.bind(stage="derive"))
        filtered = filter_years(
            derived, years=config.pipeline.allowed_years, log=log.bind(stage="filter")
        )
        assert_year_filter(
            filtered, allowed_years=config.pipeline.allowed_years, log=log.bind(stage="filter")
        )

        outputs = build_outputs(filtered, config, log)
        artifacts = write_outputs(outputs, outdir, config, log.bind(stage="write"))
    except FloodPipelineError as e:
        log.bind(stage="pipeline", **e.to_dict()).error(f"pipeline failed: {e.message}")
        raise

    log.bind(stage="pipeline").info("pipeline finished")
    return PipelineResult(
        regional_efficiency=outputs.regional_efficiency,
        contractor_reliability=outputs.contractor_reliability,
        overrun_trends=outputs.overrun_trends,
        summary=outputs.summary,
        artifacts=artifacts,
    )
