"""CSV ingestion for flood-control project records.

The extractor performs no transformations: every column is read as text with
the configured NA tokens mapped to missing values, and the original header
order is preserved. Path problems raise InputError; duplicate headers raise
SchemaError before pandas would silently rename them.
"""

from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from ..config.schemas import DEFAULT_NA_VALUES
from ..exceptions import ErrorCode, InputError, wrap_exception
from ..utils.logging_config import resolve_logger
from ..validators.schema import check_header_duplicates

if TYPE_CHECKING:
    from loguru import Logger


def validate_ingest_path(path: str | Path | None) -> Path:
    """Check that ``path`` names an existing, non-empty regular file."""
    if path is None or not str(path).strip():
        raise InputError("Input path must be provided", operation="validate_ingest_path")

    path = Path(path)
    if not path.exists():
        raise InputError(
            f"Input file does not exist: {path}",
            file_path=str(path),
            operation="validate_ingest_path",
            status_code=ErrorCode.FILE_NOT_FOUND,
        )
    if path.is_dir():
        raise InputError(
            "Input path points to a directory, expected a file",
            file_path=str(path),
            operation="validate_ingest_path",
        )
    if path.stat().st_size == 0:
        raise InputError("Input file is empty", file_path=str(path), operation="validate_ingest_path")
    return path


def read_header(path: Path, encoding: str = "utf-8") -> list[str]:
    """Read the raw header row without any de-duplication."""
    with open(path, encoding=encoding, newline="") as fh:
        row = next(csv.reader(fh), [])
    if row and row[0].startswith("\ufeff"):
        row[0] = row[0][1:]
    return row


def _count_bad_lines(path: Path, width: int, encoding: str) -> int:
    with open(path, encoding=encoding, newline="") as fh:
        reader = csv.reader(fh)
        next(reader, None)
        return sum(1 for row in reader if row and len(row) != width)


def ingest_csv(
    path: str | Path,
    na_values: Sequence[str] = DEFAULT_NA_VALUES,
    encoding: str = "utf-8",
    log: Logger | None = None,
) -> pd.DataFrame:
    """Read the projects CSV into a text-typed DataFrame.

    Args:
        path: CSV file path
        na_values: Tokens read as missing values
        encoding: File encoding
        log: Bound logger for the ingest stage

    Returns:
        Raw DataFrame with the original header order

    Raises:
        InputError: missing/empty/directory path, no data rows, no columns, unreadable CSV
        SchemaError: duplicate column headers
    """
    log = resolve_logger(log, "ingest")
    path = validate_ingest_path(path)

    try:
        header = read_header(path, encoding)
    except (UnicodeDecodeError, csv.Error) as e:
        raise wrap_exception(e, InputError, file_path=str(path), operation="read_header") from e

    if not header:
        raise InputError("Input file has no columns", file_path=str(path), operation="ingest_csv")
    check_header_duplicates(header)

    try:
        df = pd.read_csv(
            path,
            dtype=str,
            encoding=encoding,
            na_values=list(na_values),
            keep_default_na=False,
            on_bad_lines="warn",
        )
    except (UnicodeDecodeError, pd.errors.ParserError) as e:
        raise wrap_exception(e, InputError, file_path=str(path), operation="ingest_csv") from e
    except pd.errors.EmptyDataError as e:
        raise InputError(
            "Input file has no columns", file_path=str(path), operation="ingest_csv", cause=e
        ) from e

    df.columns = header
    if df.shape[1] == 0:
        raise InputError("Input file has no columns", file_path=str(path), operation="ingest_csv")
    if len(df) == 0:
        raise InputError("Input file has no data rows", file_path=str(path), operation="ingest_csv")

    parse_issues = _count_bad_lines(path, len(header), encoding)
    log.info(f"ingested rows={len(df)} cols={df.shape[1]} parse_issues={parse_issues}")
    return df
