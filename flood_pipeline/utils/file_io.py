"""Atomic file writers for pipeline artifacts.

Each writer renders into a temp file in the destination directory and then
`os.replace`s it over the target, so readers see either the previous file or
the complete new one.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import IO, Any

import pandas as pd
from loguru import logger

from ..exceptions import OutputError


def ensure_dir(path: Path | str) -> Path:
    """Ensure directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _to_jsonable(x: Any) -> Any:
    """Convert a value to JSON-serializable format (NaN/NA -> None, NumPy scalars -> Python)."""
    if isinstance(x, dict):
        return {str(k): _to_jsonable(v) for k, v in x.items()}
    if isinstance(x, (list, tuple, set)):
        return [_to_jsonable(v) for v in x]
    try:
        if pd.isna(x):
            return None
    except (TypeError, ValueError):
        pass
    if hasattr(x, "item") and not isinstance(x, (str, bytes)):
        try:
            return x.item()
        except (TypeError, ValueError):
            pass
    return x


def _atomic_write(target: Path, write_fn: Callable[[IO[str]], None], suffix: str) -> None:
    target = Path(target)
    ensure_dir(target.parent)

    fd, tmp_path = tempfile.mkstemp(
        prefix=target.stem + "_", suffix=suffix, dir=str(target.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            write_fn(fh)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, str(target))
    except Exception as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        logger.error(f"Failed to write {target} atomically: {e}")
        raise OutputError(
            f"Failed to write {target}: {e}",
            file_path=str(target),
            operation="atomic_write",
            cause=e,
        ) from e
    logger.debug(f"Atomically wrote {target}")


def write_csv_atomic(df: pd.DataFrame, target: Path, na_rep: str = "") -> None:
    """Write a DataFrame as CSV (no index) atomically."""
    _atomic_write(target, lambda fh: df.to_csv(fh, index=False, na_rep=na_rep), ".csv.tmp")


def write_json_atomic(
    target: Path,
    data: dict[str, Any] | list[Any],
    indent: int = 2,
    sort_keys: bool = False,
    ensure_ascii: bool = False,
) -> None:
    """Write JSON atomically; NaN and pandas NA serialize as null."""

    def _dump(fh: IO[str]) -> None:
        json.dump(
            _to_jsonable(data),
            fh,
            indent=indent,
            sort_keys=sort_keys,
            ensure_ascii=ensure_ascii,
            allow_nan=False,
        )
        fh.write("\n")

    _atomic_write(target, _dump, ".json.tmp")
