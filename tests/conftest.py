# flood-pipeline/tests/conftest.py
#
# Test bootstrap for pytest: ensure the repository root is on sys.path so tests can
# import the `flood_pipeline` package without an editable install.
#
# Fixture Organization:
# - Core fixtures: repo_root, config cache reset, loguru capture sink
# - Data builders: raw_frame / derived_frame factories and a CSV writer
# - tests/factories.py: raw row builder shared with test modules
#
from __future__ import annotations

import csv
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pandas as pd
import pytest
from loguru import logger

_repo_root = Path(__file__).resolve().parents[1]
_repo_root_str = str(_repo_root)

if _repo_root_str not in sys.path:
    sys.path.insert(0, _repo_root_str)

from flood_pipeline.config.loader import reload_config  # noqa: E402
from flood_pipeline.config.schemas import REQUIRED_COLUMNS  # noqa: E402
from tests.factories import make_raw_row  # noqa: E402

# Configure test logging using loguru for consistency with application code
logger.remove()
logger.configure(extra={"stage": "-", "run_id": "-"})
logger.add(
    sys.stderr,
    level="INFO",
    format="{time:YYYY-MM-DD HH:mm:ss} {level} {extra[stage]}: {message}",
)


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Return the repository root Path."""
    return _repo_root


@pytest.fixture(autouse=True)
def _fresh_config() -> Iterator[None]:
    """Clear the get_config cache around every test."""
    reload_config()
    yield
    reload_config()


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Capture rendered loguru messages emitted during the test."""
    messages: list[str] = []
    sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    try:
        logger.remove(sink_id)
    except ValueError:
        # setup_logging() inside the test may already have removed it
        pass


@pytest.fixture
def raw_frame() -> Callable[..., pd.DataFrame]:
    """Factory building a text-typed raw frame with every required column.

    Usage:
        df = raw_frame([{"Province": "Cebu"}, {"Latitude": None}])
    """

    def _build(rows: list[dict[str, Any]] | None = None) -> pd.DataFrame:
        rows = rows if rows is not None else [{}]
        data = [make_raw_row(**row) for row in rows]
        return pd.DataFrame(data, columns=list(REQUIRED_COLUMNS), dtype=object)

    return _build


@pytest.fixture
def derived_frame() -> Callable[..., pd.DataFrame]:
    """Factory building a derived frame directly, bypassing cleaning.

    Each row may set any of the report inputs; CostSavings and
    CompletionDelayDays are taken as given.
    """

    def _build(rows: list[dict[str, Any]]) -> pd.DataFrame:
        defaults = {
            "Region": "Region I",
            "MainIsland": "Luzon",
            "Province": "Ilocos Norte",
            "FundingYear": 2021,
            "TypeOfWork": "Levee",
            "ApprovedBudgetForContract": 1000.0,
            "ContractCost": 800.0,
            "Contractor": "Alpha",
            "CostSavings": 200.0,
            "CompletionDelayDays": 10.0,
        }
        df = pd.DataFrame([{**defaults, **row} for row in rows])
        df["FundingYear"] = df["FundingYear"].astype("Int64")
        for col in ("ApprovedBudgetForContract", "ContractCost", "CostSavings", "CompletionDelayDays"):
            df[col] = pd.to_numeric(df[col], errors="coerce").astype("float64")
        return df

    return _build


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write rows (dicts keyed by header) to a CSV under tmp_path and return the path."""

    def _write(
        rows: list[dict[str, Any]],
        name: str = "projects.csv",
        header: list[str] | None = None,
    ) -> Path:
        header = header or list(REQUIRED_COLUMNS)
        path = tmp_path / name
        with open(path, "w", encoding="utf-8", newline="") as fh:
            writer = csv.writer(fh)
            writer.writerow(header)
            for row in rows:
                writer.writerow(["" if row.get(col) is None else row.get(col) for col in header])
        return path

    return _write


@pytest.fixture
def project_rows() -> list[dict[str, Any]]:
    """A small realistic dataset spanning two regions, three years and three contractors."""
    rows: list[dict[str, Any]] = []
    for i in range(6):
        rows.append(
            make_raw_row(
                Contractor="alpha   builders",
                FundingYear=str(2021 + i % 3),
                TypeOfWork="Levee",
                ApprovedBudgetForContract="1,000,000",
                ContractCost="900,000",
                StartDate="2021-01-01",
                ActualCompletionDate="2021-01-11",
            )
        )
    for i in range(5):
        rows.append(
            make_raw_row(
                Region="Region VII",
                MainIsland="Visayas",
                Province="Cebu",
                Contractor="BETA CORP",
                FundingYear=str(2021 + i % 3),
                TypeOfWork="Channel",
                ApprovedBudgetForContract="500000",
                ContractCost="650000",
                StartDate="01/15/2022",
                ActualCompletionDate="06/15/2022",
                Latitude="10.3",
                Longitude="123.9",
            )
        )
    rows.append(make_raw_row(Contractor="Gamma", FundingYear="2020"))
    rows.append(
        make_raw_row(
            Region="Region VII",
            MainIsland="Visayas",
            Province="Cebu",
            Contractor="Gamma",
            FundingYear="2023",
            Latitude=None,
            Longitude=None,
        )
    )
    return rows
