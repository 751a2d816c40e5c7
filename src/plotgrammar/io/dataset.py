"""
Dataset loading for plotgrammar: delimited text → Polars DataFrame.

Responsibilities
- Read delimited text with the configured separator and null markers.
- Surface unreadable input as MalformedDatasetError (ragged rows, empty files,
  missing required columns); a missing file stays FileNotFoundError.
- Load the bundled workshop sample (a subset of the income / life expectancy /
  population dataset).

Notes
- Loaded frames are never mutated by the library; derived values are computed
  lazily at render time.
"""

from __future__ import annotations

import csv
import logging
import os
from collections.abc import Iterable
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

import polars as pl

from plotgrammar.config import Settings

from .errors import MalformedDatasetError

__all__ = ["WORKSHOP_COLUMNS", "read_dataset", "ensure_columns", "load_sample", "sample_path"]

logger = logging.getLogger(__name__)

WORKSHOP_COLUMNS: tuple[str, ...] = (
    "country",
    "income_per_capita_2011",
    "life_expectancy_2016",
    "population_2015",
    "four_regions",
)

_SAMPLE_PACKAGE = "plotgrammar.lab"
_SAMPLE_NAME = "data/gap_data_sample.csv"


def ensure_columns(df: pl.DataFrame, required: Iterable[str]) -> None:
    """
    Check that every required column is present.

    Raises:
        MalformedDatasetError: Listing the missing columns and the columns found.
    """
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise MalformedDatasetError(
            f"missing required columns: {missing!r}; found columns: {df.columns!r}"
        )


def _check_field_counts(p: Path, separator: str) -> None:
    """Raise MalformedDatasetError on the first record whose width differs from the header."""
    try:
        with open(p, newline="", encoding="utf-8") as fh:
            reader = csv.reader(fh, delimiter=separator)
            header = next(reader, None)
            if header is None:
                return
            for row in reader:
                if row and len(row) != len(header):
                    raise MalformedDatasetError(
                        f"{p}:{reader.line_num}: expected {len(header)} fields, got {len(row)}"
                    )
    except (csv.Error, UnicodeDecodeError) as exc:
        raise MalformedDatasetError(f"could not parse {p}: {exc}") from exc


def read_dataset(
    path: str | os.PathLike[str],
    *,
    settings: Settings | None = None,
    required_columns: Iterable[str] | None = None,
) -> pl.DataFrame:
    """
    Read a delimited-text file with a header row into a DataFrame.

    Args:
        path: File to read.
        settings (Settings | None): Supplies csv_separator and null_values
            (defaults when None).
        required_columns (Iterable[str] | None): Columns that must be present.

    Returns:
        pl.DataFrame: One row per record, header names as columns.

    Raises:
        FileNotFoundError: If the file does not exist.
        MalformedDatasetError: If the text cannot be parsed or columns are missing.

    Examples:
        >>> from plotgrammar.io.dataset import read_dataset
        >>> df = read_dataset("data/gap_data_clean.csv")  # doctest: +SKIP
    """
    s = settings or Settings()
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"dataset not found: {p}")
    _check_field_counts(p, s.csv_separator)
    try:
        df = pl.read_csv(
            p,
            separator=s.csv_separator,
            null_values=list(s.null_values),
            infer_schema_length=None,
        )
    except pl.exceptions.PolarsError as exc:
        raise MalformedDatasetError(f"could not parse {p}: {exc}") from exc
    if not df.columns:
        raise MalformedDatasetError(f"{p} has no header row")
    if required_columns is not None:
        ensure_columns(df, required_columns)
    logger.info("loaded %s (%d rows, %d columns)", p, df.height, df.width)
    return df


def sample_path() -> Traversable:
    """Location of the bundled workshop sample CSV."""
    return resources.files(_SAMPLE_PACKAGE).joinpath(_SAMPLE_NAME)


def load_sample() -> pl.DataFrame:
    """
    Load the bundled workshop sample.

    Returns:
        pl.DataFrame: Columns country, income_per_capita_2011, life_expectancy_2016,
        population_2015, four_regions, geo.
    """
    with resources.as_file(sample_path()) as p:
        return read_dataset(p, required_columns=WORKSHOP_COLUMNS)
