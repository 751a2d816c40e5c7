"""
plotgrammar.io — dataset loading and artifact writing.

## Responsibilities
- Read delimited text into Polars DataFrames with malformed-input detection.
- Ship a small sample of the workshop dataset.
- Write chart artifacts atomically (tmp → fsync → os.replace).

## Public API
- read_dataset, ensure_columns, load_sample — see [dataset](dataset.md).
- write_text_atomic, write_bytes_atomic — see [fs](fs.md).
- IoError, MalformedDatasetError, IoWriteError — see [errors](errors.md).

## Import DAG discipline
- Depends on stdlib, polars, plotgrammar.config and plotgrammar.core.
- MUST NOT import plotgrammar.viz or plotgrammar.lab modules (the sample CSV is
  located as package data only).
"""

from __future__ import annotations

from .dataset import WORKSHOP_COLUMNS, ensure_columns, load_sample, read_dataset
from .errors import IoError, IoWriteError, MalformedDatasetError
from .fs import write_bytes_atomic, write_text_atomic

__all__ = [
    "WORKSHOP_COLUMNS",
    "read_dataset",
    "ensure_columns",
    "load_sample",
    "write_bytes_atomic",
    "write_text_atomic",
    "IoError",
    "IoWriteError",
    "MalformedDatasetError",
]
