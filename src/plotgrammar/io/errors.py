"""
Custom exceptions for the plotgrammar.io module.

Purpose
- Provide IO-layer error types, distinct from the specification errors in
  plotgrammar.core.errors.
  - MalformedDatasetError: delimited text could not be parsed into a table, or lacks
    required columns.
  - IoWriteError: an artifact could not be written atomically (tmp write/fsync/rename).

Notes
- A missing input file surfaces as the builtin FileNotFoundError.
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations

__all__ = ["IoError", "MalformedDatasetError", "IoWriteError"]


class IoError(Exception):
    """
    Base class for IO-related errors in plotgrammar.io.

    Notes:
        Use this as a catch-all for IO-layer failures.
    """


class MalformedDatasetError(IoError, ValueError):
    """
    Raised when a dataset file cannot be parsed into a table.

    Examples:
        - Ragged rows (more fields than the header)
        - Empty file / header only when columns are required
        - Required columns missing
    """


class IoWriteError(IoError):
    """
    Raised when an artifact write fails to complete atomically.

    Notes:
        The write path is tmp file → fsync → os.replace(tmp, final). The tmp file is
        removed on failure.
    """
