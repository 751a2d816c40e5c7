"""
Filesystem helpers for plotgrammar.io (file protocol baseline).

Responsibilities
- Provide the atomic write path used for chart artifacts: tmp write → fsync → atomic rename.
- Create parent directories on demand.

Notes
- Atomicity via os.replace is guaranteed only when src and dst reside on the same filesystem;
  the tmp file is always created next to its destination.
- All helpers are synchronous.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from .errors import IoWriteError

__all__ = [
    "makedirs",
    "fsync_file",
    "rename_atomic",
    "atomic_open",
    "write_bytes_atomic",
    "write_text_atomic",
]

logger = logging.getLogger(__name__)


def makedirs(path: str | os.PathLike[str], exist_ok: bool = True) -> None:
    """
    Create directories recursively.

    Args:
        path: Directory path to create.
        exist_ok (bool): Do not error if the directory already exists.
    """
    os.makedirs(path, exist_ok=exist_ok)


def fsync_file(fh: BinaryIO) -> None:
    """
    Flush and fsync an open file handle.

    Notes:
        Ensures file contents reach the storage device (subject to OS/filesystem semantics).
    """
    fh.flush()
    os.fsync(fh.fileno())


def rename_atomic(src: str | os.PathLike[str], dst: str | os.PathLike[str]) -> None:
    """
    Atomically rename src -> dst on the same filesystem.

    Notes:
        Uses os.replace, which is atomic only if src and dst reside on the same filesystem.
    """
    os.replace(src, dst)


@contextmanager
def atomic_open(path: str | os.PathLike[str]) -> Iterator[BinaryIO]:
    """
    Open a temporary sibling of `path` for binary write; publish it on success.

    Yields:
        BinaryIO: Writable handle for the tmp file.

    Raises:
        IoWriteError: If writing, syncing or renaming fails. The tmp file is removed.
    """
    final = Path(path)
    makedirs(final.parent)
    tmp = final.with_name(f".{final.name}.tmp-{os.getpid()}")
    try:
        with open(tmp, "wb") as fh:
            yield fh
            fsync_file(fh)
        rename_atomic(tmp, final)
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise IoWriteError(f"failed to write {final}: {exc}") from exc
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    logger.debug("wrote %s", final)


def write_bytes_atomic(path: str | os.PathLike[str], data: bytes) -> Path:
    """Write bytes to `path` atomically and return the final path."""
    with atomic_open(path) as fh:
        fh.write(data)
    return Path(path)


def write_text_atomic(path: str | os.PathLike[str], text: str, encoding: str = "utf-8") -> Path:
    """Write text to `path` atomically and return the final path."""
    return write_bytes_atomic(path, text.encode(encoding))
