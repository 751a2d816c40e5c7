from __future__ import annotations

from pathlib import Path

import pytest

from plotgrammar.io.errors import IoWriteError
from plotgrammar.io.fs import atomic_open, write_bytes_atomic, write_text_atomic


def test_write_text_atomic_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "dir" / "chart.json"
    out = write_text_atomic(target, '{"a": 1}')
    assert out == target
    assert target.read_text(encoding="utf-8") == '{"a": 1}'
    # no tmp files left behind
    assert [p.name for p in target.parent.iterdir()] == ["chart.json"]


def test_write_bytes_atomic_replaces_existing(tmp_path: Path) -> None:
    target = tmp_path / "chart.png"
    target.write_bytes(b"old")
    write_bytes_atomic(target, b"new")
    assert target.read_bytes() == b"new"


def test_atomic_open_failure_keeps_original(tmp_path: Path) -> None:
    target = tmp_path / "chart.html"
    target.write_text("original")
    with pytest.raises(RuntimeError):
        with atomic_open(target) as fh:
            fh.write(b"partial")
            raise RuntimeError("boom")
    assert target.read_text() == "original"
    assert [p.name for p in tmp_path.iterdir()] == ["chart.html"]


def test_atomic_open_rename_error_is_io_write_error(tmp_path: Path, monkeypatch) -> None:
    import plotgrammar.io.fs as fs

    def _fail(src, dst):
        raise OSError("read-only filesystem")

    monkeypatch.setattr(fs, "rename_atomic", _fail)
    target = tmp_path / "chart.svg"
    with pytest.raises(IoWriteError):
        write_text_atomic(target, "<svg/>")
    assert not target.exists()
    assert list(tmp_path.iterdir()) == []
