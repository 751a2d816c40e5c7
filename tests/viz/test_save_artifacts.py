from __future__ import annotations

import importlib
import json
from pathlib import Path
from types import SimpleNamespace

import altair as alt
import polars as pl
import pytest

from plotgrammar.config import Settings
from plotgrammar.core.aes import aes
from plotgrammar.viz import create_base, geom_point, save, save_as


def _spec(tiny: pl.DataFrame):
    return create_base(tiny, aes(x="income", y="life")) + geom_point()


def _missing_converter(monkeypatch: pytest.MonkeyPatch) -> None:
    real_import_module = importlib.import_module

    def fake_import_module(name: str, *args, **kwargs):
        if name == "vl_convert":
            raise ImportError("simulated missing converter")
        return real_import_module(name, *args, **kwargs)

    monkeypatch.setattr(importlib, "import_module", fake_import_module)


def _fake_converter(monkeypatch: pytest.MonkeyPatch, calls: dict) -> None:
    real_import_module = importlib.import_module

    def to_png(spec: dict, scale: float = 1) -> bytes:
        calls["png_scale"] = scale
        return b"\x89PNG fake"

    def to_svg(spec: dict) -> str:
        calls["svg"] = True
        return "<svg></svg>"

    converter = SimpleNamespace(vegalite_to_png=to_png, vegalite_to_svg=to_svg)

    def fake_import_module(name: str, *args, **kwargs):
        if name == "vl_convert":
            return converter
        return real_import_module(name, *args, **kwargs)

    monkeypatch.setattr(importlib, "import_module", fake_import_module)


def test_save_spec_as_html_and_json(tmp_path: Path, tiny: pl.DataFrame) -> None:
    out = save(_spec(tiny), out_html=tmp_path / "p.html", out_json=tmp_path / "p.json")
    assert set(out) == {"html", "json"}
    assert out["html"].stat().st_size > 0
    spec = json.loads(out["json"].read_text(encoding="utf-8"))
    assert "vega-lite" in spec["$schema"]
    assert spec["width"] == Settings().width


def test_save_plain_altair_chart(tmp_path: Path) -> None:
    ch = alt.Chart(alt.Data(values=[{"x": 0, "y": 1}])).mark_point().encode(x="x:Q", y="y:Q")
    out = save(ch, out_json=str(tmp_path / "c.json"))
    assert out["json"].exists()


def test_image_export_without_converter(
    tmp_path: Path, tiny: pl.DataFrame, monkeypatch: pytest.MonkeyPatch
) -> None:
    _missing_converter(monkeypatch)
    with pytest.raises(RuntimeError) as ei:
        save(_spec(tiny), out_png=tmp_path / "p.png")
    assert "vl-convert-python" in str(ei.value)
    assert not (tmp_path / "p.png").exists()


def test_image_export_with_converter(
    tmp_path: Path, tiny: pl.DataFrame, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: dict = {}
    _fake_converter(monkeypatch, calls)
    out = save(
        _spec(tiny),
        out_png=tmp_path / "p.png",
        out_svg=tmp_path / "p.svg",
        settings=Settings(scale_factor=2.0),
    )
    assert out["png"].read_bytes().startswith(b"\x89PNG")
    assert out["svg"].read_text() == "<svg></svg>"
    assert calls["png_scale"] == 2.0


def test_save_as_picks_format(
    tmp_path: Path, tiny: pl.DataFrame, monkeypatch: pytest.MonkeyPatch
) -> None:
    assert save_as(_spec(tiny), tmp_path / "a.json").suffix == ".json"
    assert save_as(_spec(tiny), tmp_path / "b", image_format="html").name == "b"
    with pytest.raises(ValueError):
        save_as(_spec(tiny), tmp_path / "c.gif")
