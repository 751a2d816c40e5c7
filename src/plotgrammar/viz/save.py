"""
Write rendered charts to disk.

HTML and Vega-Lite JSON are produced by Altair itself. PNG and SVG need the
`vl-convert-python` package, which is imported lazily so that HTML/JSON export
works without it. Every artifact is written atomically (tmp → fsync → rename).
"""

from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path
from typing import Any

import altair as alt

from plotgrammar.config import Settings
from plotgrammar.io.fs import write_bytes_atomic, write_text_atomic

from .spec import PlotSpec

__all__ = ["save", "save_as"]

logger = logging.getLogger(__name__)

PathLike = str | os.PathLike[str]


def _converter() -> Any:
    try:
        return importlib.import_module("vl_convert")
    except ImportError as exc:
        raise RuntimeError(
            "PNG/SVG export requires the 'vl-convert-python' package "
            "(pip install 'plotgrammar[render]')"
        ) from exc


def save(
    chart_or_spec: alt.TopLevelMixin | PlotSpec,
    *,
    out_html: PathLike | None = None,
    out_json: PathLike | None = None,
    out_png: PathLike | None = None,
    out_svg: PathLike | None = None,
    scale_factor: float | None = None,
    settings: Settings | None = None,
) -> dict[str, Path]:
    """
    Save a chart (or a specification, rendered first) to one or more files.

    Args:
        chart_or_spec: Altair chart or PlotSpec.
        out_html: Standalone HTML page path.
        out_json: Vega-Lite JSON path.
        out_png: PNG path (requires vl-convert-python).
        out_svg: SVG path (requires vl-convert-python).
        scale_factor: PNG resolution multiplier; defaults to settings.scale_factor.
        settings (Settings | None): Used to render a PlotSpec and for defaults.

    Returns:
        dict[str, Path]: Format -> written path.

    Raises:
        RuntimeError: If PNG/SVG output is requested and vl-convert-python is missing.
        IoWriteError: If a file cannot be written.
    """
    s = settings or Settings()
    if isinstance(chart_or_spec, PlotSpec):
        chart = chart_or_spec.render(settings=s)
    else:
        chart = chart_or_spec

    written: dict[str, Path] = {}
    if out_html is not None:
        written["html"] = write_text_atomic(out_html, chart.to_html())
    if out_json is not None:
        written["json"] = write_text_atomic(out_json, chart.to_json(indent=2))
    if out_png is not None or out_svg is not None:
        vlc = _converter()
        vl_spec = chart.to_dict()
        if out_png is not None:
            scale = s.scale_factor if scale_factor is None else scale_factor
            written["png"] = write_bytes_atomic(out_png, vlc.vegalite_to_png(vl_spec, scale=scale))
        if out_svg is not None:
            written["svg"] = write_text_atomic(out_svg, vlc.vegalite_to_svg(vl_spec))
    for fmt, path in written.items():
        logger.info("saved %s to %s", fmt, path)
    return written


def save_as(
    chart_or_spec: alt.TopLevelMixin | PlotSpec,
    path: PathLike,
    *,
    image_format: str | None = None,
    settings: Settings | None = None,
) -> Path:
    """
    Save to a single path, choosing the format from `image_format` or the suffix.

    Raises:
        ValueError: If the format is not html, json, png or svg.
    """
    p = Path(path)
    fmt = (image_format or p.suffix.lstrip(".") or (settings or Settings()).image_format).lower()
    if fmt not in ("html", "json", "png", "svg"):
        raise ValueError(f"unsupported image format {fmt!r}; expected html, json, png or svg")
    return save(chart_or_spec, settings=settings, **{f"out_{fmt}": p})[fmt]
