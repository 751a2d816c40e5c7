"""
plotgrammar.viz — additive plot specifications rendered with Altair.

## Responsibilities
- Build immutable plot specifications: data + default mapping + layers + scales +
  coordinate limits + theme + labels.
- Compose them additively (`spec + geom_point() + scale_size(range=(2, 20))`).
- Render to Altair (Vega-Lite) and save as HTML / JSON / PNG / SVG.

## Public API
- Builder: create_base, add_layer, add_scale, add_theme, add_labels,
  set_coordinate_limits, with_data, PlotSpec — see [spec](spec.md).
- Layers: geom_point, geom_line, geom_smooth, geom_text, geom_rug, geom_bar, geom_col.
- Labels/limits: labs, ggtitle, xlab, ylab, coord_cartesian, xlim, ylim.
- Rendering: render; saving: save, save_as.

## Import DAG discipline
- Depends on plotgrammar.core, plotgrammar.io, plotgrammar.config, polars and altair.
- MUST NOT import plotgrammar.lab.

## Examples
```python
from plotgrammar.core.aes import aes
from plotgrammar.core.expr import log
from plotgrammar.io import load_sample
from plotgrammar.viz import create_base, geom_point, save

gap = load_sample()
p = create_base(gap, aes(x=log("income_per_capita_2011"), y="life_expectancy_2016")) + geom_point()
save(p, out_html="out/scatter.html")  # doctest: +SKIP
```
"""

from __future__ import annotations

from .layers import (
    LayerSpec,
    geom_bar,
    geom_col,
    geom_line,
    geom_point,
    geom_rug,
    geom_smooth,
    geom_text,
    layer,
)
from .render import render
from .save import save, save_as
from .spec import (
    CoordLimits,
    Labels,
    Layer,
    PlotSpec,
    add_labels,
    add_layer,
    add_scale,
    add_theme,
    coord_cartesian,
    create_base,
    ggtitle,
    labs,
    set_coordinate_limits,
    with_data,
    xlab,
    xlim,
    ylab,
    ylim,
)

__all__ = [
    "PlotSpec",
    "Layer",
    "LayerSpec",
    "Labels",
    "CoordLimits",
    "create_base",
    "add_layer",
    "add_scale",
    "add_theme",
    "add_labels",
    "set_coordinate_limits",
    "with_data",
    "layer",
    "geom_point",
    "geom_line",
    "geom_smooth",
    "geom_text",
    "geom_rug",
    "geom_bar",
    "geom_col",
    "labs",
    "ggtitle",
    "xlab",
    "ylab",
    "coord_cartesian",
    "xlim",
    "ylim",
    "render",
    "save",
    "save_as",
]
