"""
plotgrammar — a grammar of graphics for Polars data, rendered with Altair.

## Responsibilities
- core — channels, geoms, mapping expressions, scales, themes and errors (zero-IO).
- io — dataset loading, the bundled workshop sample, atomic artifact writes.
- viz — immutable, additive plot specifications; rendering and saving.
- lab — the bubble chart workshop checkpoints and CLI.

## Public API
The names most workshop code needs are re-exported here:

```python
from plotgrammar import aes, log, create_base, geom_point, geom_text, scale_size, theme_minimal

p = (
    create_base(gap, aes(x=log("income_per_capita_2011"), y="life_expectancy_2016"))
    + geom_point(aes(size="population_2015", color="four_regions"))
    + scale_size(range=(2, 20))
    + theme_minimal()
)
chart = p.render()
```
"""

from __future__ import annotations

from plotgrammar.config import Settings
from plotgrammar.core.aes import Aes, aes
from plotgrammar.core.errors import (
    InvalidLimitsError,
    InvalidMappingError,
    InvalidScaleError,
    MissingRequiredAestheticError,
    PlotGrammarError,
    UnknownChannelError,
    UnknownGeomError,
    UnknownThemeElementError,
)
from plotgrammar.core.expr import col, exp, lit, log, log10, sqrt
from plotgrammar.core.grammar import Channel, GeomKind
from plotgrammar.core.scales import (
    scale_alpha,
    scale_color_discrete,
    scale_color_gradient,
    scale_color_manual,
    scale_fill_discrete,
    scale_fill_manual,
    scale_linetype_manual,
    scale_shape_manual,
    scale_size,
    scale_x_continuous,
    scale_x_log10,
    scale_y_continuous,
    scale_y_log10,
)
from plotgrammar.core.themes import (
    Theme,
    get_theme,
    list_themes,
    theme,
    theme_classic,
    theme_economist_white,
    theme_gray,
    theme_grey,
    theme_minimal,
)
from plotgrammar.io import MalformedDatasetError, load_sample, read_dataset
from plotgrammar.viz import (
    PlotSpec,
    add_labels,
    add_layer,
    add_scale,
    add_theme,
    coord_cartesian,
    create_base,
    geom_bar,
    geom_col,
    geom_line,
    geom_point,
    geom_rug,
    geom_smooth,
    geom_text,
    ggtitle,
    labs,
    render,
    save,
    set_coordinate_limits,
    with_data,
    xlab,
    xlim,
    ylab,
    ylim,
)

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "Aes",
    "aes",
    "col",
    "lit",
    "log",
    "log10",
    "sqrt",
    "exp",
    "Channel",
    "GeomKind",
    "PlotSpec",
    "create_base",
    "add_layer",
    "add_scale",
    "add_theme",
    "add_labels",
    "set_coordinate_limits",
    "with_data",
    "geom_point",
    "geom_line",
    "geom_smooth",
    "geom_text",
    "geom_rug",
    "geom_bar",
    "geom_col",
    "scale_size",
    "scale_alpha",
    "scale_x_continuous",
    "scale_y_continuous",
    "scale_x_log10",
    "scale_y_log10",
    "scale_color_gradient",
    "scale_color_discrete",
    "scale_fill_discrete",
    "scale_color_manual",
    "scale_fill_manual",
    "scale_shape_manual",
    "scale_linetype_manual",
    "Theme",
    "theme",
    "theme_gray",
    "theme_grey",
    "theme_minimal",
    "theme_classic",
    "theme_economist_white",
    "get_theme",
    "list_themes",
    "labs",
    "ggtitle",
    "xlab",
    "ylab",
    "coord_cartesian",
    "xlim",
    "ylim",
    "render",
    "save",
    "read_dataset",
    "load_sample",
    "PlotGrammarError",
    "InvalidMappingError",
    "MissingRequiredAestheticError",
    "UnknownChannelError",
    "UnknownGeomError",
    "UnknownThemeElementError",
    "InvalidScaleError",
    "InvalidLimitsError",
    "MalformedDatasetError",
]
