"""
Rendering defaults shared by the builder and the Altair translation.

Sizes in the grammar are expressed in millimetres (the unit used by `size` in
geoms and size scales). The render layer converts them to Vega-Lite units:
symbol area in px², font size in pt and stroke width in px.

Notes:
    - Zero-IO, stdlib-only.
    - Changing a default here changes every chart that does not override it.
"""

from __future__ import annotations

from typing import Final

__all__ = [
    "PT_PER_MM",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_POINT_SIZE",
    "DEFAULT_TEXT_SIZE",
    "DEFAULT_LINE_SIZE",
    "DEFAULT_SIZE_RANGE",
    "DEFAULT_ALPHA_RANGE",
    "DEFAULT_RUG_LENGTH",
    "SMOOTH_COLOR",
    "NA_COLOR",
    "NA_LEVEL",
    "SHAPE_CODES",
    "OUTLINED_SHAPES",
    "HOLLOW_SHAPES",
    "LINETYPE_DASHES",
]

# Points per millimetre (72.27 pt per inch / 25.4 mm per inch).
PT_PER_MM: Final[float] = 72.27 / 25.4

DEFAULT_WIDTH: Final[int] = 600
DEFAULT_HEIGHT: Final[int] = 400

DEFAULT_POINT_SIZE: Final[float] = 1.5
DEFAULT_TEXT_SIZE: Final[float] = 3.88
DEFAULT_LINE_SIZE: Final[float] = 0.5

# Output range of a continuous size scale when none is declared.
DEFAULT_SIZE_RANGE: Final[tuple[float, float]] = (1.0, 6.0)
DEFAULT_ALPHA_RANGE: Final[tuple[float, float]] = (0.1, 1.0)

# Rug tick length in px.
DEFAULT_RUG_LENGTH: Final[int] = 8

SMOOTH_COLOR: Final[str] = "#3366FF"
NA_COLOR: Final[str] = "#7f7f7f"

# Category drawn for missing values of a discrete channel; always ordered last.
NA_LEVEL: Final[str] = "NA"

# Numeric point shape codes -> Vega-Lite symbol names.
SHAPE_CODES: Final[dict[int, str]] = {
    0: "square",
    1: "circle",
    2: "triangle-up",
    3: "cross",
    4: "cross",
    5: "diamond",
    6: "triangle-down",
    15: "square",
    16: "circle",
    17: "triangle-up",
    18: "diamond",
    19: "circle",
    20: "circle",
    21: "circle",
    22: "square",
    23: "diamond",
    24: "triangle-up",
    25: "triangle-down",
}

# Shapes whose inside takes `fill` and whose border takes `color`.
OUTLINED_SHAPES: Final[frozenset[int]] = frozenset({21, 22, 23, 24, 25})

# Shapes drawn as outlines only.
HOLLOW_SHAPES: Final[frozenset[int]] = frozenset(range(0, 15))

LINETYPE_DASHES: Final[dict[str, list[int]]] = {
    "solid": [],
    "dashed": [6, 4],
    "dotted": [1, 3],
    "dotdash": [1, 3, 6, 3],
    "longdash": [10, 4],
    "twodash": [4, 2, 10, 2],
}
