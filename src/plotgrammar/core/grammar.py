"""
Canonical plot grammar vocabulary and helpers.

Defines aesthetic channels, geometric-object kinds and label keys, plus zero-IO
normalization helpers used across the stack.

Responsibilities
- Define enums with lower_snake serialized values.
- Normalize free-form channel and geom names (including the `colour` alias).
- Provide lower_snake validation used by tests and by the theme vocabulary.

Design principles
-----------------
1) One naming standard:
   - Enum classes: PascalCase
   - Enum member names: UPPER_SNAKE (Python constants)
   - Enum serialized values (describe() output, Vega-Lite field names): lower_snake

2) Channels are visual, not data:
   - A Channel names something you can see (position, color, size ...).
   - Which channels a geom requires/accepts lives in `plotgrammar.core.geoms`.

Channel-to-Vega-Lite mapping
----------------------------
| Channel   | Vega-Lite encoding                | Notes
|-----------|-----------------------------------|-------------------------------------
| x, y      | x, y                              | positions
| color     | color (stroke for outlined marks) | "outside" color
| fill      | fill                              | "inside" color
| size      | size                              | symbol area / font size / stroke width
| shape     | shape                             | point glyph
| label     | text                              | text geoms only
| linetype  | strokeDash                        | line-like geoms
| alpha     | opacity                           |
| weight    | (aggregation)                     | bar counts become weighted sums

Examples
--------
>>> from plotgrammar.core.grammar import normalize_channel, Channel
>>> normalize_channel("colour") is Channel.COLOR
True
>>> normalize_channel(" X ") is Channel.X
True
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from typing import Final

from .errors import UnknownChannelError, UnknownGeomError

__all__ = [
    "Channel",
    "GeomKind",
    "LABEL_KEYS",
    "POSITION_CHANNELS",
    "LEGEND_CHANNELS",
    "is_lower_snake",
    "assert_lower_snake",
    "normalize_channel",
    "normalize_geom",
    "normalize_label_key",
    "ensure_all_enum_values_lower_snake",
]


class Channel(Enum):
    """
    Recognized aesthetic channels.

    Serialized values appear in:
      - PlotSpec.describe() mapping keys
      - column names of the per-layer render frame handed to Altair
    """

    X = "x"
    Y = "y"
    COLOR = "color"
    FILL = "fill"
    SIZE = "size"
    SHAPE = "shape"
    LABEL = "label"
    LINETYPE = "linetype"
    ALPHA = "alpha"
    WEIGHT = "weight"


class GeomKind(Enum):
    """
    Geometric-object kinds that can be added as layers.

    Notes:
      Required/accepted channels and default params are declared by the
      descriptors in plotgrammar.core.geoms.
    """

    POINT = "point"
    LINE = "line"
    SMOOTH = "smooth"
    TEXT = "text"
    RUG = "rug"
    BAR = "bar"
    COL = "col"


POSITION_CHANNELS: Final[frozenset[Channel]] = frozenset({Channel.X, Channel.Y})

# Channels that can produce a legend when mapped.
LEGEND_CHANNELS: Final[tuple[Channel, ...]] = (
    Channel.COLOR,
    Channel.FILL,
    Channel.SIZE,
    Channel.SHAPE,
    Channel.LINETYPE,
    Channel.ALPHA,
)

# Non-channel label keys accepted by add_labels().
LABEL_KEYS: Final[tuple[str, ...]] = ("title", "subtitle", "caption")

_CHANNEL_ALIASES: Final[dict[str, str]] = {
    "colour": "color",
    "lty": "linetype",
    "text": "label",
}

_LOWER_SNAKE_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$")


def is_lower_snake(value: str) -> bool:
    """
    Check whether a string is lower_snake.

    Args:
      value (str): Candidate string to validate.

    Returns:
      bool: True if value matches lower_snake (e.g., "panel_background").

    Examples:
      >>> is_lower_snake("panel_background")
      True
      >>> is_lower_snake("panelBackground")
      False
    """
    return bool(_LOWER_SNAKE_RE.match(value or ""))


def assert_lower_snake(value: str, what: str = "value") -> None:
    """
    Validate that a string is lower_snake.

    Raises:
      ValueError: If value is not lower_snake.
    """
    if not is_lower_snake(value):
        raise ValueError(f"{what} must be lower_snake (got {value!r})")


def normalize_channel(value: Channel | str) -> Channel:
    """
    Normalize a free-form channel name to a Channel.

    Args:
      value (Channel | str): Channel enum or name such as "x", "Colour", " size ".

    Returns:
      Channel: The canonical channel.

    Raises:
      UnknownChannelError: If the name is not a recognized channel.
    """
    if isinstance(value, Channel):
        return value
    if not isinstance(value, str):
        raise UnknownChannelError(value, (c.value for c in Channel))
    key = value.strip().lower()
    key = _CHANNEL_ALIASES.get(key, key)
    try:
        return Channel(key)
    except ValueError:
        raise UnknownChannelError(value, (c.value for c in Channel)) from None


def normalize_geom(value: GeomKind | str) -> GeomKind:
    """
    Normalize a geom name ("point", "geom_point", "Point") to a GeomKind.

    Raises:
      UnknownGeomError: If the name is not a registered geom kind.
    """
    if isinstance(value, GeomKind):
        return value
    key = str(value or "").strip().lower()
    if key.startswith("geom_"):
        key = key[len("geom_") :]
    try:
        return GeomKind(key)
    except ValueError:
        allowed = ", ".join(g.value for g in GeomKind)
        raise UnknownGeomError(f"unknown geom {value!r}; available geoms: {allowed}") from None


def normalize_label_key(key: str) -> str:
    """
    Normalize a label key: "title"/"subtitle"/"caption" or a channel name.

    Returns:
      str: The canonical key (channel keys are returned as their enum value).

    Raises:
      UnknownChannelError: If the key is neither a label key nor a channel.
    """
    k = (key or "").strip().lower()
    if k in LABEL_KEYS:
        return k
    try:
        return normalize_channel(k).value
    except UnknownChannelError:
        allowed = [*LABEL_KEYS, *(c.value for c in Channel)]
        raise UnknownChannelError(key, allowed) from None


def ensure_all_enum_values_lower_snake(enums: Iterable[type[Enum]]) -> None:
    """
    Assert that every enum member's value is lower_snake.

    Raises:
      AssertionError: If any enum member has a non-lower_snake value.

    Examples:
      >>> ensure_all_enum_values_lower_snake([Channel, GeomKind])
    """
    for E in enums:
        for m in E:
            if not is_lower_snake(m.value):
                raise AssertionError(
                    f"{E.__name__}.{m.name} has non-lower_snake value: {m.value!r}"
                )
