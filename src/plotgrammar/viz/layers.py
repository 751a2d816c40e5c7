"""
Layer constructors for the additive grammar: `spec + geom_point(aes(color="region"), size=3)`.

Each `geom_*` function returns an unvalidated LayerSpec. Validation (required
channels, columns present, unknown channels) happens when the layer is added to
a PlotSpec, because only then is the default mapping and dataset known.

Keyword arguments are split by name: channel names (`size`, `color`, `colour`,
`shape`, ...) become fixed aesthetics applied uniformly to every mark; anything
else is a geom parameter (`method`, `nudge_x`, `length`).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import polars as pl

from plotgrammar.core.aes import Aes
from plotgrammar.core.errors import UnknownChannelError
from plotgrammar.core.grammar import Channel, GeomKind, normalize_channel, normalize_geom

__all__ = [
    "LayerSpec",
    "layer",
    "geom_point",
    "geom_line",
    "geom_smooth",
    "geom_text",
    "geom_rug",
    "geom_bar",
    "geom_col",
]


@dataclass(frozen=True, eq=False)
class LayerSpec:
    """
    A layer request: geom kind plus its local settings.

    Attributes:
        kind (GeomKind): Geom to draw.
        mapping (Aes): Local aesthetic mapping.
        fixed (Mapping[Channel | str, Any]): Fixed aesthetics.
        params (Mapping[str, Any]): Geom parameters.
        show_legend (bool | None): False hides this layer's legends; None follows the mapping.
        inherit_aes (bool): Merge the specification's default mapping under `mapping`.
        data (pl.DataFrame | None): Layer-local dataset; None uses the specification's.
    """

    kind: GeomKind
    mapping: Aes = field(default_factory=Aes)
    fixed: Mapping[Channel | str, Any] = field(default_factory=lambda: MappingProxyType({}))
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    show_legend: bool | None = None
    inherit_aes: bool = True
    data: pl.DataFrame | None = None


def _split_kwargs(kwargs: Mapping[str, Any]) -> tuple[dict[Channel, Any], dict[str, Any]]:
    fixed: dict[Channel, Any] = {}
    params: dict[str, Any] = {}
    for key, value in kwargs.items():
        try:
            fixed[normalize_channel(key)] = value
        except UnknownChannelError:
            params[key] = value
    return fixed, params


def layer(
    kind: GeomKind | str,
    mapping: Aes | Mapping[str, Any] | None = None,
    *,
    data: pl.DataFrame | None = None,
    show_legend: bool | None = None,
    inherit_aes: bool = True,
    **kwargs: Any,
) -> LayerSpec:
    """
    Build a LayerSpec for any registered geom kind.

    Args:
        kind: Geom kind or name ("point", "geom_point").
        mapping: Local aesthetic mapping (an `aes(...)` or a plain mapping).
        data: Layer-local dataset.
        show_legend: False hides legends produced by this layer.
        inherit_aes: When False the layer ignores the default mapping.
        **kwargs: Fixed aesthetics (channel names) and geom parameters (other names).

    Raises:
        UnknownGeomError: If `kind` is not registered.
        UnknownChannelError: If `mapping` names an unknown channel.
    """
    fixed, params = _split_kwargs(kwargs)
    return LayerSpec(
        kind=normalize_geom(kind),
        mapping=mapping if isinstance(mapping, Aes) else Aes(mapping),
        fixed=MappingProxyType(fixed),
        params=MappingProxyType(params),
        show_legend=show_legend,
        inherit_aes=inherit_aes,
        data=data,
    )


def geom_point(mapping: Aes | Mapping[str, Any] | None = None, **kwargs: Any) -> LayerSpec:
    """
    Scatterplot points.

    Examples:
        >>> from plotgrammar.core.aes import aes
        >>> lyr = geom_point(aes(color="four_regions"), size=3)
        >>> lyr.kind.value, dict(lyr.fixed)
        ('point', {<Channel.SIZE: 'size'>: 3})
    """
    return layer(GeomKind.POINT, mapping, **kwargs)


def geom_line(mapping: Aes | Mapping[str, Any] | None = None, **kwargs: Any) -> LayerSpec:
    return layer(GeomKind.LINE, mapping, **kwargs)


def geom_smooth(
    mapping: Aes | Mapping[str, Any] | None = None, *, method: str = "loess", **kwargs: Any
) -> LayerSpec:
    """Smoothed conditional mean; method is "lm" (linear regression) or "loess"."""
    return layer(GeomKind.SMOOTH, mapping, method=method, **kwargs)


def geom_text(
    mapping: Aes | Mapping[str, Any] | None = None,
    *,
    nudge_x: float = 0.0,
    nudge_y: float = 0.0,
    **kwargs: Any,
) -> LayerSpec:
    """Text labels; requires a `label` mapping. Nudges are in data units."""
    return layer(GeomKind.TEXT, mapping, nudge_x=nudge_x, nudge_y=nudge_y, **kwargs)


def geom_rug(
    mapping: Aes | Mapping[str, Any] | None = None, *, length: float | None = None, **kwargs: Any
) -> LayerSpec:
    """Marginal ticks for whichever of x/y is mapped; `length` in px."""
    return layer(GeomKind.RUG, mapping, length=length, **kwargs)


def geom_bar(mapping: Aes | Mapping[str, Any] | None = None, **kwargs: Any) -> LayerSpec:
    """Bars counting rows per x (summing `weight` when mapped)."""
    return layer(GeomKind.BAR, mapping, **kwargs)


def geom_col(mapping: Aes | Mapping[str, Any] | None = None, **kwargs: Any) -> LayerSpec:
    return layer(GeomKind.COL, mapping, **kwargs)
