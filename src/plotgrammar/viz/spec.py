"""
Immutable plot specification and its derivation operations.

A PlotSpec bundles a dataset, a default aesthetic mapping, an ordered list of
layers, per-channel scale policies, coordinate limits, theme overrides and
labels. Every operation returns a new PlotSpec; unchanged parts are shared, so
an intermediate specification can be branched into several variants.

Responsibilities
- Validate mappings against the dataset in scope (InvalidMappingError) and
  required channels against the geom (MissingRequiredAestheticError).
- Apply last-write-wins precedence for scales, theme elements, labels and limits.
- Provide `spec + component` composition and a canonical description/fingerprint.

Notes
- Validation is synchronous and happens in the operation that introduces the
  problem; rendering re-validates against the data it is given.
- Channels a geom does not accept, and unknown geom params, are logged and ignored.

Examples
--------
>>> import polars as pl
>>> from plotgrammar.core.aes import aes
>>> from plotgrammar.viz.layers import geom_point
>>> df = pl.DataFrame({"a": [1, 2], "b": [3, 4]})
>>> p = create_base(df, aes(x="a", y="b")) + geom_point()
>>> len(p.layers)
1
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import polars as pl

from plotgrammar.core.aes import Aes
from plotgrammar.core.colors import normalize_color
from plotgrammar.core.errors import (
    InvalidLimitsError,
    InvalidMappingError,
    InvalidScaleError,
    MissingRequiredAestheticError,
    PlotGrammarError,
)
from plotgrammar.core.geoms import get_geom
from plotgrammar.core.grammar import (
    POSITION_CHANNELS,
    Channel,
    GeomKind,
    normalize_channel,
    normalize_label_key,
)
from plotgrammar.core.hashing import hash_description
from plotgrammar.core.scales import (
    ContinuousScale,
    DiscreteScale,
    ManualScale,
    ScaleOverride,
    ScalePolicy,
)
from plotgrammar.core.themes import Theme

from .layers import LayerSpec

if TYPE_CHECKING:
    import altair as alt

    from plotgrammar.config import Settings

__all__ = [
    "Layer",
    "Labels",
    "CoordLimits",
    "PlotSpec",
    "labs",
    "ggtitle",
    "xlab",
    "ylab",
    "coord_cartesian",
    "xlim",
    "ylim",
    "create_base",
    "add_layer",
    "add_scale",
    "add_theme",
    "add_labels",
    "set_coordinate_limits",
    "with_data",
]

logger = logging.getLogger(__name__)

_COLOR_CHANNELS = frozenset({Channel.COLOR, Channel.FILL})
_SMOOTH_METHODS = {"lm": "lm", "linear": "lm", "loess": "loess"}


# ----------------------------------------------------------------------------
# Components
# ----------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Layer:
    """
    A validated layer of a PlotSpec.

    Attributes:
        kind (GeomKind): Geom drawn by the layer.
        mapping (Aes): Effective mapping (default mapping overlaid by the local one).
        local_mapping (Aes): Mapping given to the layer itself.
        fixed (Mapping[Channel, Any]): Fixed aesthetics; these win over mapped channels.
        params (Mapping[str, Any]): Geom defaults overlaid by recognized params.
        show_legend (bool | None): False hides this layer's legends.
        inherit_aes (bool): Whether the default mapping was merged in.
        data (pl.DataFrame | None): Layer-local dataset.
    """

    kind: GeomKind
    mapping: Aes
    local_mapping: Aes
    fixed: Mapping[Channel, Any]
    params: Mapping[str, Any]
    show_legend: bool | None = None
    inherit_aes: bool = True
    data: pl.DataFrame | None = None

    def describe(self) -> dict[str, Any]:
        return {
            "geom": self.kind.value,
            "mapping": self.mapping.labels(),
            "fixed": {c.value: v for c, v in self.fixed.items()},
            "params": dict(self.params),
            "show_legend": self.show_legend,
            "inherit_aes": self.inherit_aes,
            "data": None if self.data is None else _describe_data(self.data),
        }


@dataclass(frozen=True)
class Labels:
    """
    Title overrides: "title", "subtitle", "caption" and one per channel.

    A key mapped to None hides that title; an absent key keeps the default.
    """

    values: Mapping[str, str | None] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        checked: dict[str, str | None] = {}
        for key, value in dict(self.values).items():
            checked[normalize_label_key(key)] = None if value is None else str(value)
        object.__setattr__(self, "values", MappingProxyType(checked))


def labs(**labels: str | None) -> Labels:
    """
    Build label overrides.

    Examples:
        >>> labs(title="Income vs. life expectancy", colour="World Region").values["color"]
        'World Region'
    """
    return Labels(labels)


def ggtitle(title: str | None, subtitle: str | None = None) -> Labels:
    values: dict[str, str | None] = {"title": title}
    if subtitle is not None:
        values["subtitle"] = subtitle
    return Labels(values)


def xlab(label: str | None) -> Labels:
    return Labels({"x": label})


def ylab(label: str | None) -> Labels:
    return Labels({"y": label})


def _check_range(value: Any, axis: str) -> tuple[float, float] | None:
    if value is None:
        return None
    try:
        lo, hi = value
        lo, hi = float(lo), float(hi)
    except (TypeError, ValueError):
        raise InvalidLimitsError(
            f"{axis} limits must be a (lo, hi) pair of numbers (got {value!r})"
        ) from None
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise InvalidLimitsError(f"{axis} limits must be finite (got {value!r})")
    if lo == hi:
        raise InvalidLimitsError(f"{axis} limits must be distinct (got {value!r})")
    return (lo, hi)


@dataclass(frozen=True)
class CoordLimits:
    """Visible x/y ranges; data outside stays in the computation but is clipped."""

    x: tuple[float, float] | None = None
    y: tuple[float, float] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", _check_range(self.x, "x"))
        object.__setattr__(self, "y", _check_range(self.y, "y"))

    def merge(self, other: CoordLimits) -> CoordLimits:
        return CoordLimits(
            x=other.x if other.x is not None else self.x,
            y=other.y if other.y is not None else self.y,
        )


def coord_cartesian(
    xlim: tuple[float, float] | None = None, ylim: tuple[float, float] | None = None
) -> CoordLimits:
    return CoordLimits(x=xlim, y=ylim)


def xlim(lo: float, hi: float) -> CoordLimits:
    return CoordLimits(x=(lo, hi))


def ylim(lo: float, hi: float) -> CoordLimits:
    return CoordLimits(y=(lo, hi))


# ----------------------------------------------------------------------------
# Specification
# ----------------------------------------------------------------------------


def _describe_data(df: pl.DataFrame) -> dict[str, Any]:
    return {"columns": list(df.columns), "rows": int(df.height)}


def _check_columns(mapping: Aes, df: pl.DataFrame, *, where: str) -> None:
    missing = mapping.columns() - set(df.columns)
    if missing:
        raise InvalidMappingError(missing, df.columns, where=where)


def _as_aes(mapping: Aes | Mapping[str, Any] | None) -> Aes:
    return mapping if isinstance(mapping, Aes) else Aes(mapping)


@dataclass(frozen=True, eq=False)
class PlotSpec:
    """
    Immutable plot specification.

    Attributes:
        data (pl.DataFrame): Dataset in scope for layers without their own data.
        mapping (Aes): Default aesthetic mapping inherited by layers.
        layers (tuple[Layer, ...]): Layers in drawing order.
        scales (Mapping[Channel, ScalePolicy]): At most one policy per channel.
        limits (CoordLimits): Visible x/y ranges.
        theme (Theme): Theme element overrides (merged over the configured preset).
        labels (Labels): Title overrides.

    Notes:
        Equality is identity; use `equivalent()` (or compare `describe()`) to
        compare specifications structurally.
    """

    data: pl.DataFrame
    mapping: Aes = field(default_factory=Aes)
    layers: tuple[Layer, ...] = ()
    scales: Mapping[Channel, ScalePolicy] = field(default_factory=lambda: MappingProxyType({}))
    limits: CoordLimits = field(default_factory=CoordLimits)
    theme: Theme = field(default_factory=Theme)
    labels: Labels = field(default_factory=Labels)

    # --- derivations ---------------------------------------------------------

    def add_layer(
        self,
        geometric_kind: GeomKind | str,
        local_mapping: Aes | Mapping[str, Any] | None = None,
        fixed_aesthetics: Mapping[Channel | str, Any] | None = None,
        *,
        params: Mapping[str, Any] | None = None,
        show_legend: bool | None = None,
        inherit_aes: bool = True,
        data: pl.DataFrame | None = None,
    ) -> PlotSpec:
        return add_layer(
            self,
            geometric_kind,
            local_mapping,
            fixed_aesthetics,
            params=params,
            show_legend=show_legend,
            inherit_aes=inherit_aes,
            data=data,
        )

    def add_scale(self, channel: Channel | str, scale_policy: ScalePolicy) -> PlotSpec:
        return add_scale(self, channel, scale_policy)

    def add_theme(self, theme_overrides: Theme | Mapping[str, Any]) -> PlotSpec:
        return add_theme(self, theme_overrides)

    def add_labels(self, label_overrides: Labels | Mapping[str, str | None]) -> PlotSpec:
        return add_labels(self, label_overrides)

    def set_coordinate_limits(
        self,
        x_range: tuple[float, float] | None = None,
        y_range: tuple[float, float] | None = None,
    ) -> PlotSpec:
        return set_coordinate_limits(self, x_range, y_range)

    def with_data(self, dataset: pl.DataFrame) -> PlotSpec:
        return with_data(self, dataset)

    def __add__(self, component: object) -> PlotSpec:
        if isinstance(component, LayerSpec):
            return add_layer(
                self,
                component.kind,
                component.mapping,
                component.fixed,
                params=component.params,
                show_legend=component.show_legend,
                inherit_aes=component.inherit_aes,
                data=component.data,
            )
        if isinstance(component, ScaleOverride):
            return add_scale(self, component.channel, component.policy)
        if isinstance(component, Theme):
            return add_theme(self, component)
        if isinstance(component, Labels):
            return add_labels(self, component)
        if isinstance(component, CoordLimits):
            return set_coordinate_limits(self, component.x, component.y)
        raise TypeError(
            f"cannot add {type(component).__name__} to a PlotSpec; expected a layer, scale, "
            "theme, labels or coordinate limits"
        )

    # --- inspection ----------------------------------------------------------

    def validate(self, data: pl.DataFrame | None = None) -> None:
        """
        Re-check every mapping against the data in scope.

        Raises:
            InvalidMappingError: If a mapping references a column the data lacks.
        """
        df = self.data if data is None else data
        _check_columns(self.mapping, df, where="default mapping")
        for lyr in self.layers:
            layer_df = df if lyr.data is None else lyr.data
            _check_columns(lyr.mapping, layer_df, where=f"geom_{lyr.kind.value} mapping")

    def describe(self) -> dict[str, Any]:
        """Canonical, JSON-able description used for equivalence and fingerprints."""
        return {
            "data": _describe_data(self.data),
            "mapping": self.mapping.labels(),
            "layers": [lyr.describe() for lyr in self.layers],
            "scales": {c.value: p.model_dump(mode="json") for c, p in self.scales.items()},
            "coord": {
                "x": None if self.limits.x is None else list(self.limits.x),
                "y": None if self.limits.y is None else list(self.limits.y),
            },
            "theme": self.theme.to_dict(),
            "labels": dict(self.labels.values),
        }

    def fingerprint(self) -> str:
        return hash_description(self.describe())

    def equivalent(self, other: PlotSpec) -> bool:
        return self.describe() == other.describe()

    def render(
        self, *, data: pl.DataFrame | None = None, settings: Settings | None = None
    ) -> alt.LayerChart:
        from .render import render

        return render(self, data=data, settings=settings)


# ----------------------------------------------------------------------------
# Operations
# ----------------------------------------------------------------------------


def create_base(
    dataset: pl.DataFrame, default_mapping: Aes | Mapping[str, Any] | None = None
) -> PlotSpec:
    """
    Create a specification with data, a default mapping, and nothing to draw.

    Args:
        dataset (pl.DataFrame): Dataset in scope.
        default_mapping: Mapping inherited by every layer.

    Returns:
        PlotSpec: Specification with zero layers.

    Raises:
        TypeError: If `dataset` is not a polars DataFrame.
        InvalidMappingError: If the mapping references a column absent from the dataset.
    """
    if not isinstance(dataset, pl.DataFrame):
        raise TypeError(f"dataset must be a polars DataFrame (got {type(dataset).__name__})")
    mapping = _as_aes(default_mapping)
    _check_columns(mapping, dataset, where="default mapping")
    return PlotSpec(data=dataset, mapping=mapping)


def _normalize_fixed(
    kind: GeomKind, fixed: Mapping[Channel | str, Any] | None
) -> dict[Channel, Any]:
    out: dict[Channel, Any] = {}
    for key, value in (fixed or {}).items():
        channel = normalize_channel(key)
        if value is None:
            raise PlotGrammarError(
                f"geom_{kind.value}: fixed aesthetic {channel.value!r} cannot be None"
            )
        out[channel] = normalize_color(value) if channel in _COLOR_CHANNELS else value
    return out


def _merge_params(kind: GeomKind, params: Mapping[str, Any] | None) -> dict[str, Any]:
    desc = get_geom(kind)
    merged = dict(desc.params)
    for key, value in (params or {}).items():
        if key not in desc.params:
            logger.warning("geom_%s: ignoring unknown parameter %r", kind.value, key)
            continue
        merged[key] = value
    if kind is GeomKind.SMOOTH:
        method = str(merged["method"]).strip().lower()
        if method not in _SMOOTH_METHODS:
            raise PlotGrammarError(
                f"geom_smooth: unsupported method {merged['method']!r}; expected 'lm' or 'loess'"
            )
        merged["method"] = _SMOOTH_METHODS[method]
    return merged


def add_layer(
    spec: PlotSpec,
    geometric_kind: GeomKind | str,
    local_mapping: Aes | Mapping[str, Any] | None = None,
    fixed_aesthetics: Mapping[Channel | str, Any] | None = None,
    *,
    params: Mapping[str, Any] | None = None,
    show_legend: bool | None = None,
    inherit_aes: bool = True,
    data: pl.DataFrame | None = None,
) -> PlotSpec:
    """
    Append a layer.

    Args:
        spec (PlotSpec): Specification to extend.
        geometric_kind: Geom kind or name.
        local_mapping: Layer mapping; same-named channels replace the default mapping's.
        fixed_aesthetics: Channel -> value applied uniformly (no scale, no legend).
        params: Geom parameters (e.g. method="lm" for smooth).
        show_legend: False hides the legends this layer would produce.
        inherit_aes: When False the default mapping is not merged in.
        data: Layer-local dataset.

    Returns:
        PlotSpec: New specification with the layer appended last.

    Raises:
        UnknownGeomError: Unknown geom kind.
        UnknownChannelError: Unknown channel in the mapping or fixed aesthetics.
        InvalidMappingError: The mapping references a column absent from the layer's data.
        MissingRequiredAestheticError: A required channel is unset after the merge.

    Examples:
        >>> import polars as pl
        >>> from plotgrammar.core.aes import aes
        >>> base = create_base(pl.DataFrame({"a": [1], "b": [2], "c": ["x"]}), aes(x="a", y="b"))
        >>> add_layer(base, "text")
        Traceback (most recent call last):
        ...
        plotgrammar.core.errors.MissingRequiredAestheticError: geom_text requires the following missing aesthetics: label
    """
    desc = get_geom(geometric_kind)
    kind = desc.kind
    local = _as_aes(local_mapping)
    fixed = _normalize_fixed(kind, fixed_aesthetics)
    layer_df = spec.data if data is None else data
    if data is not None and not isinstance(data, pl.DataFrame):
        raise TypeError(f"layer data must be a polars DataFrame (got {type(data).__name__})")

    _check_columns(local, layer_df, where=f"geom_{kind.value} mapping")
    effective = spec.mapping.overlay(local) if inherit_aes else local
    if data is not None:
        _check_columns(effective, layer_df, where=f"geom_{kind.value} mapping")

    missing = desc.missing(set(effective) | set(fixed))
    if missing:
        raise MissingRequiredAestheticError(kind.value, missing)

    for channel in [*local, *fixed]:
        if not desc.accepts(channel):
            logger.warning("geom_%s: ignoring unknown aesthetic %r", kind.value, channel.value)

    lyr = Layer(
        kind=kind,
        mapping=effective,
        local_mapping=local,
        fixed=MappingProxyType(fixed),
        params=MappingProxyType(_merge_params(kind, params)),
        show_legend=show_legend,
        inherit_aes=inherit_aes,
        data=data,
    )
    logger.debug("added geom_%s with mapping %r", kind.value, effective)
    return replace(spec, layers=(*spec.layers, lyr))


def _check_scale(channel: Channel, policy: ScalePolicy) -> None:
    if channel in (Channel.LABEL, Channel.WEIGHT):
        raise InvalidScaleError(f"channel {channel.value!r} does not take a scale")
    if isinstance(policy, ContinuousScale):
        if policy.transform != "identity" and channel not in POSITION_CHANNELS:
            raise InvalidScaleError(
                f"transform {policy.transform!r} is only supported on position channels"
            )
        if channel in (Channel.SHAPE, Channel.LINETYPE):
            raise InvalidScaleError(f"channel {channel.value!r} needs a discrete or manual scale")
    elif isinstance(policy, (DiscreteScale, ManualScale)) and channel in POSITION_CHANNELS:
        raise InvalidScaleError(f"channel {channel.value!r} does not take a {policy.kind} scale")


def add_scale(spec: PlotSpec, channel: Channel | str, scale_policy: ScalePolicy) -> PlotSpec:
    """
    Set the scale policy for a channel, replacing any earlier one (last write wins).

    Raises:
        UnknownChannelError: Unknown channel.
        InvalidScaleError: Policy kind not usable on the channel.
        TypeError: `scale_policy` is not a scale policy model.
    """
    ch = normalize_channel(channel)
    if not isinstance(scale_policy, (ContinuousScale, DiscreteScale, ManualScale)):
        raise TypeError(f"expected a scale policy (got {type(scale_policy).__name__})")
    _check_scale(ch, scale_policy)
    if ch in spec.scales:
        logger.debug("replacing %s scale", ch.value)
    return replace(spec, scales=MappingProxyType({**spec.scales, ch: scale_policy}))


def add_theme(spec: PlotSpec, theme_overrides: Theme | Mapping[str, Any]) -> PlotSpec:
    """
    Merge theme element overrides; later keys win.

    Raises:
        UnknownThemeElementError: Unknown element name.
    """
    return replace(spec, theme=spec.theme.merge(theme_overrides))


def add_labels(spec: PlotSpec, label_overrides: Labels | Mapping[str, str | None]) -> PlotSpec:
    """
    Merge label overrides; later keys win.

    Raises:
        UnknownChannelError: Key is neither title/subtitle/caption nor a channel.
    """
    other = label_overrides if isinstance(label_overrides, Labels) else Labels(label_overrides)
    return replace(spec, labels=Labels({**spec.labels.values, **other.values}))


def set_coordinate_limits(
    spec: PlotSpec,
    x_range: tuple[float, float] | None = None,
    y_range: tuple[float, float] | None = None,
) -> PlotSpec:
    """
    Zoom to the given x/y ranges; None keeps the current setting for that axis.

    Raises:
        InvalidLimitsError: Not a pair of distinct finite numbers.
    """
    return replace(spec, limits=spec.limits.merge(CoordLimits(x=x_range, y=y_range)))


def with_data(spec: PlotSpec, dataset: pl.DataFrame) -> PlotSpec:
    """
    Re-bind the specification to a new dataset snapshot.

    Layers with their own data keep it. Derived mappings are re-evaluated from the
    new data at render time.

    Raises:
        InvalidMappingError: If any mapping references a column the new data lacks.
    """
    if not isinstance(dataset, pl.DataFrame):
        raise TypeError(f"dataset must be a polars DataFrame (got {type(dataset).__name__})")
    spec.validate(dataset)
    return replace(spec, data=dataset)
