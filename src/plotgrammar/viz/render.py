"""
Translate a PlotSpec into an Altair (Vega-Lite) layered chart.

Rendering is the only place where mapping expressions are evaluated. For each
layer a small frame is built with one column per mapped channel (named after the
channel), then handed to Altair as inline values. Scales, legends, coordinate
limits, labels and the theme are translated into encoding properties and
top-level configuration.

Notes
- Category order is deterministic: declared scale levels first, then order of first
  appearance across all layers in layer order. Missing categories render as "NA",
  always last.
- Sizes are millimetres in the grammar; points become symbol areas, text becomes font
  size, everything else becomes stroke width.
- Legends: one per mapped legend channel, minus layers with show_legend=False, minus
  scales with guide="none", minus everything when legend_position is "none".
- Non-finite values (e.g. log(0)) and rows with missing positions are dropped with a
  warning.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import altair as alt
import polars as pl

from plotgrammar.config import Settings
from plotgrammar.core.constants import (
    DEFAULT_ALPHA_RANGE,
    DEFAULT_LINE_SIZE,
    DEFAULT_POINT_SIZE,
    DEFAULT_RUG_LENGTH,
    DEFAULT_SIZE_RANGE,
    DEFAULT_TEXT_SIZE,
    HOLLOW_SHAPES,
    LINETYPE_DASHES,
    NA_LEVEL,
    OUTLINED_SHAPES,
    PT_PER_MM,
    SHAPE_CODES,
    SMOOTH_COLOR,
)
from plotgrammar.core.errors import ConfigError
from plotgrammar.core.geoms import get_geom
from plotgrammar.core.grammar import LEGEND_CHANNELS, POSITION_CHANNELS, Channel, GeomKind
from plotgrammar.core.scales import (
    ContinuousScale,
    DiscreteScale,
    ManualScale,
    ScalePolicy,
    level_labels,
    resolve_levels,
)
from plotgrammar.core.themes import Theme, get_theme

from .spec import Layer, PlotSpec

__all__ = ["NA_LEVEL", "render", "resolve_theme"]

logger = logging.getLogger(__name__)

_ENCODERS: dict[str, Any] = {
    "x": alt.X,
    "y": alt.Y,
    "color": alt.Color,
    "fill": alt.Fill,
    "stroke": alt.Stroke,
    "size": alt.Size,
    "shape": alt.Shape,
    "opacity": alt.Opacity,
    "strokeDash": alt.StrokeDash,
    "text": alt.Text,
}

_BAR_KINDS = frozenset({GeomKind.BAR, GeomKind.COL})
_ALWAYS_NOMINAL = frozenset({Channel.SHAPE, Channel.LINETYPE, Channel.LABEL})
_BAR_FILL = "#595959"
_SMOOTH_SIZE = 1.0


@dataclass(frozen=True)
class _LayerFrame:
    layer: Layer
    frame: pl.DataFrame
    types: Mapping[Channel, str]
    outlined: bool


# ----------------------------------------------------------------------------
# Frames
# ----------------------------------------------------------------------------


def _shape_code(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def _shape_name(value: Any) -> str:
    code = _shape_code(value)
    if code is not None:
        return SHAPE_CODES.get(code, "circle")
    return str(value)


def _is_outlined(lyr: Layer) -> bool:
    code = _shape_code(lyr.fixed.get(Channel.SHAPE))
    return lyr.kind is GeomKind.POINT and code in OUTLINED_SHAPES


def _field_type(channel: Channel, dtype: pl.DataType, policy: ScalePolicy | None) -> str:
    if channel in _ALWAYS_NOMINAL or isinstance(policy, (DiscreteScale, ManualScale)):
        return "nominal"
    if dtype.is_numeric():
        return "quantitative"
    if dtype.is_temporal():
        return "temporal"
    return "nominal"


def _build_frame(lyr: Layer, spec: PlotSpec) -> _LayerFrame:
    desc = get_geom(lyr.kind)
    df = spec.data if lyr.data is None else lyr.data
    channels = [c for c in lyr.mapping if desc.accepts(c) and c not in lyr.fixed]
    names = [c.value for c in channels]
    if channels:
        exprs = [lyr.mapping[c].to_polars().alias(c.value) for c in channels]
        frame = df.with_columns(exprs).select(names)
    else:
        frame = pl.DataFrame()

    # non-finite -> null
    floats = [name for name, dtype in frame.schema.items() if dtype.is_float()]
    if floats:
        frame = frame.with_columns(
            [pl.when(pl.col(n).is_finite()).then(pl.col(n)).alias(n) for n in floats]
        )

    # scale limits drop out-of-range positions
    for ch in POSITION_CHANNELS:
        policy = spec.scales.get(ch)
        if ch.value in frame.columns and isinstance(policy, ContinuousScale) and policy.limits:
            lo, hi = policy.limits
            col = pl.col(ch.value)
            frame = frame.with_columns(pl.when(col.is_between(lo, hi)).then(col).alias(ch.value))

    if lyr.kind is GeomKind.TEXT:
        for ch, key in ((Channel.X, "nudge_x"), (Channel.Y, "nudge_y")):
            nudge = lyr.params.get(key) or 0.0
            if nudge and ch.value in frame.columns and frame.schema[ch.value].is_numeric():
                frame = frame.with_columns((pl.col(ch.value) + nudge).alias(ch.value))

    positions = [c.value for c in channels if c in POSITION_CHANNELS]
    if positions:
        before = frame.height
        frame = frame.drop_nulls(subset=positions)
        if frame.height < before:
            logger.warning(
                "geom_%s: removed %d rows containing missing values",
                lyr.kind.value,
                before - frame.height,
            )

    types: dict[Channel, str] = {}
    casts: list[pl.Expr] = []
    for ch in channels:
        ftype = _field_type(ch, frame.schema[ch.value], spec.scales.get(ch))
        types[ch] = ftype
        if ftype == "nominal" and ch is not Channel.LABEL:
            col = pl.col(ch.value).cast(pl.Utf8)
            if ch in LEGEND_CHANNELS:
                col = col.fill_null(NA_LEVEL)
            casts.append(col.alias(ch.value))
    if casts:
        frame = frame.with_columns(casts)
    return _LayerFrame(layer=lyr, frame=frame, types=types, outlined=_is_outlined(lyr))


def _blank_frame(spec: PlotSpec) -> _LayerFrame | None:
    """Axes-only layer for a specification without layers."""
    present = [c for c in (Channel.X, Channel.Y) if c in spec.mapping]
    if not present:
        return None
    lyr = Layer(
        kind=GeomKind.POINT,
        mapping=spec.mapping,
        local_mapping=spec.mapping,
        fixed={},
        params={},
        show_legend=False,
    )
    lf = _build_frame(lyr, spec)
    frame = lf.frame.select([c.value for c in present])
    types = {c: lf.types[c] for c in present}
    return _LayerFrame(layer=lyr, frame=frame, types=types, outlined=False)


def _resolve_domains(spec: PlotSpec, frames: Sequence[_LayerFrame]) -> dict[Channel, list[Any]]:
    observed: dict[Channel, list[Any]] = {}
    for lf in frames:
        for ch, ftype in lf.types.items():
            if ftype != "nominal" or ch in (Channel.LABEL, Channel.WEIGHT):
                continue
            values = lf.frame.get_column(ch.value).unique(maintain_order=True).to_list()
            observed.setdefault(ch, []).extend(values)
    domains: dict[Channel, list[Any]] = {}
    for ch, values in observed.items():
        levels = resolve_levels(spec.scales.get(ch), values)
        if NA_LEVEL in levels:
            levels = [lv for lv in levels if lv != NA_LEVEL] + [NA_LEVEL]
        domains[ch] = levels
    return domains


# ----------------------------------------------------------------------------
# Encodings
# ----------------------------------------------------------------------------


def _target(ch: Channel, lf: _LayerFrame) -> str | None:
    kind = lf.layer.kind
    if ch is Channel.COLOR:
        return "stroke" if lf.outlined or kind in _BAR_KINDS else "color"
    if ch is Channel.FILL:
        return "fill" if lf.outlined or kind in _BAR_KINDS else None
    return {
        Channel.X: "x",
        Channel.Y: "y",
        Channel.SIZE: "size",
        Channel.SHAPE: "shape",
        Channel.ALPHA: "opacity",
        Channel.LINETYPE: "strokeDash",
        Channel.LABEL: "text",
    }.get(ch)


def _size_unit(kind: GeomKind, mm: float) -> float:
    if kind is GeomKind.POINT:
        return (mm * PT_PER_MM) ** 2
    return mm * PT_PER_MM


def _label_expr(labels: Mapping[Any, str], ref: str) -> str:
    parts = [f"{ref} == {json.dumps(k)} ? {json.dumps(v)}" for k, v in labels.items()]
    return " : ".join([*parts, "datum.label"])


def _title(ch: Channel, spec: PlotSpec, lyr: Layer) -> Any:
    if ch.value in spec.labels.values:
        return spec.labels.values[ch.value]
    policy = spec.scales.get(ch)
    if policy is not None and policy.name is not None:
        return policy.name
    if ch in lyr.mapping:
        return lyr.mapping[ch].label
    return alt.Undefined


def _cycle(values: Sequence[Any], n: int) -> list[Any]:
    return [values[i % len(values)] for i in range(n)]


def _scale(
    ch: Channel, lf: _LayerFrame, spec: PlotSpec, domains: Mapping[Channel, list[Any]]
) -> Any:
    policy = spec.scales.get(ch)
    ftype = lf.types[ch]
    kind = lf.layer.kind
    kw: dict[str, Any] = {}

    if ftype == "nominal":
        levels = domains.get(ch)
        if levels is None:
            return alt.Undefined
        kw["domain"] = levels
        if isinstance(policy, ManualScale):
            kw["range"] = [
                policy.na_value if lv == NA_LEVEL else policy.lookup(lv) for lv in levels
            ]
        elif isinstance(policy, DiscreteScale) and policy.palette:
            real = [lv for lv in levels if lv != NA_LEVEL]
            kw["range"] = _cycle(policy.palette, len(real)) + (
                [policy.na_value] if len(real) < len(levels) else []
            )
        if "range" in kw:
            if ch is Channel.SHAPE:
                kw["range"] = [_shape_name(v) for v in kw["range"]]
            elif ch is Channel.LINETYPE:
                kw["range"] = [LINETYPE_DASHES.get(v, v) for v in kw["range"]]
        return alt.Scale(**kw)

    if ftype != "quantitative":
        return alt.Undefined

    if ch in POSITION_CHANNELS:
        if kind not in _BAR_KINDS:
            kw["zero"] = False
        if isinstance(policy, ContinuousScale):
            if policy.transform == "log10":
                kw["type"] = "log"
            elif policy.transform == "log":
                kw["type"] = "log"
                kw["base"] = math.e
            elif policy.transform == "sqrt":
                kw["type"] = "sqrt"
            if policy.limits is not None:
                kw["domain"] = list(policy.limits)
        coord = spec.limits.x if ch is Channel.X else spec.limits.y
        if coord is not None:
            kw["domain"] = list(coord)
        return alt.Scale(**kw)

    if ch is Channel.SIZE:
        rng = DEFAULT_SIZE_RANGE
        if isinstance(policy, ContinuousScale) and policy.range is not None:
            rng = policy.range
        kw["range"] = [_size_unit(kind, float(v)) for v in rng]
        kw["zero"] = False
    elif ch is Channel.ALPHA:
        rng = DEFAULT_ALPHA_RANGE
        if isinstance(policy, ContinuousScale) and policy.range is not None:
            rng = policy.range
        kw["range"] = list(rng)
        kw["zero"] = False
    elif isinstance(policy, ContinuousScale) and policy.range is not None:
        kw["range"] = list(policy.range)
    if isinstance(policy, ContinuousScale) and policy.limits is not None:
        kw["domain"] = list(policy.limits)
    return alt.Scale(**kw) if kw else alt.Undefined


def _breaks(policy: ScalePolicy | None) -> dict[str, Any]:
    if not isinstance(policy, ContinuousScale) or policy.breaks is None:
        return {}
    return {
        "values": [b.position for b in policy.breaks],
        "labelExpr": _label_expr({b.position: b.label for b in policy.breaks}, "datum.value"),
    }


def _legend(
    ch: Channel,
    lf: _LayerFrame,
    spec: PlotSpec,
    domains: Mapping[Channel, list[Any]],
    suppressed: bool,
) -> Any:
    policy = spec.scales.get(ch)
    if suppressed or lf.layer.show_legend is False:
        return None
    if policy is not None and policy.guide == "none":
        return None
    kw: dict[str, Any] = {}
    if lf.types[ch] == "nominal":
        labels = level_labels(policy, domains.get(ch, []))
        if labels:
            kw["labelExpr"] = _label_expr(labels, "datum.label")
    else:
        kw.update(_breaks(policy))
    return alt.Legend(**kw) if kw else alt.Undefined


def _encodings(
    lf: _LayerFrame,
    spec: PlotSpec,
    domains: Mapping[Channel, list[Any]],
    legend_suppressed: frozenset[Channel],
) -> dict[str, Any]:
    enc: dict[str, Any] = {}
    lyr = lf.layer
    for ch, ftype in lf.types.items():
        target = _target(ch, lf)
        if target is None:
            logger.debug("geom_%s: %s has no effect here", lyr.kind.value, ch.value)
            continue
        kw: dict[str, Any] = {"field": ch.value, "type": ftype}
        if target != "text":
            kw["scale"] = _scale(ch, lf, spec, domains)
            kw["title"] = _title(ch, spec, lyr)
        if ch in POSITION_CHANNELS:
            axis = _breaks(spec.scales.get(ch))
            if axis:
                kw["axis"] = alt.Axis(**axis)
        elif ch in LEGEND_CHANNELS:
            kw["legend"] = _legend(ch, lf, spec, domains, ch in legend_suppressed)
        enc[target] = _ENCODERS[target](**kw)
    for ch in POSITION_CHANNELS:
        if ch in lyr.fixed:
            enc[ch.value] = alt.datum(lyr.fixed[ch])
    return enc


# ----------------------------------------------------------------------------
# Marks
# ----------------------------------------------------------------------------


def _mark_props(lf: _LayerFrame, spec: PlotSpec) -> dict[str, Any]:
    lyr = lf.layer
    kind = lyr.kind
    fixed = lyr.fixed
    mapped = set(lf.types)
    props: dict[str, Any] = {}

    if kind is GeomKind.POINT:
        shape = fixed.get(Channel.SHAPE)
        code = _shape_code(shape)
        if shape is not None:
            props["shape"] = _shape_name(shape)
        if lf.outlined:
            props["stroke"] = fixed.get(Channel.COLOR, "black")
            props["strokeWidth"] = 1
            if Channel.FILL in fixed:
                props["fill"] = fixed[Channel.FILL]
            props["filled"] = Channel.FILL in fixed or Channel.FILL in mapped
        else:
            props["filled"] = code not in HOLLOW_SHAPES
            if Channel.COLOR in fixed or Channel.COLOR not in mapped:
                props["color"] = fixed.get(Channel.COLOR, "black")
        if Channel.SIZE not in mapped:
            props["size"] = _size_unit(kind, float(fixed.get(Channel.SIZE, DEFAULT_POINT_SIZE)))
    elif kind is GeomKind.TEXT:
        props["align"] = "center"
        props["baseline"] = "middle"
        if Channel.COLOR in fixed or Channel.COLOR not in mapped:
            props["color"] = fixed.get(Channel.COLOR, "black")
        if Channel.SIZE not in mapped:
            props["fontSize"] = _size_unit(kind, float(fixed.get(Channel.SIZE, DEFAULT_TEXT_SIZE)))
        if Channel.LABEL in fixed:
            props["text"] = str(fixed[Channel.LABEL])
    elif kind in _BAR_KINDS:
        if Channel.FILL in fixed or Channel.FILL not in mapped:
            props["fill"] = fixed.get(Channel.FILL, _BAR_FILL)
        if Channel.COLOR in fixed:
            props["stroke"] = fixed[Channel.COLOR]
        if Channel.SIZE in fixed:
            props["strokeWidth"] = _size_unit(kind, float(fixed[Channel.SIZE]))
    else:
        default_color = SMOOTH_COLOR if kind is GeomKind.SMOOTH else "black"
        default_size = _SMOOTH_SIZE if kind is GeomKind.SMOOTH else DEFAULT_LINE_SIZE
        if Channel.COLOR in fixed or Channel.COLOR not in mapped:
            props["color"] = fixed.get(Channel.COLOR, default_color)
        if Channel.SIZE not in mapped:
            width = _size_unit(kind, float(fixed.get(Channel.SIZE, default_size)))
            props["thickness" if kind is GeomKind.RUG else "strokeWidth"] = width
        if Channel.LINETYPE in fixed:
            lt = fixed[Channel.LINETYPE]
            props["strokeDash"] = LINETYPE_DASHES.get(lt, lt)

    if Channel.ALPHA in fixed:
        props["opacity"] = float(fixed[Channel.ALPHA])
    elif Channel.ALPHA not in mapped:
        props["opacity"] = 1.0
    if spec.limits.x is not None or spec.limits.y is not None:
        props["clip"] = True
    return props


def _layer_charts(
    lf: _LayerFrame,
    spec: PlotSpec,
    domains: Mapping[Channel, list[Any]],
    legend_suppressed: frozenset[Channel],
    settings: Settings,
) -> list[alt.Chart]:
    lyr = lf.layer
    kind = lyr.kind
    if lf.frame.width:
        rows = lf.frame.to_dicts()
    else:
        rows = [{} for _ in range((spec.data if lyr.data is None else lyr.data).height)]
    base = alt.Chart(alt.Data(values=rows))
    enc = _encodings(lf, spec, domains, legend_suppressed)
    props = _mark_props(lf, spec)

    if kind is GeomKind.POINT:
        return [base.mark_point(**props).encode(**enc)]
    if kind is GeomKind.TEXT:
        return [base.mark_text(**props).encode(**enc)]
    if kind is GeomKind.LINE:
        return [base.mark_line(**props).encode(**enc)]
    if kind is GeomKind.COL:
        return [base.mark_bar(**props).encode(**enc)]
    if kind is GeomKind.BAR:
        if Channel.WEIGHT in lf.types:
            y = alt.Y(field=Channel.WEIGHT.value, aggregate="sum", type="quantitative")
        else:
            y = alt.Y(aggregate="count", type="quantitative")
        enc["y"] = y.title(spec.labels.values.get("y", "count"))
        return [base.mark_bar(**props).encode(**enc)]
    if kind is GeomKind.SMOOTH:
        # only the fitted x/y and the group fields survive the transform
        groups: dict[Channel, str] = {}
        for ch, ftype in lf.types.items():
            target = _target(ch, lf)
            if ftype == "nominal" and ch in LEGEND_CHANNELS and target is not None:
                groups[ch] = target
        keep = {"x", "y", *groups.values()}
        enc = {k: v for k, v in enc.items() if k in keep}
        fields = [ch.value for ch in groups]
        if lyr.params["method"] == "lm":
            smoothed = base.transform_regression("x", "y", method="linear", groupby=fields)
        else:
            smoothed = base.transform_loess("x", "y", groupby=fields)
        return [smoothed.mark_line(**props).encode(**enc)]

    # rug
    length = lyr.params.get("length") or DEFAULT_RUG_LENGTH
    charts: list[alt.Chart] = []
    shared = {k: v for k, v in enc.items() if k not in ("x", "y")}
    if "x" in enc:
        charts.append(
            base.mark_tick(orient="vertical", size=length, **props).encode(
                x=enc["x"], y=alt.value(settings.height - length / 2), **shared
            )
        )
    if "y" in enc:
        charts.append(
            base.mark_tick(orient="horizontal", size=length, **props).encode(
                y=enc["y"], x=alt.value(length / 2), **shared
            )
        )
    return charts


# ----------------------------------------------------------------------------
# Theme
# ----------------------------------------------------------------------------


def resolve_theme(spec: PlotSpec, settings: Settings | None = None) -> Theme:
    """
    Complete theme for a specification: the configured preset merged with the
    specification's own overrides.

    Raises:
        ConfigError: If settings name an unknown preset.
    """
    s = settings or Settings()
    try:
        base = get_theme(s.theme)
    except KeyError as exc:
        raise ConfigError(str(exc.args[0])) from exc
    return base.merge(spec.theme)


def _apply_theme(chart: alt.LayerChart, th: Theme) -> alt.LayerChart:
    text_color = th["text_color"]
    chart = (
        chart.configure(
            background=th["background"] or "transparent",
            font=th["font"],
            padding=th["padding"],
        )
        .configure_view(fill=th["panel_background"], stroke=th["panel_border"])
        .configure_axis(
            grid=th["grid"],
            gridColor=th["grid_color"],
            domain=th["axis_line"],
            domainColor=th["axis_color"],
            tickColor=th["axis_color"],
            labelColor=text_color,
            titleColor=text_color,
            labelFontSize=th["axis_label_size"],
            titleFontSize=th["axis_title_size"],
            titleFontWeight=th["axis_title_weight"],
        )
        .configure_title(
            fontSize=th["title_size"],
            fontWeight=th["title_weight"],
            anchor=th["title_anchor"],
            color=text_color,
            subtitleColor=text_color,
            subtitleFontSize=th["font_size"],
        )
    )
    if th["legend_position"] == "none":
        return chart.configure_legend(disable=True)
    return chart.configure_legend(
        orient=th["legend_position"],
        titleFontSize=th["legend_title_size"],
        labelFontSize=th["legend_label_size"],
        titleColor=text_color,
        labelColor=text_color,
    )


def _title_params(spec: PlotSpec) -> Any:
    labels = spec.labels.values
    title = labels.get("title")
    subtitle = [s for s in (labels.get("subtitle"), labels.get("caption")) if s]
    if not title and not subtitle:
        return None
    return alt.TitleParams(text=title or "", subtitle=subtitle or alt.Undefined)


# ----------------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------------


def render(
    spec: PlotSpec, *, data: pl.DataFrame | None = None, settings: Settings | None = None
) -> alt.LayerChart:
    """
    Render a specification to an Altair layered chart.

    Args:
        spec (PlotSpec): Specification to render.
        data (pl.DataFrame | None): Dataset snapshot to render against instead of the
            specification's own (mappings are re-validated).
        settings (Settings | None): Chart size and base theme (defaults when None).

    Returns:
        alt.LayerChart: One sub-chart per layer (two for a rug on both axes).

    Raises:
        InvalidMappingError: If a mapping references a column absent from the data in scope.
        ConfigError: If settings name an unknown theme preset.
    """
    s = settings or Settings()
    if data is not None:
        spec = spec.with_data(data)
    else:
        spec.validate()

    frames = [_build_frame(lyr, spec) for lyr in spec.layers]
    domains = _resolve_domains(spec, frames)

    # size encodes different units per geom, so its scale is independent per layer
    # and only the first layer mapping it draws the legend
    size_layers = [lf for lf in frames if _target(Channel.SIZE, lf) and Channel.SIZE in lf.types]
    independent_size = len(size_layers) > 1
    first_size_legend = next(
        (lf for lf in size_layers if lf.layer.show_legend is not False), None
    )

    charts: list[alt.Chart] = []
    for lf in frames:
        suppressed = frozenset(
            {Channel.SIZE} if independent_size and lf is not first_size_legend else set()
        )
        charts.extend(_layer_charts(lf, spec, domains, suppressed, s))

    if not charts:
        blank = _blank_frame(spec)
        base = alt.Chart(alt.Data(values=blank.frame.to_dicts() if blank else [{}]))
        if blank is not None:
            enc = _encodings(blank, spec, domains, frozenset())
            charts.append(base.mark_point(opacity=0).encode(**enc))
        else:
            charts.append(base.mark_point(opacity=0))

    chart = alt.layer(*charts).properties(width=s.width, height=s.height)
    title = _title_params(spec)
    if title is not None:
        chart = chart.properties(title=title)
    if independent_size:
        chart = chart.resolve_scale(size="independent")
    chart = _apply_theme(chart, resolve_theme(spec, s))
    logger.info("rendered %d layer(s) as %d chart(s)", len(spec.layers), len(charts))
    return chart
