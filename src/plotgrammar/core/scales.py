"""
Pydantic v2 models for scale policies, plus the scale constructors used in the
additive grammar (`spec + scale_size(range=(2, 20))`).

Responsibilities
- Define frozen scale policy models: ContinuousScale, DiscreteScale, ManualScale.
- Represent axis/legend breaks as explicit (position, label) pairs (Break).
- Resolve deterministic category order (declared levels first, then first
  appearance in the data) and per-level legend labels.
- Provide ScaleOverride (channel + policy) constructors such as scale_size,
  scale_color_manual and scale_x_log10.

Notes
- Scales are keyed by channel on the specification; adding a scale for a channel
  replaces any earlier one (last write wins).
- Breaks are never recomputed from data. If the data changes, stale breaks are the
  caller's responsibility.
- Color-valued fields are normalized with plotgrammar.core.colors.

Examples
--------
>>> from plotgrammar.core.scales import scale_size
>>> scale_size(range=(2, 20), guide="none").policy.range
(2.0, 20.0)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .colors import normalize_color
from .constants import NA_COLOR, NA_LEVEL
from .errors import InvalidScaleError
from .grammar import Channel, normalize_channel

__all__ = [
    "Break",
    "ContinuousScale",
    "DiscreteScale",
    "ManualScale",
    "ScalePolicy",
    "ScaleOverride",
    "make_breaks",
    "resolve_levels",
    "level_labels",
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
]

Guide = Literal["legend", "none"]
Transform = Literal["identity", "log", "log10", "sqrt"]

_COLOR_CHANNELS = {Channel.COLOR, Channel.FILL}


class Break(BaseModel):
    """
    One axis/legend break.

    Attributes:
        position (float | str): Data-space position (number, or level for discrete axes).
        label (str): Text drawn at the position.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    position: float | str
    label: str


class ContinuousScale(BaseModel):
    """
    Continuous mapping from numeric data to a visual range.

    Attributes:
        name (str | None): Axis/legend title (labels from add_labels take precedence).
        range (tuple | None): Output range, e.g. (2, 20) for size in mm or
            ("#fee8c8", "#e34a33") for color. None keeps the channel default.
        limits (tuple[float, float] | None): Input domain.
        transform (Transform): "identity", "log" (natural), "log10" or "sqrt".
        breaks (tuple[Break, ...] | None): Explicit break positions and labels.
        guide (Guide): "legend" or "none" (hide the legend for this channel).

    Raises:
        pydantic.ValidationError: If limits are not increasing.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["continuous"] = "continuous"
    name: str | None = None
    range: tuple[Any, Any] | None = None
    limits: tuple[float, float] | None = None
    transform: Transform = "identity"
    breaks: tuple[Break, ...] | None = None
    guide: Guide = "legend"

    @field_validator("range")
    @classmethod
    def _normalize_range(cls, v: tuple[Any, Any] | None) -> tuple[Any, Any] | None:
        if v is None:
            return v
        lo, hi = v
        if isinstance(lo, (int, float)) and isinstance(hi, (int, float)):
            return (float(lo), float(hi))
        return (normalize_color(lo), normalize_color(hi))

    @field_validator("limits")
    @classmethod
    def _check_limits(cls, v: tuple[float, float] | None) -> tuple[float, float] | None:
        if v is not None and not v[0] < v[1]:
            raise ValueError(f"limits must be increasing (got {v!r})")
        return v


class _DiscreteBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = None
    levels: tuple[str, ...] | None = None
    labels: dict[str, str] | tuple[str, ...] | None = None
    guide: Guide = "legend"
    na_value: Any = NA_COLOR

    @model_validator(mode="after")
    def _check_labels(self) -> _DiscreteBase:
        if (
            isinstance(self.labels, tuple)
            and self.levels is not None
            and len(self.labels) != len(self.levels)
        ):
            raise ValueError(
                f"{len(self.labels)} labels given for {len(self.levels)} levels; "
                "use a level -> label mapping to label a subset"
            )
        if self.levels is not None and len(set(self.levels)) != len(self.levels):
            raise ValueError(f"levels must be unique (got {self.levels!r})")
        return self


class DiscreteScale(_DiscreteBase):
    """
    Discrete mapping from categories to a palette, in level order.

    Attributes:
        levels (tuple[str, ...] | None): Declared category order; None means order of
            first appearance in the data.
        palette (tuple | None): Output values assigned to levels in order; None keeps
            the rendering engine's default palette.
        labels: Legend text per level (mapping) or aligned with the resolved levels.
    """

    kind: Literal["discrete"] = "discrete"
    palette: tuple[Any, ...] | None = None

    @field_validator("palette")
    @classmethod
    def _normalize_palette(cls, v: tuple[Any, ...] | None) -> tuple[Any, ...] | None:
        return None if v is None else tuple(normalize_color(c) for c in v)


class ManualScale(_DiscreteBase):
    """
    Manual lookup table from category to visual value.

    Attributes:
        values (dict[str, Any]): Level -> visual value (color name, shape, linetype ...).
        na_value: Visual value for categories missing from `values`.

    Examples:
        >>> ManualScale(values={"asia": "Red", "africa": "light blue"}).values["africa"]
        'lightblue'
    """

    kind: Literal["manual"] = "manual"
    values: dict[str, Any] = Field(..., min_length=1)

    @field_validator("values")
    @classmethod
    def _normalize_values(cls, v: dict[str, Any]) -> dict[str, Any]:
        return {str(k): normalize_color(val) for k, val in v.items()}

    def lookup(self, level: str) -> Any:
        return self.values.get(level, self.na_value)


ScalePolicy = ContinuousScale | DiscreteScale | ManualScale


@dataclass(frozen=True, slots=True)
class ScaleOverride:
    """A scale policy bound to the channel it applies to (for `spec + scale`)."""

    channel: Channel
    policy: ScalePolicy


def make_breaks(
    breaks: Mapping[Any, str] | Sequence[Any] | None,
    labels: Sequence[str] | None = None,
) -> tuple[Break, ...] | None:
    """
    Build explicit breaks.

    Args:
        breaks: One of
            - None (engine default breaks),
            - a mapping position -> label,
            - a sequence of (position, label) pairs,
            - a sequence of positions, with `labels` aligned to it (or None to use
              the positions as labels).
        labels: Labels aligned with a plain position sequence.

    Returns:
        tuple[Break, ...] | None

    Raises:
        InvalidScaleError: If labels and positions do not align.
    """
    if breaks is None:
        if labels is not None:
            raise InvalidScaleError("labels given without breaks")
        return None
    if isinstance(breaks, Mapping):
        return tuple(Break(position=p, label=str(lbl)) for p, lbl in breaks.items())
    items = list(breaks)
    if items and all(isinstance(b, (tuple, list)) and len(b) == 2 for b in items):
        if labels is not None:
            raise InvalidScaleError("labels given together with (position, label) pairs")
        return tuple(Break(position=p, label=str(lbl)) for p, lbl in items)
    if labels is None:
        return tuple(Break(position=p, label=_format_position(p)) for p in items)
    if len(labels) != len(items):
        raise InvalidScaleError(f"{len(labels)} labels given for {len(items)} breaks")
    return tuple(Break(position=p, label=str(lbl)) for p, lbl in zip(items, labels, strict=True))


def _format_position(p: Any) -> str:
    if isinstance(p, float) and p.is_integer():
        return str(int(p))
    return str(p)


def resolve_levels(policy: ScalePolicy | None, observed: Iterable[Any]) -> list[Any]:
    """
    Deterministic category order for a discrete channel.

    Declared levels come first, in declared order; observed values not declared
    follow in order of first appearance. Without declared levels the order of first
    appearance is used as-is. Nulls are dropped.
    """
    seen: list[Any] = []
    known: set[Any] = set()
    declared = getattr(policy, "levels", None) if policy is not None else None
    for value in list(declared or ()) + list(observed):
        if value is None or value in known:
            continue
        known.add(value)
        seen.append(value)
    return seen


def level_labels(policy: ScalePolicy | None, levels: Sequence[Any]) -> dict[Any, str]:
    """Return only the levels whose legend text differs from the level itself.

    A label sequence aligns with the data levels; the NA level is left unlabelled.
    """
    labels = getattr(policy, "labels", None) if policy is not None else None
    if labels is None:
        return {}
    if isinstance(labels, dict):
        return {lvl: labels[str(lvl)] for lvl in levels if str(lvl) in labels}
    levels = [lvl for lvl in levels if lvl != NA_LEVEL]
    if len(labels) != len(levels):
        raise InvalidScaleError(
            f"{len(labels)} labels given for {len(levels)} levels {list(levels)!r}"
        )
    return dict(zip(levels, labels, strict=True))


# ----------------------------------------------------------------------------
# Constructors
# ----------------------------------------------------------------------------


def _continuous(
    channel: Channel | str,
    *,
    name: str | None = None,
    range: tuple[Any, Any] | None = None,
    limits: tuple[float, float] | None = None,
    transform: Transform = "identity",
    breaks: Any = None,
    labels: Sequence[str] | None = None,
    guide: Guide = "legend",
) -> ScaleOverride:
    return ScaleOverride(
        channel=normalize_channel(channel),
        policy=ContinuousScale(
            name=name,
            range=range,
            limits=limits,
            transform=transform,
            breaks=make_breaks(breaks, labels),
            guide=guide,
        ),
    )


def scale_size(
    range: tuple[float, float] = (1.0, 6.0),
    *,
    name: str | None = None,
    limits: tuple[float, float] | None = None,
    breaks: Any = None,
    labels: Sequence[str] | None = None,
    guide: Guide = "legend",
) -> ScaleOverride:
    """Continuous size scale; `range` is the output size range in mm."""
    return _continuous(
        Channel.SIZE,
        name=name,
        range=range,
        limits=limits,
        breaks=breaks,
        labels=labels,
        guide=guide,
    )


def scale_alpha(
    range: tuple[float, float] = (0.1, 1.0), *, name: str | None = None, guide: Guide = "legend"
) -> ScaleOverride:
    return _continuous(Channel.ALPHA, name=name, range=range, guide=guide)


def scale_x_continuous(
    name: str | None = None,
    *,
    breaks: Any = None,
    labels: Sequence[str] | None = None,
    limits: tuple[float, float] | None = None,
    transform: Transform = "identity",
) -> ScaleOverride:
    return _continuous(
        Channel.X, name=name, breaks=breaks, labels=labels, limits=limits, transform=transform
    )


def scale_y_continuous(
    name: str | None = None,
    *,
    breaks: Any = None,
    labels: Sequence[str] | None = None,
    limits: tuple[float, float] | None = None,
    transform: Transform = "identity",
) -> ScaleOverride:
    return _continuous(
        Channel.Y, name=name, breaks=breaks, labels=labels, limits=limits, transform=transform
    )


def scale_x_log10(name: str | None = None, **kwargs: Any) -> ScaleOverride:
    return scale_x_continuous(name, transform="log10", **kwargs)


def scale_y_log10(name: str | None = None, **kwargs: Any) -> ScaleOverride:
    return scale_y_continuous(name, transform="log10", **kwargs)


def scale_color_gradient(
    low: str = "#132B43", high: str = "#56B1F7", *, name: str | None = None, guide: Guide = "legend"
) -> ScaleOverride:
    return _continuous(Channel.COLOR, name=name, range=(low, high), guide=guide)


def _discrete(
    channel: Channel,
    palette: Sequence[Any] | None,
    *,
    name: str | None,
    levels: Sequence[str] | None,
    labels: Mapping[str, str] | Sequence[str] | None,
    guide: Guide,
) -> ScaleOverride:
    return ScaleOverride(
        channel=channel,
        policy=DiscreteScale(
            name=name,
            palette=None if palette is None else tuple(palette),
            levels=None if levels is None else tuple(levels),
            labels=_labels_arg(labels),
            guide=guide,
        ),
    )


def scale_color_discrete(
    palette: Sequence[str] | None = None,
    *,
    name: str | None = None,
    levels: Sequence[str] | None = None,
    labels: Mapping[str, str] | Sequence[str] | None = None,
    guide: Guide = "legend",
) -> ScaleOverride:
    return _discrete(Channel.COLOR, palette, name=name, levels=levels, labels=labels, guide=guide)


def scale_fill_discrete(
    palette: Sequence[str] | None = None,
    *,
    name: str | None = None,
    levels: Sequence[str] | None = None,
    labels: Mapping[str, str] | Sequence[str] | None = None,
    guide: Guide = "legend",
) -> ScaleOverride:
    return _discrete(Channel.FILL, palette, name=name, levels=levels, labels=labels, guide=guide)


def _manual(
    channel: Channel,
    values: Mapping[str, Any],
    *,
    name: str | None,
    levels: Sequence[str] | None,
    labels: Mapping[str, str] | Sequence[str] | None,
    guide: Guide,
    na_value: Any,
) -> ScaleOverride:
    return ScaleOverride(
        channel=channel,
        policy=ManualScale(
            name=name,
            values=dict(values),
            levels=None if levels is None else tuple(levels),
            labels=_labels_arg(labels),
            guide=guide,
            na_value=na_value,
        ),
    )


def _labels_arg(
    labels: Mapping[str, str] | Sequence[str] | None,
) -> dict[str, str] | tuple[str, ...] | None:
    if labels is None:
        return None
    if isinstance(labels, Mapping):
        return {str(k): str(v) for k, v in labels.items()}
    return tuple(str(v) for v in labels)


def scale_color_manual(
    values: Mapping[str, Any],
    *,
    name: str | None = None,
    levels: Sequence[str] | None = None,
    labels: Mapping[str, str] | Sequence[str] | None = None,
    guide: Guide = "legend",
    na_value: Any = NA_COLOR,
) -> ScaleOverride:
    """
    Manual color scale.

    Examples:
        >>> s = scale_color_manual({"asia": "red", "africa": "light blue"}, name="World Region")
        >>> s.channel.value, s.policy.name
        ('color', 'World Region')
    """
    return _manual(
        Channel.COLOR,
        values,
        name=name,
        levels=levels,
        labels=labels,
        guide=guide,
        na_value=na_value,
    )


def scale_fill_manual(
    values: Mapping[str, Any],
    *,
    name: str | None = None,
    levels: Sequence[str] | None = None,
    labels: Mapping[str, str] | Sequence[str] | None = None,
    guide: Guide = "legend",
    na_value: Any = NA_COLOR,
) -> ScaleOverride:
    return _manual(
        Channel.FILL,
        values,
        name=name,
        levels=levels,
        labels=labels,
        guide=guide,
        na_value=na_value,
    )


def scale_shape_manual(
    values: Mapping[str, Any],
    *,
    name: str | None = None,
    levels: Sequence[str] | None = None,
    labels: Mapping[str, str] | Sequence[str] | None = None,
    guide: Guide = "legend",
) -> ScaleOverride:
    return _manual(
        Channel.SHAPE,
        values,
        name=name,
        levels=levels,
        labels=labels,
        guide=guide,
        na_value="circle",
    )


def scale_linetype_manual(
    values: Mapping[str, Any],
    *,
    name: str | None = None,
    levels: Sequence[str] | None = None,
    labels: Mapping[str, str] | Sequence[str] | None = None,
    guide: Guide = "legend",
) -> ScaleOverride:
    return _manual(
        Channel.LINETYPE,
        values,
        name=name,
        levels=levels,
        labels=labels,
        guide=guide,
        na_value="solid",
    )
