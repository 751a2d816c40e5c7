"""
Frozen descriptors for the geometric-object kinds a layer can draw.

Notes:
    - Each descriptor declares the Vega-Lite mark, the channels a layer must set
      (`required`), groups where at least one channel must be set (`required_any`),
      the optional channels it understands, and default params.
    - Fixed aesthetics count as "set" for requirement checks.
    - Channels outside required ∪ required_any ∪ optional are ignored at render
      time (with a warning from the builder).
    - Zero-IO, stdlib-only.

Examples:
    >>> from plotgrammar.core.geoms import get_geom
    >>> from plotgrammar.core.grammar import Channel, GeomKind
    >>> get_geom(GeomKind.TEXT).missing({Channel.X, Channel.Y})
    ['label']
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .grammar import Channel, GeomKind, normalize_geom

__all__ = [
    "GeomDescriptor",
    "POINT_DESC",
    "LINE_DESC",
    "SMOOTH_DESC",
    "TEXT_DESC",
    "RUG_DESC",
    "BAR_DESC",
    "COL_DESC",
    "get_geom",
    "list_geoms",
]


@dataclass(frozen=True, slots=True)
class GeomDescriptor:
    """
    Frozen descriptor for a geometric-object kind.

    Attributes:
        kind (GeomKind): Canonical geom identifier.
        mark (str): Vega-Lite mark type used for rendering.
        required (frozenset[Channel]): Channels that must be set after merge.
        optional (frozenset[Channel]): Additional channels the geom understands.
        required_any (frozenset[Channel]): At least one of these must be set (empty = no rule).
        params (Mapping[str, Any]): Default geom parameters; unknown params are ignored.
        description (str): Human-readable description.
    """

    kind: GeomKind
    mark: str
    required: frozenset[Channel]
    optional: frozenset[Channel]
    required_any: frozenset[Channel] = frozenset()
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    description: str = ""

    @property
    def accepted(self) -> frozenset[Channel]:
        return self.required | self.required_any | self.optional

    def accepts(self, channel: Channel) -> bool:
        return channel in self.accepted

    def missing(self, present: Iterable[Channel]) -> list[str]:
        """
        Return the channel names still needed given the channels present.

        Args:
            present (Iterable[Channel]): Channels set by mapping or fixed aesthetics.

        Returns:
            list[str]: Missing required channel names in enum order; an unmet
            "at least one of" group is reported as "x|y".
        """
        have = set(present)
        out = [c.value for c in Channel if c in self.required and c not in have]
        if self.required_any and not (self.required_any & have):
            out.append("|".join(c.value for c in Channel if c in self.required_any))
        return out


def _params(**kw: Any) -> Mapping[str, Any]:
    return MappingProxyType(dict(kw))


POINT_DESC = GeomDescriptor(
    kind=GeomKind.POINT,
    mark="point",
    required=frozenset({Channel.X, Channel.Y}),
    optional=frozenset({Channel.COLOR, Channel.FILL, Channel.SIZE, Channel.SHAPE, Channel.ALPHA}),
    description="Scatterplot points; the basis of bubble charts when size is mapped.",
)

LINE_DESC = GeomDescriptor(
    kind=GeomKind.LINE,
    mark="line",
    required=frozenset({Channel.X, Channel.Y}),
    optional=frozenset({Channel.COLOR, Channel.SIZE, Channel.LINETYPE, Channel.ALPHA}),
    description="Connects observations in order of x.",
)

SMOOTH_DESC = GeomDescriptor(
    kind=GeomKind.SMOOTH,
    mark="line",
    required=frozenset({Channel.X, Channel.Y}),
    optional=frozenset(
        {Channel.COLOR, Channel.FILL, Channel.SIZE, Channel.LINETYPE, Channel.ALPHA}
    ),
    params=_params(method="loess"),
    description="Smoothed conditional mean: linear regression (method='lm') or loess.",
)

TEXT_DESC = GeomDescriptor(
    kind=GeomKind.TEXT,
    mark="text",
    required=frozenset({Channel.X, Channel.Y, Channel.LABEL}),
    optional=frozenset({Channel.COLOR, Channel.SIZE, Channel.ALPHA}),
    params=_params(nudge_x=0.0, nudge_y=0.0),
    description="Text labels placed at x/y; requires a label mapping.",
)

RUG_DESC = GeomDescriptor(
    kind=GeomKind.RUG,
    mark="tick",
    required=frozenset(),
    required_any=frozenset({Channel.X, Channel.Y}),
    optional=frozenset({Channel.COLOR, Channel.SIZE, Channel.LINETYPE, Channel.ALPHA}),
    params=_params(length=None),
    description="Marginal tick marks along the x and/or y axes.",
)

BAR_DESC = GeomDescriptor(
    kind=GeomKind.BAR,
    mark="bar",
    required=frozenset({Channel.X}),
    optional=frozenset(
        {
            Channel.COLOR,
            Channel.FILL,
            Channel.SIZE,
            Channel.LINETYPE,
            Channel.ALPHA,
            Channel.WEIGHT,
        }
    ),
    description="Bar heights count rows per x (weighted sum when weight is mapped).",
)

COL_DESC = GeomDescriptor(
    kind=GeomKind.COL,
    mark="bar",
    required=frozenset({Channel.X, Channel.Y}),
    optional=frozenset(
        {Channel.COLOR, Channel.FILL, Channel.SIZE, Channel.LINETYPE, Channel.ALPHA}
    ),
    description="Bars whose heights are taken directly from y.",
)


# Registry
_GEOMS: dict[GeomKind, GeomDescriptor] = {
    POINT_DESC.kind: POINT_DESC,
    LINE_DESC.kind: LINE_DESC,
    SMOOTH_DESC.kind: SMOOTH_DESC,
    TEXT_DESC.kind: TEXT_DESC,
    RUG_DESC.kind: RUG_DESC,
    BAR_DESC.kind: BAR_DESC,
    COL_DESC.kind: COL_DESC,
}


def get_geom(kind: GeomKind | str) -> GeomDescriptor:
    """
    Look up a geom descriptor by kind.

    Args:
        kind (GeomKind | str): Canonical kind or name ("point", "geom_point").

    Returns:
        GeomDescriptor: Descriptor for the requested geom.

    Raises:
        UnknownGeomError: If the name is not registered.
    """
    return _GEOMS[normalize_geom(kind)]


def list_geoms() -> list[GeomDescriptor]:
    """Return all registered geom descriptors in registry order."""
    return list(_GEOMS.values())
