"""
Immutable aesthetic mappings (channel -> expression).

`aes(x="gdp", y=log("pop"), color="region")` builds an `Aes`. Bare strings are
column references, numbers/bools (or `lit(...)`) are mapped constants. Unknown
channel names raise UnknownChannelError when the mapping is built.

Notes:
    - `Aes` is a read-only Mapping; `overlay()` returns a new mapping where the
      other mapping's entries replace same-named entries.
    - Insertion order is kept so describe() output is stable.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from .expr import Expr, as_expr
from .grammar import Channel, normalize_channel

__all__ = ["Aes", "aes"]


class Aes(Mapping[Channel, Expr]):
    """Read-only mapping from Channel to Expr."""

    __slots__ = ("_items",)

    def __init__(self, items: Mapping[Channel | str, Any] | None = None) -> None:
        built: dict[Channel, Expr] = {}
        for key, value in (items or {}).items():
            built[normalize_channel(key)] = as_expr(value)
        self._items = built

    def __getitem__(self, key: Channel | str) -> Expr:
        return self._items[normalize_channel(key)]

    def __iter__(self) -> Iterator[Channel]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, (Channel, str)):
            try:
                return normalize_channel(key) in self._items
            except ValueError:
                return False
        return False

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Aes):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._items.items()))

    def __repr__(self) -> str:
        inner = ", ".join(f"{c.value}={e.label}" for c, e in self._items.items())
        return f"aes({inner})"

    def overlay(self, other: Mapping[Channel, Expr] | None) -> Aes:
        """Return a new mapping with `other` entries replacing same-named entries."""
        merged: dict[Channel, Expr] = dict(self._items)
        if other:
            for channel, expr in other.items():
                merged[normalize_channel(channel)] = expr
        return Aes(merged)

    def columns(self) -> frozenset[str]:
        """All dataset columns referenced by the mapping."""
        out: set[str] = set()
        for expr in self._items.values():
            out |= expr.columns()
        return frozenset(out)

    def labels(self) -> dict[str, str]:
        return {c.value: e.label for c, e in self._items.items()}


def aes(**channels: Any) -> Aes:
    """
    Build an aesthetic mapping.

    Args:
        **channels: channel=value pairs. str values name columns; Expr values are used
            as-is; numbers/bools become mapped constants.

    Returns:
        Aes: Immutable mapping.

    Raises:
        UnknownChannelError: If a keyword is not a recognized channel.
        TypeError: If a value is not a str, number, bool or Expr.

    Examples:
        >>> from plotgrammar.core.aes import aes
        >>> aes(x="income", colour="region")
        aes(x=income, color=region)
    """
    return Aes(channels)
