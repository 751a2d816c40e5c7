"""
Lazy mapping expressions evaluated per record at render time.

An aesthetic can map to a raw column (`col("population_2015")`), a constant
(`lit("red")`) or a derived value (`log(col("income_per_capita_2011"))`). Derived
values are never materialized as new dataset columns: each expression is
translated into a Polars expression when a layer is rendered, so the same
specification re-rendered against a new dataset snapshot picks up new values.

Responsibilities
- Represent expressions as small frozen trees (Column, Literal, Call, BinOp).
- Report referenced columns (for InvalidMappingError checks) and a readable label
  (default axis/legend titles).
- Translate to `polars.Expr`.

Examples:
    >>> from plotgrammar.core.expr import col, log
    >>> e = log(col("income_per_capita_2011"))
    >>> e.label
    'log(income_per_capita_2011)'
    >>> sorted(e.columns())
    ['income_per_capita_2011']
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import polars as pl

__all__ = [
    "Expr",
    "Column",
    "Literal",
    "Call",
    "BinOp",
    "col",
    "lit",
    "log",
    "log10",
    "sqrt",
    "exp",
    "as_expr",
]


class Expr(ABC):
    """Base class for mapping expressions."""

    __slots__ = ()

    @property
    @abstractmethod
    def label(self) -> str:
        """Readable text used for default axis and legend titles."""

    @abstractmethod
    def columns(self) -> frozenset[str]:
        """Dataset columns the expression reads."""

    @abstractmethod
    def to_polars(self) -> pl.Expr: ...

    @property
    def is_constant(self) -> bool:
        return not self.columns()

    def __add__(self, other: object) -> BinOp:
        return BinOp("+", self, as_expr(other, strings="literal"))

    def __radd__(self, other: object) -> BinOp:
        return BinOp("+", as_expr(other, strings="literal"), self)

    def __sub__(self, other: object) -> BinOp:
        return BinOp("-", self, as_expr(other, strings="literal"))

    def __rsub__(self, other: object) -> BinOp:
        return BinOp("-", as_expr(other, strings="literal"), self)

    def __mul__(self, other: object) -> BinOp:
        return BinOp("*", self, as_expr(other, strings="literal"))

    def __rmul__(self, other: object) -> BinOp:
        return BinOp("*", as_expr(other, strings="literal"), self)

    def __truediv__(self, other: object) -> BinOp:
        return BinOp("/", self, as_expr(other, strings="literal"))

    def __rtruediv__(self, other: object) -> BinOp:
        return BinOp("/", as_expr(other, strings="literal"), self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label}>"


@dataclass(frozen=True, slots=True, repr=False)
class Column(Expr):
    """Reference to a dataset column."""

    name: str

    @property
    def label(self) -> str:
        return self.name

    def columns(self) -> frozenset[str]:
        return frozenset({self.name})

    def to_polars(self) -> pl.Expr:
        return pl.col(self.name)


@dataclass(frozen=True, slots=True, repr=False)
class Literal(Expr):
    """Constant evaluated once per record (scaled like data, unlike a fixed aesthetic)."""

    value: Any

    @property
    def label(self) -> str:
        return repr(self.value) if isinstance(self.value, str) else str(self.value)

    def columns(self) -> frozenset[str]:
        return frozenset()

    def to_polars(self) -> pl.Expr:
        return pl.lit(self.value)


_FUNCS: dict[str, Callable[[pl.Expr], pl.Expr]] = {
    "log": lambda e: e.log(),
    "log10": lambda e: e.log10(),
    "sqrt": lambda e: e.sqrt(),
    "exp": lambda e: e.exp(),
}


@dataclass(frozen=True, slots=True, repr=False)
class Call(Expr):
    """Unary function applied to an expression (log, log10, sqrt, exp)."""

    func: str
    arg: Expr

    def __post_init__(self) -> None:
        if self.func not in _FUNCS:
            raise ValueError(
                f"unsupported function {self.func!r}; expected one of {sorted(_FUNCS)}"
            )

    @property
    def label(self) -> str:
        return f"{self.func}({self.arg.label})"

    def columns(self) -> frozenset[str]:
        return self.arg.columns()

    def to_polars(self) -> pl.Expr:
        return _FUNCS[self.func](self.arg.to_polars().cast(pl.Float64))


_OPS: dict[str, Callable[[pl.Expr, pl.Expr], pl.Expr]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": lambda a, b: a / b,
}


@dataclass(frozen=True, slots=True, repr=False)
class BinOp(Expr):
    """Arithmetic between two expressions."""

    op: str
    left: Expr
    right: Expr

    def __post_init__(self) -> None:
        if self.op not in _OPS:
            raise ValueError(f"unsupported operator {self.op!r}")

    @property
    def label(self) -> str:
        return f"{_wrap(self.left)} {self.op} {_wrap(self.right)}"

    def columns(self) -> frozenset[str]:
        return self.left.columns() | self.right.columns()

    def to_polars(self) -> pl.Expr:
        return _OPS[self.op](self.left.to_polars(), self.right.to_polars())


def _wrap(e: Expr) -> str:
    return f"({e.label})" if isinstance(e, BinOp) else e.label


def as_expr(value: object, *, strings: str = "column") -> Expr:
    """
    Coerce a mapping value into an Expr.

    Args:
        value (object): Expr, column name (str), number or bool.
        strings (str): How to read bare strings: "column" (mapping values) or
            "literal" (operands of arithmetic).

    Returns:
        Expr: The coerced expression.

    Raises:
        TypeError: For values that cannot be represented.
    """
    if isinstance(value, Expr):
        return value
    if isinstance(value, str):
        return Column(value) if strings == "column" else Literal(value)
    if isinstance(value, (bool, int, float)):
        return Literal(value)
    raise TypeError(f"cannot use {type(value).__name__} as a mapping expression: {value!r}")


def col(name: str) -> Column:
    return Column(name)


def lit(value: Any) -> Literal:
    return Literal(value)


def log(value: Expr | str) -> Call:
    """Natural logarithm of a column or expression."""
    return Call("log", as_expr(value))


def log10(value: Expr | str) -> Call:
    return Call("log10", as_expr(value))


def sqrt(value: Expr | str) -> Call:
    return Call("sqrt", as_expr(value))


def exp(value: Expr | str) -> Call:
    return Call("exp", as_expr(value))
