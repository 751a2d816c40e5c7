"""
Core exception types raised while building and validating plot specifications.

Provides typed exceptions for specification-level failures:
- InvalidMappingError when an aesthetic mapping references a column that is not
  present in the dataset in scope (build time or render time).
- MissingRequiredAestheticError when a geom's required channel is unset after the
  default and local mappings are merged.
- UnknownChannelError when a mapping, scale, fixed aesthetic or label targets a
  channel outside the grammar.
- UnknownGeomError / UnknownThemeElementError for names outside their registries.
- InvalidScaleError / InvalidLimitsError for malformed scale policies and limits.
- ConfigError for invalid runtime settings.

Notes:
    - All errors are programmer/usage errors. They are raised synchronously by the
      operation that detects them and are never retried.
    - Every class also derives from ValueError so callers may catch either.

Examples:
    >>> from plotgrammar.core.errors import UnknownChannelError
    >>> try:
    ...     raise UnknownChannelError("colr")
    ... except ValueError as e:
    ...     msg = str(e)
    >>> "colr" in msg
    True
"""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "PlotGrammarError",
    "InvalidMappingError",
    "MissingRequiredAestheticError",
    "UnknownChannelError",
    "UnknownGeomError",
    "UnknownThemeElementError",
    "InvalidScaleError",
    "InvalidLimitsError",
    "ConfigError",
]


class PlotGrammarError(ValueError):
    """Base class for plot specification failures."""


class InvalidMappingError(PlotGrammarError):
    """An aesthetic mapping references columns absent from the dataset in scope."""

    def __init__(self, missing: Iterable[str], available: Iterable[str], *, where: str = "mapping"):
        self.missing = sorted(set(missing))
        self.available = list(available)
        super().__init__(
            f"{where} references unknown column(s) {self.missing!r}; "
            f"available columns: {self.available!r}"
        )


class MissingRequiredAestheticError(PlotGrammarError):
    """A geom kind's required channel is unset after the mapping merge."""

    def __init__(self, geom: str, missing: Iterable[str]):
        self.geom = geom
        self.missing = list(missing)
        super().__init__(
            f"geom_{geom} requires the following missing aesthetics: {', '.join(self.missing)}"
        )


class UnknownChannelError(PlotGrammarError):
    """A mapping, scale or override targets an unrecognized aesthetic channel."""

    def __init__(self, channel: object, allowed: Iterable[str] = ()):
        self.channel = channel
        allowed_list = sorted(allowed)
        suffix = f"; expected one of {allowed_list}" if allowed_list else ""
        super().__init__(f"unknown aesthetic channel {channel!r}{suffix}")


class UnknownGeomError(PlotGrammarError):
    """A layer names a geom kind that is not registered."""


class UnknownThemeElementError(PlotGrammarError):
    """A theme override names an element outside the theme vocabulary."""


class InvalidScaleError(PlotGrammarError):
    """A scale policy is internally inconsistent (e.g. breaks without labels)."""


class InvalidLimitsError(PlotGrammarError):
    """Coordinate limits are not a pair of distinct finite numbers."""


class ConfigError(PlotGrammarError):
    """Runtime settings are invalid or unsupported."""
