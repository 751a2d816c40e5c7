"""
Non-data appearance of a chart: an immutable set of theme element overrides.

Responsibilities
- Define the fixed, lower_snake theme element vocabulary (THEME_ELEMENTS).
- Provide the Theme value (validated, color-normalized, read-only) and key-level
  merging where later keys win.
- Provide complete presets (gray, minimal, classic, economist_white) and a
  registry (get_theme, list_themes).

Notes
- A preset carries every element, so adding a preset after another replaces all of
  its look; `theme(**elements)` builds a partial override.
- Color elements accept None for "not drawn".

Examples
--------
>>> from plotgrammar.core.themes import theme, theme_minimal
>>> merged = theme_minimal().merge(theme(title_weight="bold"))
>>> merged["title_weight"], merged["grid_color"]
('bold', '#ebebeb')
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

from .colors import normalize_color
from .errors import UnknownThemeElementError
from .grammar import assert_lower_snake

__all__ = [
    "THEME_ELEMENTS",
    "Theme",
    "theme",
    "theme_gray",
    "theme_grey",
    "theme_minimal",
    "theme_classic",
    "theme_economist_white",
    "get_theme",
    "list_themes",
]

_COLOR = "color"
_NUMBER = "number"
_BOOL = "bool"
_TEXT = "text"

# element name -> (kind, allowed values or None)
THEME_ELEMENTS: Final[Mapping[str, tuple[str, frozenset[str] | None]]] = MappingProxyType(
    {
        "background": (_COLOR, None),
        "panel_background": (_COLOR, None),
        "panel_border": (_COLOR, None),
        "grid": (_BOOL, None),
        "grid_color": (_COLOR, None),
        "axis_line": (_BOOL, None),
        "axis_color": (_COLOR, None),
        "text_color": (_COLOR, None),
        "font": (_TEXT, None),
        "font_size": (_NUMBER, None),
        "title_size": (_NUMBER, None),
        "title_weight": (_TEXT, frozenset({"normal", "bold"})),
        "title_anchor": (_TEXT, frozenset({"start", "middle", "end"})),
        "axis_title_size": (_NUMBER, None),
        "axis_title_weight": (_TEXT, frozenset({"normal", "bold"})),
        "axis_label_size": (_NUMBER, None),
        "legend_position": (_TEXT, frozenset({"right", "left", "top", "bottom", "none"})),
        "legend_title_size": (_NUMBER, None),
        "legend_label_size": (_NUMBER, None),
        "padding": (_NUMBER, None),
    }
)


def _check_element(key: str, value: Any) -> Any:
    if key not in THEME_ELEMENTS:
        raise UnknownThemeElementError(
            f"unknown theme element {key!r}; available elements: {sorted(THEME_ELEMENTS)}"
        )
    kind, allowed = THEME_ELEMENTS[key]
    if kind == _COLOR:
        if value is not None and not isinstance(value, str):
            raise ValueError(f"theme element {key!r} expects a color string or None")
        return normalize_color(value)
    if kind == _BOOL:
        if not isinstance(value, bool):
            raise ValueError(f"theme element {key!r} expects a bool (got {value!r})")
        return value
    if kind == _NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ValueError(f"theme element {key!r} expects a non-negative number (got {value!r})")
        return value
    if not isinstance(value, str):
        raise ValueError(f"theme element {key!r} expects a string (got {value!r})")
    text = value.strip().lower() if allowed is not None else value
    if allowed is not None and text not in allowed:
        raise ValueError(f"theme element {key!r} must be one of {sorted(allowed)} (got {value!r})")
    return text


@dataclass(frozen=True, slots=True)
class Theme:
    """
    Immutable theme element overrides.

    Attributes:
        elements (Mapping[str, Any]): Element -> value, validated against THEME_ELEMENTS.
        name (str | None): Preset name for complete presets, None for partial overrides.

    Raises:
        UnknownThemeElementError: If a key is outside the theme vocabulary.
        ValueError: If a value does not fit its element.
    """

    elements: Mapping[str, Any] = field(default_factory=dict)
    name: str | None = None

    def __post_init__(self) -> None:
        checked = {str(k): _check_element(str(k), v) for k, v in dict(self.elements).items()}
        object.__setattr__(self, "elements", MappingProxyType(checked))

    def __getitem__(self, key: str) -> Any:
        return self.elements[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def get(self, key: str, default: Any = None) -> Any:
        return self.elements.get(key, default)

    @property
    def is_complete(self) -> bool:
        return set(self.elements) == set(THEME_ELEMENTS)

    def merge(self, other: Theme | Mapping[str, Any]) -> Theme:
        """Return a new Theme where `other`'s keys replace same-named keys."""
        if not isinstance(other, Theme):
            other = Theme(dict(other))
        merged = {**self.elements, **other.elements}
        return Theme(merged, name=other.name or self.name)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.elements)


def theme(**elements: Any) -> Theme:
    """
    Build a partial theme override.

    Examples:
        >>> theme(legend_position="none").to_dict()
        {'legend_position': 'none'}
    """
    return Theme(elements)


_GRAY: Final[dict[str, Any]] = {
    "background": "white",
    "panel_background": "#ebebeb",
    "panel_border": None,
    "grid": True,
    "grid_color": "white",
    "axis_line": False,
    "axis_color": "grey20",
    "text_color": "grey10",
    "font": "sans-serif",
    "font_size": 11,
    "title_size": 13,
    "title_weight": "normal",
    "title_anchor": "start",
    "axis_title_size": 11,
    "axis_title_weight": "normal",
    "axis_label_size": 9,
    "legend_position": "right",
    "legend_title_size": 11,
    "legend_label_size": 9,
    "padding": 5.5,
}

_PRESETS: Final[dict[str, Theme]] = {
    "gray": Theme(_GRAY, name="gray"),
    "minimal": Theme(
        {
            **_GRAY,
            "panel_background": "white",
            "grid_color": "#ebebeb",
            "axis_color": "grey30",
        },
        name="minimal",
    ),
    "classic": Theme(
        {
            **_GRAY,
            "panel_background": "white",
            "grid": False,
            "axis_line": True,
            "axis_color": "black",
        },
        name="classic",
    ),
    "economist_white": Theme(
        {
            **_GRAY,
            "background": "#ebebeb",
            "panel_background": "white",
            "grid_color": "#d5e4eb",
            "axis_line": True,
            "axis_color": "black",
            "text_color": "black",
            "title_size": 16,
            "title_weight": "bold",
            "legend_position": "top",
            "padding": 10,
        },
        name="economist_white",
    ),
}

_ALIASES: Final[dict[str, str]] = {"grey": "gray", "economist": "economist_white"}


def theme_gray() -> Theme:
    """Default theme: grey panel, white grid lines."""
    return _PRESETS["gray"]


theme_grey = theme_gray


def theme_minimal() -> Theme:
    """No panel background, light grid lines."""
    return _PRESETS["minimal"]


def theme_classic() -> Theme:
    return _PRESETS["classic"]


def theme_economist_white() -> Theme:
    """Grey backdrop around a white panel, bold title and legend on top."""
    return _PRESETS["economist_white"]


_REGISTRY: Final[dict[str, Callable[[], Theme]]] = {
    "gray": theme_gray,
    "minimal": theme_minimal,
    "classic": theme_classic,
    "economist_white": theme_economist_white,
}

for _name in _REGISTRY:
    assert_lower_snake(_name, "theme name")
for _name in THEME_ELEMENTS:
    assert_lower_snake(_name, "theme element")


def get_theme(name: str) -> Theme:
    """
    Look up a complete preset theme by name.

    Args:
        name (str): "gray", "grey", "minimal", "classic", "economist_white" (the
            "theme_" prefix is accepted).

    Returns:
        Theme

    Raises:
        KeyError: If the preset is unknown.
    """
    key = (name or "").strip().lower()
    if key.startswith("theme_"):
        key = key[len("theme_") :]
    key = _ALIASES.get(key, key)
    try:
        return _REGISTRY[key]()
    except KeyError:
        raise KeyError(f"unknown theme {name!r}; available themes: {list_themes()}") from None


def list_themes() -> list[str]:
    """Return registered preset names in registry order."""
    return list(_REGISTRY)
