"""
Color value normalization for scales, themes and fixed aesthetics.

Accepts CSS color names (case- and space-insensitive, so "light blue" becomes
"lightblue"), hex codes (#RGB / #RRGGBB / #RRGGBBAA), `rgb(r,g,b)` strings and
the numbered greys "grey0".."grey100" / "gray0".."gray100", which are converted
to hex. Anything else is returned lowered and stripped; the rendering engine is
the final judge of validity.
"""

from __future__ import annotations

import re
from typing import Any

__all__ = ["normalize_color", "is_hex_color"]

_HEX_RE = re.compile(r"^#(?:[0-9a-f]{3}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)
_GREY_RE = re.compile(r"^gr[ae]y(\d{1,3})$")


def is_hex_color(value: str) -> bool:
    return bool(_HEX_RE.match(value or ""))


def normalize_color(value: Any) -> Any:
    """
    Normalize a color value; non-strings are returned unchanged.

    Examples:
        >>> normalize_color("Light Blue")
        'lightblue'
        >>> normalize_color("grey50")
        '#7f7f7f'
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if is_hex_color(text):
        return text.lower()
    lowered = text.lower()
    if lowered.startswith("rgb(") and lowered.endswith(")"):
        return lowered.replace(" ", "")
    compact = re.sub(r"\s+", "", lowered)
    m = _GREY_RE.match(compact)
    if m:
        pct = min(int(m.group(1)), 100)
        level = int(pct * 255 / 100)
        return f"#{level:02x}{level:02x}{level:02x}"
    return compact
