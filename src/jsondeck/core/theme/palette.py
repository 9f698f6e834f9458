from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class ThemeColors:
    """Per-page colors as 'RRGGBB' strings (no leading '#')."""

    background: str
    text: str
    accent: str


DEFAULT_THEME = "light"

THEMES: Mapping[str, ThemeColors] = MappingProxyType(
    {
        "light": ThemeColors(background="FFFFFF", text="333333", accent="3F97F6"),
        "dark": ThemeColors(background="2D2D2D", text="F5F5F5", accent="3F97F6"),
        "corporate": ThemeColors(background="F5F7FA", text="2C3E50", accent="3498DB"),
        "academic": ThemeColors(background="FFF9F0", text="34495E", accent="E67E22"),
        "creative": ThemeColors(background="F0F6FF", text="2E4053", accent="9B59B6"),
    }
)


def resolve_theme(name: Any) -> ThemeColors:
    """Return the palette for `name`; unknown or missing names get the light theme."""
    if isinstance(name, str):
        colors = THEMES.get(name)
        if colors is not None:
            return colors
    return THEMES[DEFAULT_THEME]
