from __future__ import annotations

from .palette import DEFAULT_THEME, THEMES, ThemeColors, resolve_theme

__all__ = [
    "DEFAULT_THEME",
    "THEMES",
    "ThemeColors",
    "resolve_theme",
]
