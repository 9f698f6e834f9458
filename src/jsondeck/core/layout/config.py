from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Fixed 4:3 canvas, inches.
SLIDE_WIDTH_IN = 10.0
SLIDE_HEIGHT_IN = 7.5

# Vertical start of the content area depending on the page header.
START_Y_WITH_SUBTITLE = 2.2
START_Y_WITH_TITLE = 1.6
START_Y_BARE = 0.5

DEFAULT_SPACING = 0.3

# Spacing between tracks/columns per layout mode.
LAYOUT_SPACING: dict[str, float] = {
    "grid": 0.2,
    "component-grid": 0.3,
    "two-column": 0.5,
}

DEFAULT_GRID_COLUMNS = 12
MIN_GRID_ROWS = 4


@dataclass(frozen=True)
class LayoutConfig:
    """Content area of one page in inches."""

    start_y: float
    content_width: float = 9.0
    content_height: float = 5.0
    left_margin: float = 0.5
    right_margin: float = 0.5
    bottom_margin: float = 0.5
    spacing: float = DEFAULT_SPACING
    slide_width: float = SLIDE_WIDTH_IN
    slide_height: float = SLIDE_HEIGHT_IN


def start_y_for(title: Any, subtitle: Any) -> float:
    if subtitle:
        return START_Y_WITH_SUBTITLE
    if title:
        return START_Y_WITH_TITLE
    return START_Y_BARE


def layout_config_for(page: Any) -> LayoutConfig:
    """Build the LayoutConfig for a page (anything with title/subtitle/layout)."""
    layout = getattr(page, "layout", None)
    return LayoutConfig(
        start_y=start_y_for(getattr(page, "title", None), getattr(page, "subtitle", None)),
        spacing=LAYOUT_SPACING.get(layout, DEFAULT_SPACING) if isinstance(layout, str) else DEFAULT_SPACING,
    )
