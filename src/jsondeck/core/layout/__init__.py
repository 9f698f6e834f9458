"""Geometry package: layout configuration and box resolution.

    from jsondeck.core.layout import Box, resolve_box
"""

from __future__ import annotations

from .config import SLIDE_HEIGHT_IN, SLIDE_WIDTH_IN, LayoutConfig, layout_config_for
from .geometry import (
    Box,
    GridArea,
    component_grid_box,
    default_box,
    grid_box,
    parse_grid_area,
    resolve_box,
    to_inches,
    two_column_box,
)

__all__ = [
    "SLIDE_HEIGHT_IN",
    "SLIDE_WIDTH_IN",
    "Box",
    "GridArea",
    "LayoutConfig",
    "component_grid_box",
    "default_box",
    "grid_box",
    "layout_config_for",
    "parse_grid_area",
    "resolve_box",
    "to_inches",
    "two_column_box",
]
