"""
geometry.py — Placement hints to absolute boxes.

All boxes are inches on the fixed canvas from `config.py`. Relative inputs
(grid spans, named slots, percentage strings) are converted here and nowhere
else; nothing downstream ever sees a percentage.

Layout rules:
  - grid:           gridArea spans over `columns` tracks x max(4, ceil(n/columns)) rows.
  - component-grid: named slots left / center / right.
  - two-column:     even ordinal -> left half, odd ordinal -> right half.
  - anything else:  the default box (or a legacy `content.box`, if given).
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from jsondeck.core.errors import GeometryError
from jsondeck.core.layout.config import (
    DEFAULT_GRID_COLUMNS,
    MIN_GRID_ROWS,
    LayoutConfig,
    layout_config_for,
)

_FR_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*fr\s*$", re.IGNORECASE)
_LENGTH_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(%|in)?\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    w: float
    h: float

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def inset(self, dx: float, dy: float | None = None) -> "Box":
        """Shrink by dx on left/right and dy on top/bottom."""
        if dy is None:
            dy = dx
        return Box(self.x + dx, self.y + dy, self.w - 2 * dx, self.h - 2 * dy)

    def halves(self) -> tuple["Box", "Box"]:
        half = self.w / 2.0
        return Box(self.x, self.y, half, self.h), Box(self.x + half, self.y, half, self.h)


@dataclass(frozen=True)
class GridArea:
    column_start: int
    column_end: int
    row_start: int
    row_end: int


def _coerce_track(v: Any, name: str) -> int:
    if isinstance(v, bool):
        raise GeometryError(f"gridArea.{name} must be a number, got {v!r}")
    if isinstance(v, (int, float)):
        if not math.isfinite(float(v)):
            raise GeometryError(f"gridArea.{name} must be finite, got {v!r}")
        return int(v)
    if isinstance(v, str):
        try:
            return int(float(v.strip()))
        except ValueError:
            pass
    raise GeometryError(f"gridArea.{name} must be a number, got {v!r}")


def parse_grid_area(raw: Any) -> GridArea | None:
    """Parse a gridArea mapping. Missing ends default to their start; reversed spans are swapped."""
    if not isinstance(raw, dict) or not raw:
        return None
    c0 = _coerce_track(raw.get("columnStart", 1), "columnStart")
    c1 = _coerce_track(raw.get("columnEnd", c0), "columnEnd")
    r0 = _coerce_track(raw.get("rowStart", 1), "rowStart")
    r1 = _coerce_track(raw.get("rowEnd", r0), "rowEnd")
    if c1 < c0:
        c0, c1 = c1, c0
    if r1 < r0:
        r0, r1 = r1, r0
    return GridArea(column_start=c0, column_end=c1, row_start=r0, row_end=r1)


def fr_weight(width: Any) -> float:
    """Weight of a column definition width: 'Nfr' -> N, 'auto' or unknown -> 1."""
    if isinstance(width, (int, float)) and not isinstance(width, bool) and width > 0:
        return float(width)
    if isinstance(width, str):
        m = _FR_RE.match(width)
        if m:
            w = float(m.group(1))
            if w > 0:
                return w
    return 1.0


def to_inches(value: Any, extent: float) -> float:
    """Convert '25%' (of extent), '2.5in', '2.5' or 2.5 to inches."""
    if isinstance(value, bool):
        raise GeometryError(f"invalid length: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        m = _LENGTH_RE.match(value)
        if m:
            num = float(m.group(1))
            if m.group(2) == "%":
                return num / 100.0 * extent
            return num
    raise GeometryError(f"invalid length: {value!r}")


def default_box(cfg: LayoutConfig) -> Box:
    return Box(cfg.left_margin, cfg.start_y, cfg.content_width, cfg.content_height)


def _column_tracks(cfg: LayoutConfig, columns: int, definitions: tuple[dict[str, Any], ...]) -> list[float]:
    col_gap = cfg.spacing / columns
    usable = cfg.content_width - col_gap * (columns - 1)
    if len(definitions) == columns:
        weights = [fr_weight(d.get("width")) for d in definitions]
    else:
        weights = [1.0] * columns
    total = sum(weights)
    return [usable * w / total for w in weights]


def grid_box(
    cfg: LayoutConfig,
    area: GridArea,
    *,
    columns: int = DEFAULT_GRID_COLUMNS,
    item_count: int = 1,
    column_definitions: tuple[dict[str, Any], ...] = (),
) -> Box:
    columns = max(1, int(columns))
    c0 = min(max(area.column_start, 1), columns)
    c1 = min(max(area.column_end, c0), columns)
    r0 = max(area.row_start, 1)
    r1 = max(area.row_end, r0)

    col_gap = cfg.spacing / columns
    tracks = _column_tracks(cfg, columns, column_definitions)
    x = cfg.left_margin + sum(tracks[: c0 - 1]) + (c0 - 1) * col_gap
    w = sum(tracks[c0 - 1 : c1]) + (c1 - c0) * col_gap

    rows = max(MIN_GRID_ROWS, math.ceil(item_count / columns))
    row_gap = cfg.spacing / 4
    row_h = (cfg.content_height - row_gap * (rows - 1)) / rows
    y = cfg.start_y + (r0 - 1) * (row_h + row_gap)
    h = (r1 - r0 + 1) * row_h + (r1 - r0) * row_gap
    return Box(x, y, w, h)


def component_grid_box(cfg: LayoutConfig, position: str | None) -> Box | None:
    half = (cfg.content_width - cfg.spacing) / 2
    if position == "left":
        return Box(cfg.left_margin, cfg.start_y, half, cfg.content_height)
    if position == "center":
        return Box((cfg.slide_width - cfg.content_width) / 2, cfg.start_y, cfg.content_width, cfg.content_height)
    if position == "right":
        return Box(cfg.slide_width - cfg.right_margin - half, cfg.start_y, half, cfg.content_height)
    return None


def two_column_box(cfg: LayoutConfig, index: int) -> Box:
    half = (cfg.content_width - cfg.spacing) / 2
    if index % 2 == 0:
        return Box(cfg.left_margin, cfg.start_y, half, cfg.content_height)
    return Box(cfg.left_margin + half + cfg.spacing, cfg.start_y, half, cfg.content_height)


def legacy_box(cfg: LayoutConfig, raw: Any) -> Box | None:
    """Absolute placement `{x, y, width, height}` in percent or inches."""
    if not isinstance(raw, dict):
        return None
    if not all(k in raw for k in ("x", "y", "width", "height")):
        return None
    return Box(
        to_inches(raw["x"], cfg.slide_width),
        to_inches(raw["y"], cfg.slide_height),
        to_inches(raw["width"], cfg.slide_width),
        to_inches(raw["height"], cfg.slide_height),
    )


def resolve_box(page: Any, index: int, item: Any, *, position: str | None = None) -> Box:
    """Absolute box for the content item at raw ordinal `index` of `page`.

    `position` overrides the item's own named position (used for component
    references whose merged style carries the slot).
    """
    cfg = layout_config_for(page)
    layout = page.layout

    if layout == "grid":
        area = parse_grid_area(item.grid_area)
        if area is not None:
            gc = page.grid_config
            return grid_box(
                cfg,
                area,
                columns=gc.columns if gc is not None else DEFAULT_GRID_COLUMNS,
                item_count=max(page.slot_count, len(page.content)),
                column_definitions=gc.column_definitions if gc is not None else (),
            )
    elif layout == "component-grid":
        box = component_grid_box(cfg, position or item.position)
        if box is not None:
            return box
    elif layout == "two-column":
        return two_column_box(cfg, index)

    box = legacy_box(cfg, item.legacy_box)
    if box is not None:
        return box
    return default_box(cfg)
