"""
content.py — Content item -> emission primitives.

One compiler per ContentKind. Each returns an ItemOutcome:
  - OK:        payload compiled as written.
  - RECOVERED: payload was missing/malformed; a placeholder was drawn or the
               item was skipped, and a warning recorded.
  - FAILED:    the compiler raised; `compile_item` replaced the output with a
               red error box covering the item's geometry.

Compilers never see the page or the document: everything they need (box,
theme colors, merged style) is passed in.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from jsondeck.core.layout import Box
from jsondeck.core.model import ContentKind
from jsondeck.core.plan import ChartCmd, ImageCmd, ItemOutcome, ItemStatus, ShapeCmd, TableCmd, TextRun
from jsondeck.core.resolve import ComponentMiss, ResolvedItem
from jsondeck.core.theme import ThemeColors
from jsondeck.core.compile.text import (
    alignment_from_style,
    cell_text,
    coerce_float,
    coerce_font_size,
    is_bold,
    normalize_paragraphs,
    strip_hash,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_GRAY = "999999"
ERROR_RED = "FF0000"
PANEL_FILL = "F5F5F5"
PANEL_LINE = "DDDDDD"

LONG_TEXT_THRESHOLD = 500

LIST_ROW_HEIGHT = 0.4
LIST_ITEM_HEIGHT = 0.35
LIST_INDENT = 0.2

CAPTION_HEIGHT = 0.4
AUTHOR_LINE_HEIGHT = 0.4
COMPARISON_TITLE_HEIGHT = 0.5

BULLET_GLYPH = "•"
CHECK_GLYPH = "✓"

CHART_TYPES: dict[str, str] = {
    "bar": "bar",
    "line": "line",
    "pie": "pie",
    "doughnut": "doughnut",
    "radar": "radar",
    "scatter": "scatter",
    "bubble": "bubble",
}
DEFAULT_CHART_TYPE = "bar"

SHAPES: dict[str, str] = {
    "rectangle": "rectangle",
    "circle": "ellipse",
    "triangle": "triangle",
    "arrow": "right_arrow",
    "star": "star5",
    "cloud": "cloud",
}
DEFAULT_SHAPE = "rectangle"


class _Context:
    """Per-item scratch: theme colors, page title, collected warnings."""

    def __init__(self, colors: ThemeColors, page_title: str | None, label: str) -> None:
        self.colors = colors
        self.page_title = page_title
        self.label = label
        self.warnings: list[str] = []

    def warn(self, message: str) -> None:
        logger.warning("%s: %s", self.label, message)
        self.warnings.append(message)

    def outcome(self, emissions: list[Any]) -> ItemOutcome:
        status = ItemStatus.RECOVERED if self.warnings else ItemStatus.OK
        return ItemOutcome(status=status, emissions=emissions, warnings=list(self.warnings))


def _centered_note(text: str, box: Box, color: str) -> TextRun:
    return TextRun(text=text, box=box, font_size=14, color=color, align="center", valign="middle")


def _panel(box: Box, fill: str = PANEL_FILL, line: str = PANEL_LINE, width_pt: float = 1.0) -> ShapeCmd:
    return ShapeCmd(shape="rectangle", box=box, fill=fill, line_color=line, line_width_pt=width_pt)


def _error_box(text: str, box: Box) -> TextRun:
    return TextRun(text=text, box=box, font_size=14, color=ERROR_RED, bold=True, align="left", valign="top")


def _text_payload(content: dict[str, Any], key: str) -> str | None:
    v = content.get(key)
    if v is None:
        return None
    s = v if isinstance(v, str) else str(v)
    return s if s.strip() else None


def _compile_text(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    text = _text_payload(item.content, "text")
    if text is None:
        ctx.warn("text item has no text; skipped")
        return ctx.outcome([])

    long_text = len(text) > LONG_TEXT_THRESHOLD
    run = TextRun(
        text="\n".join(normalize_paragraphs(text)),
        box=box,
        font_size=coerce_font_size(item.style.get("fontSize"), 16),
        color=ctx.colors.text,
        bold=is_bold(item.style),
        align=alignment_from_style(item.style),
        valign="top" if long_text else "middle",
        para_space_pt=8 if long_text else 5,
    )
    return ctx.outcome([run])


def image_placeholder(box: Box) -> tuple[ShapeCmd, TextRun]:
    return (
        ShapeCmd(shape="rectangle", box=box, fill="F0F0F0", line_color="CCCCCC", line_width_pt=1.0),
        _centered_note("Image not available", box, PLACEHOLDER_GRAY),
    )


def _compile_image(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    source = _text_payload(item.content, "imageUrl") or _text_payload(item.content, "source")
    fallback = image_placeholder(box)

    emissions: list[Any] = []
    if source is None:
        ctx.warn("image item has no imageUrl; drawing placeholder")
        emissions.extend(fallback)
    else:
        emissions.append(ImageCmd(source=source.strip(), box=box, fit="contain", fallback=fallback))

    caption = _text_payload(item.content, "imageCaption") or _text_payload(item.content, "caption")
    if caption is not None:
        emissions.append(
            TextRun(
                text=caption,
                box=Box(box.x, box.bottom, box.w, CAPTION_HEIGHT),
                font_size=12,
                color=ctx.colors.text,
                italic=True,
                align="center",
            )
        )
    return ctx.outcome(emissions)


def _table_source(content: dict[str, Any]) -> tuple[Any, Any]:
    if "headers" in content or "rows" in content:
        return content.get("headers"), content.get("rows", [])
    data = content.get("tableData")
    if isinstance(data, (list, tuple)) and data:
        return data[0], list(data[1:])
    return None, []


def _compile_table(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    headers, rows = _table_source(item.content)
    if not isinstance(headers, (list, tuple)) or not headers:
        ctx.warn("table has no header row")
        return ctx.outcome([_error_box("Error creating table: table has no header row", box)])

    header = tuple(cell_text(h) for h in headers)
    ncols = len(header)

    if not isinstance(rows, (list, tuple)):
        ctx.warn(f"table rows is not an array ({type(rows).__name__}); no data rows rendered")
        rows = []

    body: list[tuple[str, ...]] = []
    for i, row in enumerate(rows):
        if not isinstance(row, (list, tuple)):
            ctx.warn(f"skipping non-array table row #{i}")
            continue
        cells = [cell_text(c) for c in row[:ncols]]
        cells.extend([""] * (ncols - len(cells)))
        body.append(tuple(cells))

    col_w = box.w / ncols
    table = TableCmd(
        header=header,
        rows=tuple(body),
        box=box,
        col_widths=tuple(col_w for _ in range(ncols)),
        header_fill=strip_hash(item.content.get("header_color"), "F1F1F1"),
        border=bool(item.content.get("border")),
        font_size=coerce_font_size(item.style.get("fontSize"), 12),
    )
    return ctx.outcome([table])


def _compile_chart(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    content = item.content
    data = content.get("chartData")
    if data is None:
        data = content.get("data")
    if not isinstance(data, dict):
        ctx.warn("chart data is missing")
        return ctx.outcome([_error_box("Error creating chart: Chart data is missing", box)])

    labels = data.get("labels")
    values = data.get("values")
    if not isinstance(labels, (list, tuple)):
        ctx.warn("chart labels is not an array")
        return ctx.outcome([_error_box("Error creating chart: Chart labels must be an array", box)])
    if not isinstance(values, (list, tuple)):
        ctx.warn("chart values is not an array")
        return ctx.outcome([_error_box("Error creating chart: Chart values must be an array", box)])

    if len(labels) != len(values):
        ctx.warn(f"chart labels ({len(labels)}) and values ({len(values)}) differ in length; truncating")
    n = min(len(labels), len(values))
    if n == 0:
        ctx.warn("chart has no data points")
        return ctx.outcome([_error_box("Error creating chart: Chart has no data points", box)])

    nums: list[float] = []
    for v in values[:n]:
        f = coerce_float(v)
        if f is None:
            ctx.warn(f"non-numeric chart value {v!r} replaced with 0")
            f = 0.0
        nums.append(f)

    raw_kind = data.get("type") or content.get("chart_type") or content.get("chartType")
    kind = DEFAULT_CHART_TYPE
    if isinstance(raw_kind, str) and raw_kind.strip():
        mapped = CHART_TYPES.get(raw_kind.strip().lower())
        if mapped is None:
            ctx.warn(f"unknown chart type {raw_kind!r}; using {DEFAULT_CHART_TYPE}")
        else:
            kind = mapped

    raw_colors = content.get("colors")
    if isinstance(raw_colors, (list, tuple)) and raw_colors:
        colors = tuple(strip_hash(c, ctx.colors.accent) for c in raw_colors)
    else:
        colors = (ctx.colors.accent,)

    chart = ChartCmd(
        chart_type=kind,
        labels=tuple(cell_text(lb) for lb in labels[:n]),
        values=tuple(nums),
        box=box,
        series_name=ctx.page_title or "Chart",
        colors=colors,
    )
    return ctx.outcome([chart])


def list_prefix(list_type: Any, index: int) -> str:
    if list_type == "numbered":
        return f"{index + 1}. "
    if list_type == "check":
        return f"{CHECK_GLYPH} "
    return f"{BULLET_GLYPH} "


def _compile_list(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    entries = item.content.get("listItems")
    if not isinstance(entries, (list, tuple)):
        ctx.warn("list item has no listItems array; skipped")
        return ctx.outcome([])

    list_type = item.content.get("listType")
    font_size = coerce_font_size(item.style.get("fontSize"), 16)
    align = alignment_from_style(item.style)
    runs: list[Any] = []
    for idx, entry in enumerate(entries):
        runs.append(
            TextRun(
                text=list_prefix(list_type, idx) + cell_text(entry),
                box=Box(
                    box.x + LIST_INDENT,
                    box.y + idx * LIST_ROW_HEIGHT,
                    box.w - 2 * LIST_INDENT,
                    LIST_ITEM_HEIGHT,
                ),
                font_size=font_size,
                color=ctx.colors.text,
                align=align,
            )
        )
    return ctx.outcome(runs)


def _compile_quote(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    quote = _text_payload(item.content, "quoteText")
    if quote is None:
        ctx.warn("quote item has no quoteText; skipped")
        return ctx.outcome([])

    author = _text_payload(item.content, "quoteAuthor")
    pad = 0.08
    author_h = AUTHOR_LINE_HEIGHT if author is not None else 0.0
    emissions: list[Any] = [_panel(box)]
    emissions.append(
        TextRun(
            text='"' + "\n".join(normalize_paragraphs(quote)) + '"',
            box=Box(box.x + pad, box.y + pad, box.w - 2 * pad, box.h - 2 * pad - author_h),
            font_size=coerce_font_size(item.style.get("fontSize"), 20),
            color="333333",
            italic=True,
            align="center",
            valign="middle",
        )
    )
    if author is not None:
        emissions.append(
            TextRun(
                text=f"- {author}",
                box=Box(box.x + pad, box.bottom - pad - AUTHOR_LINE_HEIGHT, box.w - 2 * pad, AUTHOR_LINE_HEIGHT),
                font_size=coerce_font_size(item.style.get("fontSize"), 16),
                color="666666",
                align="right",
                valign="bottom",
            )
        )
    return ctx.outcome(emissions)


def _compile_code(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    code = item.content.get("code")
    if not isinstance(code, str) or not code.strip():
        ctx.warn("code item has no code; skipped")
        return ctx.outcome([])
    return ctx.outcome(
        [
            _panel(box, fill="F8F8F8", line="E0E0E0"),
            TextRun(
                text=code,
                box=box.inset(0.05),
                font_size=coerce_font_size(item.style.get("fontSize"), 14),
                color="333333",
                align="left",
                valign="top",
                font_face="Courier New",
            ),
        ]
    )


def _compile_video(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    url = _text_payload(item.content, "videoUrl")
    if url is None:
        ctx.warn("video item has no videoUrl; skipped")
        return ctx.outcome([])

    video_type = _text_payload(item.content, "videoType") or "video"
    glyph = max(0.2, min(0.6, min(box.w, box.h) / 3))
    cx = box.x + box.w / 2
    cy = box.y + box.h / 2
    return ctx.outcome(
        [
            _panel(box, fill="000000", line=PANEL_LINE, width_pt=2.0),
            ShapeCmd(
                shape="triangle",
                box=Box(cx - glyph / 2, cy - glyph / 2, glyph, glyph),
                fill="FFFFFF",
                rotation=90.0,
            ),
            TextRun(
                text=f"[Video: {video_type} - {url}]",
                box=Box(box.x, box.bottom - CAPTION_HEIGHT, box.w, CAPTION_HEIGHT),
                font_size=coerce_font_size(item.style.get("fontSize"), 14),
                color="FFFFFF",
                align="center",
            ),
        ]
    )


def _compile_shape(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    name = item.content.get("shape")
    shape = SHAPES.get(name.strip().lower()) if isinstance(name, str) else None
    if shape is None:
        ctx.warn(f"unknown shape {name!r}; drawing {DEFAULT_SHAPE}")
        shape = DEFAULT_SHAPE
    return ctx.outcome(
        [ShapeCmd(shape=shape, box=box, fill=ctx.colors.accent, line_color="FFFFFF", line_width_pt=1.0)]
    )


def _compile_icon(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    icon = _text_payload(item.content, "icon")
    if icon is None:
        ctx.warn("icon item has no icon; skipped")
        return ctx.outcome([])
    return ctx.outcome(
        [
            _panel(box),
            TextRun(
                text=icon,
                box=box,
                font_size=coerce_font_size(item.style.get("fontSize"), 36),
                color=ctx.colors.accent,
                bold=True,
                align="center",
            ),
        ]
    )


def _numbered_block(
    item: ResolvedItem,
    box: Box,
    ctx: _Context,
    key: str,
    fields: tuple[str, str],
) -> ItemOutcome:
    entries = item.content.get(key)
    if not isinstance(entries, (list, tuple)):
        ctx.warn(f"{key} is not an array; skipped")
        return ctx.outcome([])

    lines: list[str] = []
    for i, entry in enumerate(entries, 1):
        if isinstance(entry, dict):
            a = cell_text(entry.get(fields[0]))
            b = cell_text(entry.get(fields[1]))
            lines.append(f"{i}. {a}: {b}")
        else:
            lines.append(f"{i}. {cell_text(entry)}")
    if not lines:
        return ctx.outcome([])
    return ctx.outcome(
        [
            TextRun(
                text="\n".join(lines),
                box=box,
                font_size=coerce_font_size(item.style.get("fontSize"), 16),
                color=ctx.colors.text,
                align="left",
                valign="top",
                para_space_pt=8,
            )
        ]
    )


def _compile_timeline(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    return _numbered_block(item, box, ctx, "timelineEvents", ("date", "event"))


def _compile_process(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    return _numbered_block(item, box, ctx, "processSteps", ("title", "description"))


def _comparison_column(entry: Any, col: Box, item: ResolvedItem, ctx: _Context) -> list[Any]:
    if isinstance(entry, dict):
        title = cell_text(entry.get("title"))
        features = entry.get("features")
    else:
        title = cell_text(entry)
        features = None
    if not isinstance(features, (list, tuple)):
        features = []
    return [
        TextRun(
            text=title,
            box=Box(col.x, col.y, col.w, COMPARISON_TITLE_HEIGHT),
            font_size=coerce_font_size(item.style.get("fontSize"), 18),
            color=ctx.colors.text,
            bold=True,
            align="center",
        ),
        TextRun(
            text="\n".join(f"{BULLET_GLYPH} {cell_text(f)}" for f in features),
            box=Box(col.x, col.y + COMPARISON_TITLE_HEIGHT, col.w, col.h - COMPARISON_TITLE_HEIGHT),
            font_size=coerce_font_size(item.style.get("fontSize"), 16),
            color=ctx.colors.text,
            align="left",
            valign="top",
        ),
    ]


def _compile_comparison(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    entries = item.content.get("comparisonItems")
    if not isinstance(entries, (list, tuple)) or len(entries) < 2:
        ctx.warn("comparison needs at least two comparisonItems; nothing drawn")
        return ctx.outcome([])

    left, right = box.halves()
    emissions = _comparison_column(entries[0], left, item, ctx)
    emissions.extend(_comparison_column(entries[1], right, item, ctx))
    return ctx.outcome(emissions)


def _compile_unknown(item: ResolvedItem, box: Box, ctx: _Context) -> ItemOutcome:
    raw = item.raw_type or item.kind.value
    ctx.warn(f"unknown content type {raw!r}")
    return ctx.outcome([_centered_note(f"[Unknown content type: {raw}]", box, PLACEHOLDER_GRAY)])


_Compiler = Callable[[ResolvedItem, Box, _Context], ItemOutcome]

_COMPILERS: dict[ContentKind, _Compiler] = {
    ContentKind.TEXT: _compile_text,
    ContentKind.IMAGE: _compile_image,
    ContentKind.TABLE: _compile_table,
    ContentKind.CHART: _compile_chart,
    ContentKind.LIST: _compile_list,
    ContentKind.QUOTE: _compile_quote,
    ContentKind.CODE: _compile_code,
    ContentKind.VIDEO: _compile_video,
    ContentKind.SHAPE: _compile_shape,
    ContentKind.ICON: _compile_icon,
    ContentKind.TIMELINE: _compile_timeline,
    ContentKind.PROCESS: _compile_process,
    ContentKind.COMPARISON: _compile_comparison,
    # A reference that survives resolution (component declaring type "component").
    ContentKind.COMPONENT: _compile_unknown,
    ContentKind.UNKNOWN: _compile_unknown,
}

_uncovered = set(ContentKind) - set(_COMPILERS)
if _uncovered:
    raise RuntimeError(f"no content compiler for: {sorted(k.value for k in _uncovered)}")


def missing_component_outcome(miss: ComponentMiss, box: Box) -> ItemOutcome:
    message = f"component not found: {miss.component_id!r}"
    logger.warning(message)
    return ItemOutcome(
        status=ItemStatus.RECOVERED,
        emissions=[_centered_note(f"[Component not found: {miss.component_id}]", box, PLACEHOLDER_GRAY)],
        warnings=[message],
    )


def compile_item(
    item: ResolvedItem | ComponentMiss,
    box: Box,
    colors: ThemeColors,
    *,
    page_title: str | None = None,
) -> ItemOutcome:
    """Compile one resolved item into emission primitives. Never raises."""
    if isinstance(item, ComponentMiss):
        return missing_component_outcome(item, box)

    label = item.raw_type or item.kind.value
    ctx = _Context(colors, page_title, label)
    try:
        return _COMPILERS[item.kind](item, box, ctx)
    except Exception as e:
        logger.warning("error rendering %s item: %s", label, e)
        return ItemOutcome(
            status=ItemStatus.FAILED,
            emissions=[_centered_note(f"[Error rendering {label}]", box, ERROR_RED)],
            warnings=ctx.warnings + [f"error rendering {label}: {e}"],
        )
