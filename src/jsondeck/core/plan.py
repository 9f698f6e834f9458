"""
plan.py — Emission plan handed to the encoder.

Every primitive carries its own absolute Box (inches) and fully resolved
style: the encoder performs no layout math and never looks back at the
source document. Primitives are frozen dataclasses so a compiled DeckPlan can
be dumped as JSON (orjson serialises dataclasses natively) for inspection.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from jsondeck.core.layout import Box


class ItemStatus(str, Enum):
    OK = "ok"
    RECOVERED = "recovered"
    FAILED = "failed"


class PageStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"


class PageStage(str, Enum):
    START = "start"
    BACKGROUND_RESOLVED = "background-resolved"
    TITLE_EMITTED = "title-emitted"
    SUBTITLE_EMITTED = "subtitle-emitted"
    CONTENT_LOOP = "content-loop"
    DONE = "done"


@dataclass(frozen=True)
class TextRun:
    """A text box. Paragraphs are separated by '\\n' in `text`."""

    text: str
    box: Box
    font_size: float = 16
    color: str = "333333"
    bold: bool = False
    italic: bool = False
    align: str = "left"
    valign: str = "middle"
    font_face: str | None = None
    para_space_pt: float | None = None
    op: str = "text"


@dataclass(frozen=True)
class ShapeCmd:
    shape: str
    box: Box
    fill: str | None = None
    line_color: str | None = None
    line_width_pt: float | None = None
    rotation: float = 0.0
    op: str = "shape"


@dataclass(frozen=True)
class ImageCmd:
    """Picture fitted into `box`; `fallback` is drawn instead when the source cannot be loaded."""

    source: str
    box: Box
    fit: str = "contain"
    fallback: tuple["Emission", ...] = ()
    op: str = "image"


@dataclass(frozen=True)
class TableCmd:
    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    box: Box
    col_widths: tuple[float, ...]
    header_fill: str = "F1F1F1"
    border: bool = False
    font_size: float = 12
    op: str = "table"


@dataclass(frozen=True)
class ChartCmd:
    chart_type: str
    labels: tuple[str, ...]
    values: tuple[float, ...]
    box: Box
    series_name: str = "Chart"
    colors: tuple[str, ...] = ()
    op: str = "chart"


Emission = Union[TextRun, ShapeCmd, ImageCmd, TableCmd, ChartCmd]


@dataclass(frozen=True)
class Background:
    color: str
    image: str | None = None


@dataclass(frozen=True)
class SlidePlan:
    index: int
    background: Background
    emissions: tuple[Emission, ...] = ()
    title: str | None = None
    status: PageStatus = PageStatus.OK
    stage: PageStage = PageStage.DONE
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class DeckPlan:
    title: str
    author: str
    slides: tuple[SlidePlan, ...]
    company: str | None = None
    error: str | None = None

    @property
    def is_error_deck(self) -> bool:
        return self.error is not None


@dataclass
class ItemOutcome:
    """Result of compiling one content item."""

    status: ItemStatus
    emissions: list[Emission] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class PageOutcome:
    status: PageStatus
    slide: SlidePlan
    items: list[ItemOutcome] = field(default_factory=list)
    error: str | None = None
