"""
document.py — Typed document model for a JSON slide deck.

The loader is tolerant: a document that has the
`presentation.pages` skeleton always loads. Per-item problems (unknown type,
missing payload, odd placement values) are kept as data and handled later by
the compilers, so one bad item never prevents the rest of the deck from
loading.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import orjson

from jsondeck.core.errors import DocumentError

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Presentation"


class ContentKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    TABLE = "table"
    CHART = "chart"
    LIST = "list"
    QUOTE = "quote"
    CODE = "code"
    VIDEO = "video"
    SHAPE = "shape"
    ICON = "icon"
    TIMELINE = "timeline"
    PROCESS = "process"
    COMPARISON = "comparison"
    COMPONENT = "component"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Any) -> "ContentKind":
        """Map a raw `type` string onto a kind; anything unrecognised is UNKNOWN."""
        if not isinstance(raw, str):
            return cls.UNKNOWN
        s = raw.strip().lower()
        for kind in cls:
            if kind.value == s and kind is not cls.UNKNOWN:
                return kind
        return cls.UNKNOWN


# The 13 drawable kinds a Component may declare.
COMPONENT_KINDS: frozenset[ContentKind] = frozenset(
    k for k in ContentKind if k not in (ContentKind.COMPONENT, ContentKind.UNKNOWN)
)

LAYOUT_MODES = ("grid", "component-grid", "two-column", "three-column", "full-width")
LEGACY_LAYOUT_MODES = (
    "title",
    "content",
    "section",
    "comparison",
    "timeline",
    "quote",
    "image-focus",
    "process",
)


@dataclass(frozen=True)
class Metadata:
    title: str
    author: str
    date: str | None = None
    theme: str = "light"
    language: str | None = None
    company: str | None = None
    department: str | None = None


@dataclass(frozen=True)
class Section:
    title: str
    description: str | None = None
    icon: str | None = None


@dataclass(frozen=True)
class Component:
    """A reusable content definition, referenced by id from page items."""

    id: str
    kind: ContentKind
    raw_type: str
    content: dict[str, Any] = field(default_factory=dict)
    style: dict[str, Any] = field(default_factory=dict)
    title: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class GridConfig:
    columns: int = 12
    gap: float | None = None
    column_definitions: tuple[dict[str, Any], ...] = ()


@dataclass(frozen=True)
class ContentItem:
    kind: ContentKind
    raw_type: str
    content: dict[str, Any] = field(default_factory=dict)
    style: dict[str, Any] = field(default_factory=dict)
    # Position in the page's raw content array, skipped entries included.
    ordinal: int = 0

    @property
    def component_id(self) -> str | None:
        cid = self.content.get("componentId")
        if cid is None:
            return None
        return str(cid)

    @property
    def position(self) -> str | None:
        pos = self.content.get("position")
        if isinstance(pos, str) and pos.strip():
            return pos.strip().lower()
        return None

    @property
    def grid_area(self) -> Any:
        """Raw gridArea hint; parsed (and validated) by the geometry resolver."""
        return self.content.get("gridArea")

    @property
    def legacy_box(self) -> Any:
        return self.content.get("box")


@dataclass(frozen=True)
class Page:
    title: str | None = None
    subtitle: str | None = None
    layout: str = "grid"
    section: str | None = None
    background_image: str | None = None
    grid_config: GridConfig | None = None
    animation: dict[str, Any] | None = None
    content: tuple[ContentItem, ...] = ()
    slot_count: int = 0


@dataclass(frozen=True)
class Document:
    metadata: Metadata
    pages: tuple[Page, ...]
    sections: tuple[Section, ...] = ()
    components: tuple[Component, ...] = ()


def _opt_str(v: Any) -> str | None:
    if v is None:
        return None
    s = str(v)
    return s if s.strip() else None


def _mapping(v: Any) -> dict[str, Any]:
    return dict(v) if isinstance(v, dict) else {}


def _load_metadata(raw: Any) -> Metadata:
    m = _mapping(raw)
    theme = m.get("theme")
    return Metadata(
        title=str(m.get("title") or ""),
        author=str(m.get("author") or ""),
        date=_opt_str(m.get("date")),
        theme=str(theme) if isinstance(theme, str) and theme else "light",
        language=_opt_str(m.get("language")),
        company=_opt_str(m.get("company")),
        department=_opt_str(m.get("department")),
    )


def _load_grid_config(raw: Any) -> GridConfig | None:
    if not isinstance(raw, dict):
        return None
    columns = 12
    cols = raw.get("columns")
    if isinstance(cols, (int, float)) and not isinstance(cols, bool) and int(cols) >= 1:
        columns = int(cols)
    elif cols is not None:
        logger.warning("gridConfig.columns=%r is not a positive number; using 12", cols)
    gap = raw.get("gap")
    if not isinstance(gap, (int, float)) or isinstance(gap, bool):
        gap = None
    defs = raw.get("columnDefinitions")
    column_definitions: tuple[dict[str, Any], ...] = ()
    if isinstance(defs, list):
        column_definitions = tuple(dict(d) for d in defs if isinstance(d, dict))
    return GridConfig(columns=columns, gap=gap, column_definitions=column_definitions)


def _load_item(raw: dict[str, Any], ordinal: int = 0) -> ContentItem:
    raw_type = raw.get("type")
    return ContentItem(
        kind=ContentKind.parse(raw_type),
        raw_type="" if raw_type is None else str(raw_type),
        content=_mapping(raw.get("content")),
        style=_mapping(raw.get("style")),
        ordinal=ordinal,
    )


def _load_page(raw: dict[str, Any], index: int) -> Page:
    items: list[ContentItem] = []
    content = raw.get("content")
    if isinstance(content, list):
        for j, it in enumerate(content):
            if not isinstance(it, dict):
                logger.warning("page %d: skipping non-object content item #%d", index, j)
                continue
            items.append(_load_item(it, j))
    elif content is not None:
        logger.warning("page %d: content is not an array; page will be empty", index)

    background = raw.get("background")
    bg_image = None
    if isinstance(background, dict):
        bg_image = _opt_str(background.get("image"))

    layout = raw.get("layout")
    layout = layout.strip().lower() if isinstance(layout, str) and layout.strip() else "grid"
    if layout not in LAYOUT_MODES and layout not in LEGACY_LAYOUT_MODES:
        logger.warning("page %d: unknown layout %r; items use the default box", index, layout)
    animation = raw.get("animation")
    return Page(
        title=_opt_str(raw.get("title")),
        subtitle=_opt_str(raw.get("subtitle")),
        layout=layout,
        section=_opt_str(raw.get("section")),
        background_image=bg_image,
        grid_config=_load_grid_config(raw.get("gridConfig")),
        animation=dict(animation) if isinstance(animation, dict) else None,
        content=tuple(items),
        slot_count=len(content) if isinstance(content, list) else 0,
    )


def _load_component(raw: dict[str, Any]) -> Component | None:
    cid = raw.get("id")
    if cid is None or str(cid) == "":
        logger.warning("skipping component without id")
        return None
    raw_type = raw.get("type")
    kind = ContentKind.parse(raw_type)
    if kind not in COMPONENT_KINDS:
        logger.warning("component %r has unsupported type %r; it will render as a placeholder", cid, raw_type)
    return Component(
        id=str(cid),
        kind=kind,
        raw_type="" if raw_type is None else str(raw_type),
        content=_mapping(raw.get("content")),
        style=_mapping(raw.get("style")),
        title=_opt_str(raw.get("title")),
        description=_opt_str(raw.get("description")),
    )


def load_document(obj: Any) -> Document:
    """Build a Document from the parsed JSON object `{"presentation": {...}}`.

    Raises DocumentError only when the top-level skeleton is missing.
    """
    if not isinstance(obj, dict):
        raise DocumentError("document must be a JSON object")
    pres = obj.get("presentation")
    if not isinstance(pres, dict):
        raise DocumentError("missing 'presentation' object")
    pages_raw = pres.get("pages")
    if not isinstance(pages_raw, list):
        raise DocumentError("presentation.pages must be an array")

    pages: list[Page] = []
    for i, p in enumerate(pages_raw):
        if not isinstance(p, dict):
            logger.warning("skipping non-object page #%d", i)
            continue
        pages.append(_load_page(p, i))

    sections: list[Section] = []
    sections_raw = pres.get("sections")
    if sections_raw is not None and not isinstance(sections_raw, list):
        logger.warning("presentation.sections is not an array; ignored")
        sections_raw = []
    for s in sections_raw or []:
        if isinstance(s, dict) and s.get("title") is not None:
            sections.append(
                Section(
                    title=str(s["title"]),
                    description=_opt_str(s.get("description")),
                    icon=_opt_str(s.get("icon")),
                )
            )

    components: list[Component] = []
    comps_raw = pres.get("components")
    if isinstance(comps_raw, list):
        for c in comps_raw:
            if not isinstance(c, dict):
                logger.warning("skipping non-object component entry")
                continue
            comp = _load_component(c)
            if comp is not None:
                components.append(comp)

    return Document(
        metadata=_load_metadata(pres.get("metadata")),
        pages=tuple(pages),
        sections=tuple(sections),
        components=tuple(components),
    )


def load_document_bytes(data: bytes | str) -> Document:
    """Parse JSON text and load it; malformed JSON is a DocumentError."""
    try:
        obj = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise DocumentError(f"invalid JSON: {e}") from e
    return load_document(obj)


def extract_title(data: bytes | str) -> str:
    """Best-effort title lookup on raw JSON text; never raises."""
    try:
        obj = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        logger.warning("could not parse document for title: %s", e)
        return UNTITLED
    if isinstance(obj, dict):
        pres = obj.get("presentation")
        if isinstance(pres, dict):
            meta = pres.get("metadata")
            if isinstance(meta, dict):
                title = meta.get("title")
                if isinstance(title, str) and title:
                    return title
    return UNTITLED
