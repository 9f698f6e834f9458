"""Document model package.

Keep this module as a thin re-export layer:

    from jsondeck.core.model import Document, load_document
"""

from __future__ import annotations

from .document import (
    COMPONENT_KINDS,
    LAYOUT_MODES,
    LEGACY_LAYOUT_MODES,
    UNTITLED,
    Component,
    ContentItem,
    ContentKind,
    Document,
    GridConfig,
    Metadata,
    Page,
    Section,
    extract_title,
    load_document,
    load_document_bytes,
)

__all__ = [
    "COMPONENT_KINDS",
    "LAYOUT_MODES",
    "LEGACY_LAYOUT_MODES",
    "UNTITLED",
    "Component",
    "ContentItem",
    "ContentKind",
    "Document",
    "GridConfig",
    "Metadata",
    "Page",
    "Section",
    "extract_title",
    "load_document",
    "load_document_bytes",
]
