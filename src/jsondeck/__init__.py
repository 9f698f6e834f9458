"""jsondeck — declarative JSON slide decks compiled to .pptx.

Public API:

    load_document(obj) -> Document
    compile_deck(document) -> DeckPlan
    generate_presentation(document, encoder=None) -> GenerationResult
"""
from __future__ import annotations

from jsondeck.core.compile.deck import DeckCompiler, compile_deck, generate_presentation
from jsondeck.core.model import Document, load_document

__version__ = "0.1.0"

__all__ = [
    "DeckCompiler",
    "Document",
    "compile_deck",
    "generate_presentation",
    "load_document",
]
