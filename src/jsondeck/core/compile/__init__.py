"""Compilation package: content items and whole decks.

    from jsondeck.core.compile import compile_deck, generate_presentation
"""

from __future__ import annotations

from .content import compile_item
from .deck import (
    DeckCompiler,
    GenerationResult,
    compile_deck,
    error_deck,
    generate_presentation,
    output_filename,
)

__all__ = [
    "DeckCompiler",
    "GenerationResult",
    "compile_deck",
    "compile_item",
    "error_deck",
    "generate_presentation",
    "output_filename",
]
