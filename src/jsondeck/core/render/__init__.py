from __future__ import annotations

from .pptx_encoder import PptxEncoder

__all__ = [
    "PptxEncoder",
]
