"""
text.py — Formatting helpers shared by the content compilers.
"""
from __future__ import annotations

import math
import re
from typing import Any

_BLANK_LINES_RE = re.compile(r"\n\s*\n+")
_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(px|pt)?\s*$", re.IGNORECASE)

_ALIGNMENTS = ("left", "center", "right", "justify")


def normalize_paragraphs(text: str) -> list[str]:
    """Join soft-wrapped lines; keep blank-line-separated paragraphs.

    "a\\nb\\n\\nc" -> ["a b", "c"]
    """
    s = text.replace("\r\n", "\n").replace("\r", "\n")
    paragraphs: list[str] = []
    # A line holding only spaces or tabs still separates paragraphs.
    for block in _BLANK_LINES_RE.split(s):
        joined = " ".join(ln.strip() for ln in block.split("\n") if ln.strip())
        if joined:
            paragraphs.append(joined)
    return paragraphs


def coerce_font_size(v: Any, default: float) -> float:
    """'16', '16px', '16pt', 16 -> 16.0; anything unusable -> default."""
    if isinstance(v, bool):
        return default
    if isinstance(v, (int, float)):
        f = float(v)
        return f if math.isfinite(f) and f > 0 else default
    if isinstance(v, str):
        m = _SIZE_RE.match(v)
        if m:
            f = float(m.group(1))
            if f > 0:
                return f
    return default


def coerce_float(v: Any) -> float | None:
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        f = float(v)
        return f if math.isfinite(f) else None
    if isinstance(v, str):
        try:
            f = float(v.strip())
        except ValueError:
            return None
        return f if math.isfinite(f) else None
    return None


def alignment_from_style(style: dict[str, Any], default: str = "left") -> str:
    a = style.get("alignment")
    if a is None:
        a = style.get("textAlign")
    if isinstance(a, str):
        s = a.strip().lower()
        if s in _ALIGNMENTS:
            return s
        if s == "centre":
            return "center"
    return default


def is_bold(style: dict[str, Any]) -> bool:
    w = style.get("fontWeight")
    if isinstance(w, str):
        s = w.strip().lower()
        return s == "bold" or (s.isdigit() and int(s) >= 600)
    if isinstance(w, (int, float)) and not isinstance(w, bool):
        return w >= 600
    return False


def strip_hash(color: Any, default: str) -> str:
    if isinstance(color, str):
        s = color.strip().lstrip("#")
        if re.fullmatch(r"[0-9A-Fa-f]{6}", s):
            return s.upper()
    return default


def cell_text(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)
