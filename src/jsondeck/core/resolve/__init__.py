from __future__ import annotations

from .components import ComponentMiss, ComponentRegistry, ResolvedItem

__all__ = [
    "ComponentMiss",
    "ComponentRegistry",
    "ResolvedItem",
]
