from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from jsondeck.core.model import Component, ContentItem, ContentKind


@dataclass(frozen=True)
class ResolvedItem:
    """A content item with any component reference expanded."""

    kind: ContentKind
    raw_type: str
    content: dict[str, Any] = field(default_factory=dict)
    style: dict[str, Any] = field(default_factory=dict)
    position: str | None = None
    component_id: str | None = None


@dataclass(frozen=True)
class ComponentMiss:
    component_id: str


def _position_hint(item: ContentItem, style: dict[str, Any]) -> str | None:
    if item.position is not None:
        return item.position
    pos = style.get("position")
    if isinstance(pos, str) and pos.strip():
        return pos.strip().lower()
    return None


class ComponentRegistry:
    """Read-only id -> Component map built once per compilation pass.

    Duplicate ids are not rejected: the last definition wins.
    """

    def __init__(self, components: dict[str, Component] | None = None) -> None:
        self._by_id: dict[str, Component] = dict(components or {})

    @classmethod
    def from_components(cls, components: Iterable[Component]) -> "ComponentRegistry":
        by_id: dict[str, Component] = {}
        for c in components:
            by_id[c.id] = c
        return cls(by_id)

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, component_id: str) -> Component | None:
        return self._by_id.get(component_id)

    def resolve(self, item: ContentItem) -> ResolvedItem | ComponentMiss:
        """Expand `item` if it references a component; inline items pass through.

        Style merge: the item's style overrides the component's style key by key.
        """
        if item.kind is not ContentKind.COMPONENT:
            return ResolvedItem(
                kind=item.kind,
                raw_type=item.raw_type,
                content=dict(item.content),
                style=dict(item.style),
                position=_position_hint(item, item.style),
            )

        cid = item.component_id
        component = self._by_id.get(cid) if cid is not None else None
        if component is None:
            return ComponentMiss(component_id="" if cid is None else cid)

        style = {**component.style, **item.style}
        return ResolvedItem(
            kind=component.kind,
            raw_type=component.raw_type,
            content=dict(component.content),
            style=style,
            position=_position_hint(item, style),
            component_id=component.id,
        )
