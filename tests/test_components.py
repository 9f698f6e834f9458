from __future__ import annotations

from jsondeck.core.model import ContentKind, load_document
from jsondeck.core.resolve import ComponentMiss, ComponentRegistry, ResolvedItem


class TestComponentRegistry:

    def test_inline_item_passes_through(self, sample_doc):
        registry = ComponentRegistry.from_components(sample_doc.components)
        item = sample_doc.pages[0].content[1]
        resolved = registry.resolve(item)
        assert isinstance(resolved, ResolvedItem)
        assert resolved.kind is ContentKind.LIST
        assert resolved.content == item.content
        assert resolved.component_id is None

    def test_reference_expands_component(self, sample_doc):
        registry = ComponentRegistry.from_components(sample_doc.components)
        resolved = registry.resolve(sample_doc.pages[1].content[0])
        assert isinstance(resolved, ResolvedItem)
        assert resolved.kind is ContentKind.CHART
        assert resolved.component_id == "kpi-chart"
        assert resolved.content["chartData"]["labels"] == ["Q1", "Q2", "Q3"]
        # position comes from the component style when the item has none
        assert resolved.position == "left"

    def test_item_style_overrides_component_style(self):
        doc = load_document({
            "presentation": {
                "components": [
                    {"id": "c", "type": "text", "content": {"text": "x"},
                     "style": {"fontSize": "12", "alignment": "center"}},
                ],
                "pages": [{"content": [
                    {"type": "component", "content": {"componentId": "c", "position": "Right"},
                     "style": {"fontSize": "20"}},
                ]}],
            }
        })
        registry = ComponentRegistry.from_components(doc.components)
        resolved = registry.resolve(doc.pages[0].content[0])
        assert resolved.style == {"fontSize": "20", "alignment": "center"}
        assert resolved.position == "right"
        assert doc.components[0].style == {"fontSize": "12", "alignment": "center"}

    def test_resolution_is_idempotent(self, sample_doc):
        registry = ComponentRegistry.from_components(sample_doc.components)
        item = sample_doc.pages[1].content[1]
        assert registry.resolve(item) == registry.resolve(item)

    def test_missing_component(self, sample_doc):
        registry = ComponentRegistry.from_components(sample_doc.components)
        doc = load_document({"presentation": {"pages": [{"content": [
            {"type": "component", "content": {"componentId": "missing-1"}},
            {"type": "component", "content": {}},
        ]}]}})
        assert registry.resolve(doc.pages[0].content[0]) == ComponentMiss("missing-1")
        assert registry.resolve(doc.pages[0].content[1]) == ComponentMiss("")

    def test_duplicate_ids_last_wins(self):
        doc = load_document({
            "presentation": {
                "components": [
                    {"id": "dup", "type": "text", "content": {"text": "first"}},
                    {"id": "dup", "type": "icon", "content": {"icon": "second"}},
                ],
                "pages": [],
            }
        })
        registry = ComponentRegistry.from_components(doc.components)
        assert len(registry) == 1
        assert "dup" in registry
        assert registry.get("dup").kind is ContentKind.ICON
