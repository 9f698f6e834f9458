from __future__ import annotations

import copy
from typing import Any

import pytest

from jsondeck.core.model import Document, load_document


SAMPLE: dict[str, Any] = {
    "presentation": {
        "metadata": {
            "title": "Quarterly Review",
            "author": "Finance Team",
            "theme": "corporate",
            "company": "Acme",
        },
        "sections": [{"title": "Overview"}],
        "components": [
            {
                "id": "kpi-chart",
                "type": "chart",
                "content": {
                    "chartData": {"type": "bar", "labels": ["Q1", "Q2", "Q3"], "values": [10, 20, 30]}
                },
                "style": {"position": "left", "fontSize": "14px"},
            },
            {
                "id": "tagline",
                "type": "text",
                "content": {"text": "Growing steadily"},
                "style": {"alignment": "center"},
            },
        ],
        "pages": [
            {
                "title": "Welcome",
                "subtitle": "Q3 results",
                "layout": "grid",
                "content": [
                    {
                        "type": "text",
                        "content": {
                            "text": "Revenue grew\nacross all regions.\n\nCosts stayed flat.",
                            "gridArea": {"columnStart": 1, "columnEnd": 12, "rowStart": 1, "rowEnd": 1},
                        },
                    },
                    {
                        "type": "list",
                        "content": {"listItems": ["North", "South"], "listType": "numbered"},
                    },
                ],
            },
            {
                "title": "Numbers",
                "layout": "component-grid",
                "content": [
                    {"type": "component", "content": {"componentId": "kpi-chart"}},
                    {"type": "component", "content": {"componentId": "tagline", "position": "right"}},
                ],
            },
            {
                "title": "Details",
                "layout": "two-column",
                "content": [
                    {
                        "type": "table",
                        "content": {"headers": ["Region", "Sales"], "rows": [["North", 10], ["South", 20]]},
                    },
                    {"type": "quote", "content": {"quoteText": "Numbers tell.", "quoteAuthor": "CFO"}},
                ],
            },
        ],
    }
}


def document(
    pages: list[dict[str, Any]],
    *,
    components: list[dict[str, Any]] | None = None,
    title: str = "Deck",
    theme: str = "light",
) -> dict[str, Any]:
    pres: dict[str, Any] = {
        "metadata": {"title": title, "author": "Tester", "theme": theme},
        "pages": pages,
    }
    if components is not None:
        pres["components"] = components
    return {"presentation": pres}


@pytest.fixture
def sample_raw() -> dict[str, Any]:
    return copy.deepcopy(SAMPLE)


@pytest.fixture
def sample_doc(sample_raw: dict[str, Any]) -> Document:
    return load_document(sample_raw)


@pytest.fixture
def make_doc():
    """Build a Document from page dicts: make_doc([{"content": [...]}], components=[...])."""

    def _make(pages: list[dict[str, Any]], **kwargs: Any) -> Document:
        return load_document(document(pages, **kwargs))

    return _make
