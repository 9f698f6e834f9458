"""
Tests for jsondeck.core.compile.deck

Covers:
  - Page walk: background, title/subtitle, content loop, recorded stage
  - Page-level isolation (error slide, other pages untouched)
  - Deck-level isolation (single-slide error deck, EncoderError on double failure)
  - Output filename
"""

from __future__ import annotations

import pytest

from jsondeck.core.compile import DeckCompiler, compile_deck, generate_presentation, output_filename
from jsondeck.core.compile import deck as deck_mod
from jsondeck.core.errors import EncoderError
from jsondeck.core.model import Metadata
from jsondeck.core.plan import ChartCmd, PageStage, PageStatus, TextRun


class RecordingEncoder:
    def __init__(self) -> None:
        self.plans = []

    def encode(self, plan) -> bytes:
        self.plans.append(plan)
        return f"slides={len(plan.slides)}".encode()


class FlakyEncoder(RecordingEncoder):
    """Fails on the first call only."""

    def encode(self, plan) -> bytes:
        if not self.plans:
            self.plans.append(plan)
            raise RuntimeError("encoder exploded")
        return super().encode(plan)


class BrokenEncoder:
    def encode(self, plan) -> bytes:
        raise OSError("disk full")


def _texts(slide) -> list[str]:
    return [e.text for e in slide.emissions if isinstance(e, TextRun)]


# ---------------------------------------------------------------------------
# Page walk
# ---------------------------------------------------------------------------

class TestPageWalk:

    def test_sample_compiles(self, sample_doc):
        plan = compile_deck(sample_doc)
        assert plan.title == "Quarterly Review"
        assert plan.author == "Finance Team"
        assert plan.company == "Acme"
        assert not plan.is_error_deck
        assert len(plan.slides) == 3
        assert all(s.status is PageStatus.OK for s in plan.slides)
        assert all(s.stage is PageStage.DONE for s in plan.slides)
        assert [s.index for s in plan.slides] == [0, 1, 2]

    def test_title_and_subtitle(self, sample_doc):
        slide = compile_deck(sample_doc).slides[0]
        title, subtitle = slide.emissions[:2]
        assert title.text == "Welcome"
        assert title.font_size == 28
        assert title.bold
        assert (title.box.x, title.box.y, title.box.w, title.box.h) == (0.5, 0.5, 9.0, 1.0)
        assert subtitle.text == "Q3 results"
        assert subtitle.italic
        assert subtitle.font_size == 20
        assert subtitle.box.y == 1.5

    def test_subtitle_without_title(self, make_doc):
        doc = make_doc([{"subtitle": "Only", "content": []}])
        (sub,) = compile_deck(doc).slides[0].emissions
        assert sub.text == "Only"
        assert sub.box.y == 0.5

    def test_theme_background(self, sample_doc, make_doc):
        assert compile_deck(sample_doc).slides[0].background.color == "F5F7FA"
        doc = make_doc([{"content": []}], theme="neon")
        assert compile_deck(doc).slides[0].background.color == "FFFFFF"

    def test_background_image(self, make_doc):
        doc = make_doc([{"background": {"image": "bg.jpg"}, "content": []}], theme="dark")
        bg = compile_deck(doc).slides[0].background
        assert bg.image == "bg.jpg"
        assert bg.color == "2D2D2D"

    def test_components_placed_in_slots(self, sample_doc):
        slide = compile_deck(sample_doc).slides[1]
        charts = [e for e in slide.emissions if isinstance(e, ChartCmd)]
        assert len(charts) == 1
        assert charts[0].labels == ("Q1", "Q2", "Q3")
        assert charts[0].box.x == pytest.approx(0.5)
        assert charts[0].box.w == pytest.approx(4.35)
        tagline = [e for e in slide.emissions if isinstance(e, TextRun) and e.text == "Growing steadily"]
        assert tagline[0].box.x == pytest.approx(5.15)
        assert tagline[0].align == "center"

    def test_missing_component_keeps_page(self, make_doc):
        doc = make_doc(
            [
                {"title": "First", "content": [{"type": "text", "content": {"text": "ok"}}]},
                {"title": "Second", "content": [
                    {"type": "text", "content": {"text": "before"}},
                    {"type": "component", "content": {"componentId": "missing-1"}},
                    {"type": "text", "content": {"text": "after"}},
                ]},
            ],
            components=[{"id": "present", "type": "text", "content": {"text": "x"}}],
        )
        outcomes = DeckCompiler(doc).compile_pages()
        second = outcomes[1]
        assert second.status is PageStatus.OK
        assert _texts(second.slide) == ["Second", "before", "[Component not found: missing-1]", "after"]
        assert len(second.items) == 3
        assert any("missing-1" in w for w in second.slide.warnings)

    def test_two_column_uses_raw_ordinals(self, make_doc):
        doc = make_doc([{"layout": "two-column", "content": [
            {"type": "text", "content": {"text": "A"}},
            5,
            {"type": "text", "content": {"text": "C"}},
        ]}])
        slide = compile_deck(doc).slides[0]
        boxes = {e.text: e.box for e in slide.emissions if isinstance(e, TextRun)}
        assert boxes["A"].x == pytest.approx(0.5)
        assert boxes["C"].x == pytest.approx(0.5)

    def test_grid_rows_count_skipped_items(self, make_doc):
        area = {"columnStart": 1, "columnEnd": 1, "rowStart": 1, "rowEnd": 1}
        doc = make_doc([{"gridConfig": {"columns": 1}, "content": [
            {"type": "text", "content": {"text": "A", "gridArea": area}},
            1, 2, 3, 4,
        ]}])
        (run,) = compile_deck(doc).slides[0].emissions
        # five raw slots in one column -> five rows, row gap 0.05
        assert run.box.h == pytest.approx((5.0 - 4 * 0.05) / 5)

    def test_compilation_does_not_mutate(self, sample_doc):
        assert compile_deck(sample_doc) == compile_deck(sample_doc)


# ---------------------------------------------------------------------------
# Page-level isolation
# ---------------------------------------------------------------------------

class TestPageFailure:

    def test_bad_grid_area_fails_only_that_page(self, make_doc):
        doc = make_doc([
            {"title": "Good", "content": [{"type": "text", "content": {"text": "fine"}}]},
            {"title": "Broken", "content": [
                {"type": "text", "content": {"text": "x", "gridArea": {"columnStart": "a"}}},
            ]},
            {"content": [{"type": "text", "content": {"text": "also fine"}}]},
        ])
        outcomes = DeckCompiler(doc).compile_pages()
        assert [o.status for o in outcomes] == [PageStatus.OK, PageStatus.FAILED, PageStatus.OK]

        failed = outcomes[1]
        assert "columnStart" in failed.error
        assert failed.slide.status is PageStatus.FAILED
        assert failed.slide.stage is PageStage.CONTENT_LOOP
        (run,) = failed.slide.emissions
        assert run.text == "Error rendering page: Broken"
        assert run.color == "FF0000"

    def test_error_slide_label_without_title(self, make_doc):
        doc = make_doc([
            {"content": []},
            {"content": [{"type": "text", "content": {"text": "x", "gridArea": {"rowStart": "?"}}}]},
        ])
        plan = compile_deck(doc)
        assert _texts(plan.slides[1]) == ["Error rendering page: page 2"]
        assert not plan.is_error_deck


# ---------------------------------------------------------------------------
# Deck-level isolation
# ---------------------------------------------------------------------------

class TestGeneratePresentation:

    def test_ok(self, sample_doc):
        enc = RecordingEncoder()
        result = generate_presentation(sample_doc, enc)
        assert result.ok
        assert result.error is None
        assert result.filename == "Quarterly Review.pptx"
        assert result.data == b"slides=3"
        assert enc.plans == [result.plan]

    def test_encoder_failure_yields_single_error_slide(self, sample_doc):
        enc = FlakyEncoder()
        result = generate_presentation(sample_doc, enc)
        assert not result.ok
        assert result.error == "encoder exploded"
        assert result.plan.is_error_deck
        assert len(result.plan.slides) == 1
        assert _texts(result.plan.slides[0]) == ["Error generating presentation", "encoder exploded"]
        assert result.data == b"slides=1"
        assert result.filename == "Quarterly Review.pptx"

    def test_compile_failure_yields_error_deck(self, sample_doc, monkeypatch):
        def explode(document):
            raise RuntimeError("compile exploded")

        monkeypatch.setattr(deck_mod, "compile_deck", explode)
        enc = RecordingEncoder()
        result = generate_presentation(sample_doc, enc)
        assert result.error == "compile exploded"
        assert len(enc.plans) == 1
        assert enc.plans[0].is_error_deck

    def test_double_failure_raises(self, sample_doc):
        with pytest.raises(EncoderError) as ei:
            generate_presentation(sample_doc, BrokenEncoder())
        assert isinstance(ei.value.cause, OSError)
        assert "disk full" in str(ei.value)


# ---------------------------------------------------------------------------
# Output filename
# ---------------------------------------------------------------------------

class TestOutputFilename:

    @pytest.mark.parametrize("title,name", [
        ("Quarterly Review", "Quarterly Review.pptx"),
        ("Q3/Q4 plan", "Q3_Q4 plan.pptx"),
        ("", "Presentation.pptx"),
        ("   ", "Presentation.pptx"),
    ])
    def test_output_filename(self, title, name):
        assert output_filename(Metadata(title=title, author="a")) == name
