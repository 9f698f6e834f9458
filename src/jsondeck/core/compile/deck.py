"""
deck.py — Page-by-page orchestration and the whole-deck entry points.

Per page the compiler walks:

    start -> background-resolved -> title-emitted -> subtitle-emitted -> content-loop -> done

Failure policy:
  - item:  handled inside `compile_item` (placeholder, page continues).
  - page:  any exception while building a page replaces it with one error slide.
  - deck:  any exception while compiling or encoding discards every slide and
           produces a one-slide error deck; only if *that* cannot be encoded
           is an EncoderError raised to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from jsondeck.core.compile.content import ERROR_RED, compile_item
from jsondeck.core.errors import EncoderError
from jsondeck.core.layout import Box, resolve_box
from jsondeck.core.model import Document, Metadata, Page
from jsondeck.core.plan import (
    Background,
    DeckPlan,
    Emission,
    ItemOutcome,
    PageOutcome,
    PageStage,
    PageStatus,
    SlidePlan,
    TextRun,
)
from jsondeck.core.resolve import ComponentRegistry, ResolvedItem
from jsondeck.core.theme import resolve_theme

logger = logging.getLogger(__name__)

TITLE_BOX = Box(0.5, 0.5, 9.0, 1.0)
TITLE_FONT_PT = 28
SUBTITLE_FONT_PT = 20
SUBTITLE_HEIGHT = 0.6

DEFAULT_FILENAME = "Presentation.pptx"


def output_filename(metadata: Metadata) -> str:
    """'<title>.pptx', or 'Presentation.pptx' when the title is empty."""
    title = (metadata.title or "").strip()
    if not title:
        return DEFAULT_FILENAME
    return title.replace("/", "_").replace("\\", "_") + ".pptx"


class _PageBuilder:
    def __init__(self, index: int) -> None:
        self.index = index
        self.stage = PageStage.START
        self.background: Background | None = None
        self.emissions: list[Emission] = []
        self.items: list[ItemOutcome] = []
        self.warnings: list[str] = []


class DeckCompiler:
    """Compile a Document into a DeckPlan.

    The component registry is built once per instance; the document and the
    registry are only read.
    """

    def __init__(self, document: Document) -> None:
        self.document = document
        self.registry = ComponentRegistry.from_components(document.components)

    def compile_page(self, page: Page, index: int) -> PageOutcome:
        builder = _PageBuilder(index)
        try:
            self._build_page(page, builder)
        except Exception as e:
            label = page.title or f"#{index + 1}"
            logger.warning("page %s failed at stage %s: %s", label, builder.stage.value, e)
            return PageOutcome(
                status=PageStatus.FAILED,
                slide=self._error_slide(page, index, builder.stage),
                items=builder.items,
                error=str(e),
            )

        return PageOutcome(
            status=PageStatus.OK,
            slide=SlidePlan(
                index=index,
                background=builder.background or Background(color=resolve_theme(None).background),
                emissions=tuple(builder.emissions),
                title=page.title,
                status=PageStatus.OK,
                stage=builder.stage,
                warnings=tuple(builder.warnings),
            ),
            items=builder.items,
        )

    def compile_pages(self) -> list[PageOutcome]:
        return [self.compile_page(page, i) for i, page in enumerate(self.document.pages)]

    def compile(self) -> DeckPlan:
        meta = self.document.metadata
        return DeckPlan(
            title=meta.title,
            author=meta.author,
            company=meta.company,
            slides=tuple(o.slide for o in self.compile_pages()),
        )

    def _build_page(self, page: Page, b: _PageBuilder) -> None:
        colors = resolve_theme(self.document.metadata.theme)

        b.background = Background(color=colors.background, image=page.background_image)
        b.stage = PageStage.BACKGROUND_RESOLVED

        if page.title:
            b.emissions.append(
                TextRun(
                    text=page.title,
                    box=TITLE_BOX,
                    font_size=TITLE_FONT_PT,
                    color=colors.text,
                    bold=True,
                    align="center",
                )
            )
        b.stage = PageStage.TITLE_EMITTED

        if page.subtitle:
            b.emissions.append(
                TextRun(
                    text=page.subtitle,
                    box=Box(0.5, 1.5 if page.title else 0.5, 9.0, SUBTITLE_HEIGHT),
                    font_size=SUBTITLE_FONT_PT,
                    color=colors.text,
                    italic=True,
                    align="center",
                )
            )
        b.stage = PageStage.SUBTITLE_EMITTED

        b.stage = PageStage.CONTENT_LOOP
        for item in page.content:
            resolved = self.registry.resolve(item)
            position = resolved.position if isinstance(resolved, ResolvedItem) else item.position
            box = resolve_box(page, item.ordinal, item, position=position)
            outcome = compile_item(resolved, box, colors, page_title=page.title)
            b.items.append(outcome)
            b.emissions.extend(outcome.emissions)
            b.warnings.extend(outcome.warnings)

        b.stage = PageStage.DONE

    def _error_slide(self, page: Page, index: int, stage: PageStage) -> SlidePlan:
        colors = resolve_theme(self.document.metadata.theme)
        label = page.title or f"page {index + 1}"
        return SlidePlan(
            index=index,
            background=Background(color=colors.background),
            emissions=(
                TextRun(
                    text=f"Error rendering page: {label}",
                    box=Box(0.5, 3.0, 9.0, 1.5),
                    font_size=20,
                    color=ERROR_RED,
                    bold=True,
                    align="center",
                ),
            ),
            title=page.title,
            status=PageStatus.FAILED,
            stage=stage,
        )


def compile_deck(document: Document) -> DeckPlan:
    return DeckCompiler(document).compile()


def error_deck(metadata: Metadata, message: str) -> DeckPlan:
    """A single-slide deck carrying `message`; replaces any partial output."""
    slide = SlidePlan(
        index=0,
        background=Background(color="FFFFFF"),
        emissions=(
            TextRun(
                text="Error generating presentation",
                box=TITLE_BOX,
                font_size=TITLE_FONT_PT,
                color=ERROR_RED,
                bold=True,
                align="center",
            ),
            TextRun(
                text=message or "unknown error",
                box=Box(0.5, 1.8, 9.0, 4.0),
                font_size=16,
                color="333333",
                align="center",
                valign="top",
            ),
        ),
        title="Error generating presentation",
        status=PageStatus.FAILED,
    )
    return DeckPlan(
        title=metadata.title,
        author=metadata.author,
        company=metadata.company,
        slides=(slide,),
        error=message or "unknown error",
    )


@dataclass(frozen=True)
class GenerationResult:
    data: bytes
    plan: DeckPlan
    filename: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _default_encoder() -> Any:
    from jsondeck.core.render.pptx_encoder import PptxEncoder

    return PptxEncoder()


def generate_presentation(document: Document, encoder: Any = None) -> GenerationResult:
    """Compile `document` and hand the plan to `encoder` (anything with `encode(plan) -> bytes`).

    Always returns a usable deck: on a deck-level failure the result carries a
    one-slide error deck and `error` is set.
    """
    filename = output_filename(document.metadata)
    try:
        if encoder is None:
            encoder = _default_encoder()
        plan = compile_deck(document)
        return GenerationResult(data=encoder.encode(plan), plan=plan, filename=filename)
    except Exception as e:
        message = str(e) or type(e).__name__
        logger.error("presentation generation failed: %s", message)
        fallback = error_deck(document.metadata, message)
        try:
            if encoder is None:
                encoder = _default_encoder()
            data = encoder.encode(fallback)
        except Exception as e2:
            raise EncoderError(f"could not encode presentation: {message}", cause=e) from e2
        return GenerationResult(data=data, plan=fallback, filename=filename, error=message)
