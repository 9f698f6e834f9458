from __future__ import annotations

import base64
import logging
from io import BytesIO
from pathlib import Path
from typing import Any

from pptx import Presentation
from pptx.chart.data import BubbleChartData, CategoryChartData, XyChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.shapes import MSO_AUTO_SHAPE_TYPE
from pptx.enum.text import MSO_VERTICAL_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.oxml.xmlchemy import OxmlElement
from pptx.parts.image import Image as PptxImage
from pptx.util import Emu, Inches, Pt

from jsondeck.core.errors import EncoderError
from jsondeck.core.layout import SLIDE_HEIGHT_IN, SLIDE_WIDTH_IN, Box
from jsondeck.core.plan import (
    Background,
    ChartCmd,
    DeckPlan,
    ImageCmd,
    ShapeCmd,
    SlidePlan,
    TableCmd,
    TextRun,
)

logger = logging.getLogger(__name__)

BLANK_LAYOUT_INDEX = 6

_SHAPE_TYPES: dict[str, MSO_AUTO_SHAPE_TYPE] = {
    "rectangle": MSO_AUTO_SHAPE_TYPE.RECTANGLE,
    "ellipse": MSO_AUTO_SHAPE_TYPE.OVAL,
    "triangle": MSO_AUTO_SHAPE_TYPE.ISOSCELES_TRIANGLE,
    "right_arrow": MSO_AUTO_SHAPE_TYPE.RIGHT_ARROW,
    "star5": MSO_AUTO_SHAPE_TYPE.STAR_5_POINT,
    "cloud": MSO_AUTO_SHAPE_TYPE.CLOUD,
}

_CHART_TYPES: dict[str, XL_CHART_TYPE] = {
    "bar": XL_CHART_TYPE.COLUMN_CLUSTERED,
    "line": XL_CHART_TYPE.LINE_MARKERS,
    "pie": XL_CHART_TYPE.PIE,
    "doughnut": XL_CHART_TYPE.DOUGHNUT,
    "radar": XL_CHART_TYPE.RADAR,
    "scatter": XL_CHART_TYPE.XY_SCATTER,
    "bubble": XL_CHART_TYPE.BUBBLE,
}

_ALIGN: dict[str, PP_ALIGN] = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
    "justify": PP_ALIGN.JUSTIFY,
}

_VANCHOR: dict[str, MSO_VERTICAL_ANCHOR] = {
    "top": MSO_VERTICAL_ANCHOR.TOP,
    "middle": MSO_VERTICAL_ANCHOR.MIDDLE,
    "bottom": MSO_VERTICAL_ANCHOR.BOTTOM,
}

_REMOTE_PREFIXES = ("http://", "https://", "//", "blob:")


def _rgb_from_any(v: Any) -> RGBColor | None:
    """Parse RGB from '#RRGGBB' or 'RRGGBB'."""
    if not isinstance(v, str):
        return None
    s = v.strip()
    if s.startswith("#"):
        s = s[1:]
    if len(s) != 6:
        return None
    try:
        return RGBColor.from_string(s.upper())
    except ValueError:
        return None


def _geometry(box: Box) -> tuple[Emu, Emu, Emu, Emu]:
    # Degenerate boxes are drawn with zero extent rather than rejected.
    return Inches(box.x), Inches(box.y), Inches(max(box.w, 0.0)), Inches(max(box.h, 0.0))


def _set_no_line(shape: Any) -> None:
    """Enforce <a:ln w="0"><a:noFill/></a:ln> so no theme outline leaks through."""
    try:
        shape.line.fill.background()
    except Exception:
        pass
    try:
        el = shape._element
        st_el = el.find(qn("p:style"))
        if st_el is not None:
            ln_ref = st_el.find(qn("a:lnRef"))
            if ln_ref is not None:
                ln_ref.set("idx", "0")
            # Drop the template drop shadow as well.
            eff_ref = st_el.find(qn("a:effectRef"))
            if eff_ref is not None:
                eff_ref.set("idx", "0")
    except Exception:
        pass


def _apply_shape_style(shape: Any, fill: str | None, line: str | None, line_width_pt: float | None) -> None:
    fill_rgb = _rgb_from_any(fill)
    if fill_rgb is not None:
        shape.fill.solid()
        shape.fill.fore_color.rgb = fill_rgb
    else:
        shape.fill.background()

    line_rgb = _rgb_from_any(line)
    if line_rgb is None:
        _set_no_line(shape)
        return
    shape.line.color.rgb = line_rgb
    shape.line.width = Pt(line_width_pt if line_width_pt is not None else 0.75)


def _set_cell_border(cell: Any, color: str, width_pt: float = 1.0) -> None:
    """Solid border on all four cell edges via <a:lnL/lnR/lnT/lnB> in tcPr."""
    tc_pr = cell._tc.get_or_add_tcPr()
    tags = ("a:lnL", "a:lnR", "a:lnT", "a:lnB")
    for tag in tags:
        el = tc_pr.find(qn(tag))
        if el is not None:
            tc_pr.remove(el)
    # Line elements must precede the cell fill in tcPr.
    for i, tag in enumerate(tags):
        ln = OxmlElement(tag)
        ln.set("w", str(int(Pt(width_pt))))
        solid = OxmlElement("a:solidFill")
        clr = OxmlElement("a:srgbClr")
        clr.set("val", color)
        solid.append(clr)
        ln.append(solid)
        tc_pr.insert(i, ln)


def _style_run(run: Any, *, size: float, color: str, bold: bool, italic: bool, face: str | None) -> None:
    font = run.font
    font.size = Pt(size)
    font.bold = bold
    font.italic = italic
    rgb = _rgb_from_any(color)
    if rgb is not None:
        font.color.rgb = rgb
    if face:
        font.name = face


class PptxEncoder:
    """Draw a DeckPlan with python-pptx and return the .pptx bytes.

    `base_dir` resolves relative image paths. Remote images are never fetched:
    they, and any source that fails to load, are replaced by the command's
    fallback primitives.
    """

    def __init__(self, base_dir: Path | str | None = None) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

    def encode(self, plan: DeckPlan) -> bytes:
        try:
            prs = Presentation()
            prs.slide_width = Inches(SLIDE_WIDTH_IN)
            prs.slide_height = Inches(SLIDE_HEIGHT_IN)
            props = prs.core_properties
            props.title = plan.title or ""
            props.author = plan.author or ""
        except Exception as e:
            raise EncoderError(f"encoder initialization failed: {e}", cause=e) from e

        for slide_plan in plan.slides:
            self._draw_slide(prs, slide_plan)

        buf = BytesIO()
        try:
            prs.save(buf)
        except Exception as e:
            raise EncoderError(f"could not write presentation: {e}", cause=e) from e
        return buf.getvalue()

    def write(self, plan: DeckPlan, out_path: Path | str) -> Path:
        out = Path(out_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(self.encode(plan))
        return out

    def _draw_slide(self, prs: Any, slide_plan: SlidePlan) -> None:
        slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT_INDEX])
        self._draw_background(slide, slide_plan.background)
        for em in slide_plan.emissions:
            try:
                self._draw(slide, em)
            except Exception as e:
                logger.warning("slide %d: could not draw %s: %s", slide_plan.index + 1, em.op, e)

    def _draw_background(self, slide: Any, bg: Background) -> None:
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = _rgb_from_any(bg.color) or RGBColor(0xFF, 0xFF, 0xFF)
        if bg.image:
            pic = self._add_picture(slide, bg.image, Box(0.0, 0.0, SLIDE_WIDTH_IN, SLIDE_HEIGHT_IN), "stretch")
            if pic is None:
                logger.warning("background image %r not available; using theme color", bg.image)

    def _draw(self, slide: Any, em: Any) -> None:
        if isinstance(em, TextRun):
            self._draw_text(slide, em)
        elif isinstance(em, ShapeCmd):
            self._draw_shape(slide, em)
        elif isinstance(em, ImageCmd):
            self._draw_image(slide, em)
        elif isinstance(em, TableCmd):
            self._draw_table(slide, em)
        elif isinstance(em, ChartCmd):
            self._draw_chart(slide, em)
        else:
            logger.warning("unsupported emission %r", type(em).__name__)

    def _draw_text(self, slide: Any, run_spec: TextRun) -> None:
        tb = slide.shapes.add_textbox(*_geometry(run_spec.box))
        tf = tb.text_frame
        tf.word_wrap = True
        tf.vertical_anchor = _VANCHOR.get(run_spec.valign, MSO_VERTICAL_ANCHOR.MIDDLE)
        align = _ALIGN.get(run_spec.align, PP_ALIGN.LEFT)

        for i, line in enumerate(run_spec.text.split("\n")):
            para = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
            para.alignment = align
            if run_spec.para_space_pt is not None:
                para.space_before = Pt(run_spec.para_space_pt)
                para.space_after = Pt(run_spec.para_space_pt)
            run = para.add_run()
            run.text = line
            _style_run(
                run,
                size=run_spec.font_size,
                color=run_spec.color,
                bold=run_spec.bold,
                italic=run_spec.italic,
                face=run_spec.font_face,
            )

    def _draw_shape(self, slide: Any, cmd: ShapeCmd) -> None:
        st = _SHAPE_TYPES.get(cmd.shape, MSO_AUTO_SHAPE_TYPE.RECTANGLE)
        shp = slide.shapes.add_shape(st, *_geometry(cmd.box))
        _apply_shape_style(shp, cmd.fill, cmd.line_color, cmd.line_width_pt)
        if cmd.rotation:
            shp.rotation = float(cmd.rotation)

    def _draw_image(self, slide: Any, cmd: ImageCmd) -> None:
        pic = self._add_picture(slide, cmd.source, cmd.box, cmd.fit)
        if pic is not None:
            return
        logger.warning("image %r not available; drawing placeholder", cmd.source)
        for em in cmd.fallback:
            self._draw(slide, em)

    def _image_source(self, source: str) -> tuple[Path | None, bytes | None]:
        s = source.strip()
        if s.startswith("data:"):
            _, _, payload = s.partition(",")
            try:
                return None, base64.b64decode(payload)
            except Exception:
                return None, None
        if s.lower().startswith(_REMOTE_PREFIXES):
            return None, None
        p = Path(s)
        if not p.is_absolute():
            p = (self.base_dir / p).resolve()
        if not p.is_file():
            return None, None
        return p, None

    def _add_picture(self, slide: Any, source: str, box: Box, fit: str) -> Any | None:
        """Add an image into `box`; 'contain' keeps aspect ratio and centres (letterbox)."""
        img_path, blob = self._image_source(source)
        if img_path is None and blob is None:
            return None

        try:
            im = PptxImage.from_blob(blob) if blob is not None else PptxImage.from_file(str(img_path))
            iw, ih = float(im.size[0]), float(im.size[1])
            if iw <= 0 or ih <= 0:
                raise ValueError("invalid image px size")
        except Exception:
            return None

        def _add(x: float, y: float, w: float, h: float) -> Any | None:
            try:
                image_file: Any = BytesIO(blob) if blob is not None else str(img_path)
                return slide.shapes.add_picture(image_file, Inches(x), Inches(y), width=Inches(w), height=Inches(h))
            except Exception:
                return None

        if fit != "contain" or box.w <= 0 or box.h <= 0:
            return _add(box.x, box.y, max(box.w, 0.0), max(box.h, 0.0))

        scale = min(box.w / iw, box.h / ih)
        w = iw * scale
        h = ih * scale
        return _add(box.x + (box.w - w) / 2.0, box.y + (box.h - h) / 2.0, w, h)

    def _draw_table(self, slide: Any, cmd: TableCmd) -> None:
        nrows = len(cmd.rows) + 1
        ncols = len(cmd.header)
        shape = slide.shapes.add_table(nrows, ncols, *_geometry(cmd.box))
        table = shape.table
        for c, width in enumerate(cmd.col_widths[:ncols]):
            table.columns[c].width = Inches(max(width, 0.0))

        header_rgb = _rgb_from_any(cmd.header_fill)
        for r, values in enumerate((cmd.header,) + cmd.rows):
            for c, value in enumerate(values[:ncols]):
                cell = table.cell(r, c)
                if cmd.border:
                    _set_cell_border(cell, "000000")
                if r == 0 and header_rgb is not None:
                    cell.fill.solid()
                    cell.fill.fore_color.rgb = header_rgb
                tf = cell.text_frame
                tf.text = value
                for para in tf.paragraphs:
                    for run in para.runs:
                        run.font.size = Pt(cmd.font_size)
                        run.font.bold = r == 0
                        if r == 0:
                            run.font.color.rgb = RGBColor(0x33, 0x33, 0x33)

    def _draw_chart(self, slide: Any, cmd: ChartCmd) -> None:
        chart_type = _CHART_TYPES.get(cmd.chart_type, XL_CHART_TYPE.COLUMN_CLUSTERED)
        if cmd.chart_type == "scatter":
            data: Any = XyChartData()
            series = data.add_series(cmd.series_name)
            for i, v in enumerate(cmd.values, 1):
                series.add_data_point(i, v)
        elif cmd.chart_type == "bubble":
            data = BubbleChartData()
            series = data.add_series(cmd.series_name)
            for i, v in enumerate(cmd.values, 1):
                series.add_data_point(i, v, 1)
        else:
            data = CategoryChartData()
            data.categories = list(cmd.labels)
            data.add_series(cmd.series_name, list(cmd.values))

        frame = slide.shapes.add_chart(chart_type, *_geometry(cmd.box), data)
        chart = frame.chart
        if cmd.chart_type in ("pie", "doughnut"):
            chart.has_legend = True
            chart.legend.position = XL_LEGEND_POSITION.RIGHT
            chart.legend.include_in_layout = False

        colors = [c for c in (_rgb_from_any(x) for x in cmd.colors) if c is not None]
        if not colors:
            return
        try:
            plot_series = chart.plots[0].series[0]
            if cmd.chart_type in ("pie", "doughnut") and len(colors) > 1:
                for i, point in enumerate(plot_series.points):
                    point.format.fill.solid()
                    point.format.fill.fore_color.rgb = colors[i % len(colors)]
            elif cmd.chart_type in ("line", "radar", "scatter"):
                plot_series.format.line.color.rgb = colors[0]
            else:
                plot_series.format.fill.solid()
                plot_series.format.fill.fore_color.rgb = colors[0]
        except Exception as e:
            logger.debug("chart colors not applied: %s", e)
