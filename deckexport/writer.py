"""Render slide pages into a python-pptx presentation."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Iterable, Tuple

from PIL import Image
from pptx import Presentation
from pptx.enum.shapes import MSO_AUTO_SHAPE_TYPE
from pptx.enum.text import MSO_ANCHOR, MSO_AUTO_SIZE, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.oxml.xmlchemy import OxmlElement
from pptx.util import Inches, Pt

from .commands import SLIDE_HEIGHT_IN, SLIDE_WIDTH_IN, ImageBox, Rect, SlidePage, TextBox

PPTX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

ALIGNMENTS = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
    "justify": PP_ALIGN.JUSTIFY,
}

ANCHORS = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}

BULLET_CHAR = "•"
BULLET_HANG = Inches(0.25)


class PptxWriter:
    """Write drawing commands to a 16:9 deck."""

    def __init__(self) -> None:
        self.prs = Presentation()
        self.prs.slide_width = Inches(SLIDE_WIDTH_IN)
        self.prs.slide_height = Inches(SLIDE_HEIGHT_IN)

    def _blank_layout(self):
        try:
            return self.prs.slide_layouts[6]
        except IndexError:
            return self.prs.slide_layouts[-1]

    def render(self, pages: Iterable[SlidePage]) -> Presentation:
        handlers = {
            TextBox: self._add_text_box,
            ImageBox: self._add_image,
            Rect: self._add_rect,
        }
        for page in pages:
            slide = self.prs.slides.add_slide(self._blank_layout())
            if page.background is not None:
                fill = slide.background.fill
                fill.solid()
                fill.fore_color.rgb = page.background
            for command in page.commands:
                handlers[type(command)](slide, command)
        return self.prs

    def to_bytes(self) -> bytes:
        buffer = BytesIO()
        self.prs.save(buffer)
        return buffer.getvalue()

    def save(self, output_path: str) -> Path:
        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        self.prs.save(str(output))
        return output

    def _add_text_box(self, slide, box: TextBox) -> None:
        shape = slide.shapes.add_textbox(Inches(box.x), Inches(box.y), Inches(box.w), Inches(box.h))
        text_frame = shape.text_frame
        text_frame.word_wrap = True
        text_frame.vertical_anchor = ANCHORS.get(box.valign, MSO_ANCHOR.TOP)
        if box.auto_fit:
            text_frame.auto_size = MSO_AUTO_SIZE.TEXT_TO_FIT_SHAPE

        paragraph = text_frame.paragraphs[0]
        paragraph.alignment = ALIGNMENTS.get(box.align, PP_ALIGN.LEFT)
        if box.line_spacing:
            paragraph.line_spacing = Pt(box.line_spacing)
        if box.bullet:
            set_bullet(paragraph)

        for styled in box.runs:
            lines = styled.text.replace("\r\n", "\n").split("\n")
            for line_no, line in enumerate(lines):
                if line_no:
                    paragraph.add_line_break()
                if not line:
                    continue
                run = paragraph.add_run()
                run.text = line
                font = run.font
                font.name = styled.style.font_face
                font.size = Pt(styled.style.font_size)
                font.bold = styled.style.bold
                font.italic = styled.style.italic
                font.underline = styled.style.underline
                font.color.rgb = styled.style.color
                if styled.style.strike:
                    run._r.get_or_add_rPr().set("strike", "sngStrike")

    def _add_image(self, slide, image: ImageBox) -> None:
        if image.sizing == "cover":
            picture = slide.shapes.add_picture(
                BytesIO(image.data),
                Inches(image.x),
                Inches(image.y),
                width=Inches(image.w),
                height=Inches(image.h),
            )
            left, top, right, bottom = compute_cover_crop(image.data, image.w, image.h)
            picture.crop_left = left
            picture.crop_top = top
            picture.crop_right = right
            picture.crop_bottom = bottom
            return

        x, y, w, h = compute_contain_geometry(image.data, image.x, image.y, image.w, image.h)
        slide.shapes.add_picture(BytesIO(image.data), Inches(x), Inches(y), width=Inches(w), height=Inches(h))

    def _add_rect(self, slide, rect: Rect) -> None:
        shape = slide.shapes.add_shape(
            MSO_AUTO_SHAPE_TYPE.RECTANGLE,
            Inches(rect.x),
            Inches(rect.y),
            Inches(rect.w),
            Inches(rect.h),
        )
        shape.fill.solid()
        shape.fill.fore_color.rgb = rect.fill
        shape.line.fill.background()
        if rect.transparency > 0:
            set_fill_alpha(shape, 1.0 - rect.transparency)


def _image_size(data: bytes) -> Tuple[int, int]:
    with Image.open(BytesIO(data)) as im:
        return im.size


def compute_contain_geometry(data: bytes, x: float, y: float, w: float, h: float) -> Tuple[float, float, float, float]:
    """Fit the image inside the box, preserving aspect ratio and centering it."""
    try:
        iw, ih = _image_size(data)
    except Exception:
        return x, y, w, h
    if w <= 0 or h <= 0 or iw <= 0 or ih <= 0:
        return x, y, w, h

    ratio = iw / ih
    if ratio >= w / h:
        out_w, out_h = w, w / ratio
    else:
        out_w, out_h = h * ratio, h
    return x + (w - out_w) / 2, y + (h - out_h) / 2, out_w, out_h


def compute_cover_crop(data: bytes, w: float, h: float) -> Tuple[float, float, float, float]:
    """Crop fractions (left, top, right, bottom) that make the image fill the box."""
    try:
        iw, ih = _image_size(data)
    except Exception:
        return 0.0, 0.0, 0.0, 0.0
    if w <= 0 or h <= 0 or iw <= 0 or ih <= 0:
        return 0.0, 0.0, 0.0, 0.0

    img_ratio = iw / ih
    box_ratio = w / h
    if img_ratio > box_ratio:
        frac = 1.0 - box_ratio / img_ratio
        return frac / 2, 0.0, frac / 2, 0.0
    frac = 1.0 - img_ratio / box_ratio
    return 0.0, frac / 2, 0.0, frac / 2


def set_fill_alpha(shape, alpha: float) -> None:
    """Set the opacity (0..1) of a shape's solid fill through DrawingML."""
    solid = shape._element.spPr.find(qn("a:solidFill"))
    if solid is None:
        return
    clr = solid.find(qn("a:srgbClr"))
    if clr is None:
        return
    for tag in ("a:alpha", "a:alphaMod", "a:alphaOff"):
        existing = clr.find(qn(tag))
        if existing is not None:
            clr.remove(existing)
    alpha_el = OxmlElement("a:alpha")
    alpha_el.set("val", str(int(round(max(0.0, min(alpha, 1.0)) * 100000))))
    clr.append(alpha_el)


def set_bullet(paragraph, char: str = BULLET_CHAR) -> None:
    """Give a paragraph a native ``a:buChar`` bullet with a hanging indent."""
    pPr = paragraph._p.get_or_add_pPr()
    for child in list(pPr):
        if child.tag in (qn("a:buNone"), qn("a:buAutoNum"), qn("a:buChar"), qn("a:buFont")):
            pPr.remove(child)
    pPr.set("marL", str(int(BULLET_HANG)))
    pPr.set("indent", str(-int(BULLET_HANG)))
    bu_font = OxmlElement("a:buFont")
    bu_font.set("typeface", "Arial")
    pPr.append(bu_font)
    bu_char = OxmlElement("a:buChar")
    bu_char.set("char", char)
    pPr.append(bu_char)
