"""Compose one output slide: background, root image, overlay and content."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from pptx.dml.color import RGBColor

from .commands import SLIDE_HEIGHT_IN, SLIDE_WIDTH_IN, ImageBox, Rect, SlidePage
from .images import ImageFetcher, SlideImages
from .layout import IMAGE_NOT_FOUND, LayoutEngine
from .model import ContentArea, LayoutType, Slide
from .themes import ResolvedTheme, Theme, parse_hex_color

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_AREA = ContentArea(x=0.5, y=0.5, w=9.0, h=4.625)
VERTICAL_IMAGE_FRACTION = 0.5
OVERLAY_COLOR = RGBColor(0, 0, 0)
OVERLAY_TRANSPARENCY = 0.3

# layout type -> (image region, content region)
IMAGE_LAYOUTS = {
    LayoutType.LEFT: (
        ContentArea(0.0, 0.0, SLIDE_WIDTH_IN / 2, SLIDE_HEIGHT_IN),
        ContentArea(x=5.25, y=0.5, w=4.5, h=4.625),
    ),
    LayoutType.RIGHT: (
        ContentArea(SLIDE_WIDTH_IN / 2, 0.0, SLIDE_WIDTH_IN / 2, SLIDE_HEIGHT_IN),
        ContentArea(x=0.25, y=0.5, w=4.5, h=4.625),
    ),
    LayoutType.VERTICAL: (
        ContentArea(0.0, 0.0, SLIDE_WIDTH_IN, SLIDE_HEIGHT_IN * VERTICAL_IMAGE_FRACTION),
        ContentArea(x=0.5, y=3.0, w=9.0, h=2.125),
    ),
}
FULL_BLEED = ContentArea(0.0, 0.0, SLIDE_WIDTH_IN, SLIDE_HEIGHT_IN)


class SlideComposer:
    """Build a ``SlidePage`` for each input slide from a deck-level theme."""

    def __init__(self, theme: Theme, *, fetcher: Optional[ImageFetcher] = None, dark_mode: bool = False):
        self.theme = theme
        self.fetcher = fetcher or ImageFetcher()
        self.dark_mode = dark_mode

    def slide_theme(self, slide: Slide) -> Tuple[ResolvedTheme, RGBColor]:
        """Resolve the per-slide theme copy and the slide's background color."""
        theme = self.theme.for_mode(self.dark_mode)
        background = theme.rgb("background")
        if not slide.bg_color:
            return theme, background

        override = parse_hex_color(slide.bg_color)
        if override is None:
            logger.warning("Slide %s: ignoring unparseable background color %r", slide.id, slide.bg_color)
            return theme, background
        # Palette backgrounds keep the palette's own text colors.
        return theme.for_background(override), override

    def compose(self, slide: Slide) -> SlidePage:
        theme, background = self.slide_theme(slide)
        page = SlidePage(slide_id=slide.id, background=background)
        images = SlideImages(self.fetcher)

        area = DEFAULT_CONTENT_AREA
        if slide.root_image and slide.root_image.url:
            area, theme = self._place_root_image(slide, page, images, theme)
        page.content_area = area

        engine = LayoutEngine(theme, page, images)
        first = len(page.commands)
        end_y = engine.place_all(slide.content, area, area.y)
        self._align(slide, page, first, area, end_y)
        logger.debug("Slide %s: %d commands", slide.id, len(page.commands))
        return page

    def _place_root_image(
        self,
        slide: Slide,
        page: SlidePage,
        images: SlideImages,
        theme: ResolvedTheme,
    ) -> Tuple[ContentArea, ResolvedTheme]:
        url = slide.root_image.url
        image_region, area = IMAGE_LAYOUTS.get(slide.layout_type, (FULL_BLEED, DEFAULT_CONTENT_AREA))
        image = images.get(url)

        if image is None:
            engine = LayoutEngine(theme, page)
            page.add(engine.placeholder(image_region.x, image_region.y, image_region.w, image_region.h, IMAGE_NOT_FOUND))
            return area, theme

        page.add(
            ImageBox(
                x=image_region.x,
                y=image_region.y,
                w=image_region.w,
                h=image_region.h,
                data=image.data,
                content_type=image.content_type,
                sizing="cover",
                source=url,
            )
        )
        if slide.layout_type not in IMAGE_LAYOUTS:
            page.add(Rect(0.0, 0.0, SLIDE_WIDTH_IN, SLIDE_HEIGHT_IN, fill=OVERLAY_COLOR, transparency=OVERLAY_TRANSPARENCY))
            theme = theme.with_light_text()
        return area, theme

    def _align(self, slide: Slide, page: SlidePage, first: int, area: ContentArea, end_y: float) -> None:
        if slide.alignment not in {"center", "end"}:
            return
        free = area.bottom - end_y
        if free <= 0:
            return
        page.shift(first, free / 2 if slide.alignment == "center" else free)
