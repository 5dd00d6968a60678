"""Block layout: place content nodes into a content area.

``LayoutEngine.place`` takes a node, the area it may use and the current
vertical cursor, appends drawing commands to the slide page and returns the
new cursor. Heights are estimated from hard line breaks and font size rather
than measured, so long wrapped text can overflow its box.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Optional, Protocol

from .commands import ImageBox, SlidePage, TextBox
from .images import FetchedImage
from .model import ContentArea, ContentNode, NodeType, StyledRun
from .rich_text import extract_runs, has_visible_text, runs_text
from .styles import resolve_style
from .themes import ResolvedTheme

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72.0
LINE_HEIGHT = 1.5
MIN_BLOCK_HEIGHT = 0.5
BLOCK_GAP = 0.1
BULLET_GAP = 0.05
BULLET_INDENT = 0.25
IMAGE_HEIGHT = 2.0
IMAGE_GAP = 0.2
COLUMN_GAP = 0.2
CHART_HEIGHT = 1.5

IMAGE_NOT_FOUND = "[Image not found]"


class ImageSource(Protocol):
    def get(self, ref: str) -> Optional[FetchedImage]: ...


def estimate_height(text: str, font_size: float) -> float:
    """Lower-bound height in inches for ``text`` at ``font_size`` points."""
    line_count = text.count("\n") + 1
    estimated = line_count * font_size * LINE_HEIGHT / POINTS_PER_INCH
    return max(estimated, MIN_BLOCK_HEIGHT)


def column_areas(area: ContentArea, count: int, gap: float = COLUMN_GAP) -> list[ContentArea]:
    if count <= 0:
        return []
    col_w = (area.w - (count - 1) * gap) / count
    return [replace(area, x=area.x + idx * (col_w + gap), w=col_w) for idx in range(count)]


class LayoutEngine:
    """Recursive vertical-flow layout for one slide."""

    def __init__(self, theme: ResolvedTheme, page: SlidePage, images: Optional[ImageSource] = None):
        self.theme = theme
        self.page = page
        self.images = images
        self._handlers: Dict[NodeType, Callable[[ContentNode, ContentArea, float], float]] = {
            NodeType.H1: self._place_text,
            NodeType.H2: self._place_text,
            NodeType.H3: self._place_text,
            NodeType.H4: self._place_text,
            NodeType.H5: self._place_text,
            NodeType.H6: self._place_text,
            NodeType.PARAGRAPH: self._place_text,
            NodeType.BULLET: self._place_bullet,
            NodeType.BULLETS: self._place_sequence,
            NodeType.COLUMN_ITEM: self._place_sequence,
            NodeType.COLUMN: self._place_columns,
            NodeType.IMAGE: self._place_image,
            NodeType.CHART: self._place_chart,
        }

    def place(self, node: ContentNode, area: ContentArea, y: float) -> float:
        handler = self._handlers.get(node.type) if node.type is not None else None
        if handler is None:
            logger.debug("Skipping unsupported node type %r", node.raw_type)
            return y
        return handler(node, area, y)

    def place_all(self, nodes, area: ContentArea, y: float) -> float:
        for node in nodes:
            y = self.place(node, area, y)
        return y

    def _text_runs(self, node: ContentNode) -> tuple[list[StyledRun], float]:
        style = resolve_style(node.type, self.theme)
        return extract_runs(node, style), style.font_size

    def _place_text(self, node: ContentNode, area: ContentArea, y: float) -> float:
        runs, font_size = self._text_runs(node)
        if not has_visible_text(runs):
            return y

        height = estimate_height(runs_text(runs), font_size)
        style = runs[0].style
        self.page.add(
            TextBox(
                x=area.x,
                y=y,
                w=area.w,
                h=height,
                runs=tuple(runs),
                align="center" if node.type.is_heading else "left",
                valign=style.valign,
                line_spacing=style.line_spacing,
            )
        )
        return y + height + BLOCK_GAP

    def _place_bullet(self, node: ContentNode, area: ContentArea, y: float) -> float:
        runs, font_size = self._text_runs(node)
        if not has_visible_text(runs):
            return y

        height = estimate_height(runs_text(runs), font_size)
        self.page.add(
            TextBox(
                x=area.x + BULLET_INDENT,
                y=y,
                w=area.w - BULLET_INDENT,
                h=height,
                runs=tuple(runs),
                align="left",
                bullet=True,
            )
        )
        return y + height + BULLET_GAP

    def _place_sequence(self, node: ContentNode, area: ContentArea, y: float) -> float:
        return self.place_all(node.children, area, y)

    def _place_columns(self, node: ContentNode, area: ContentArea, y: float) -> float:
        columns = [child for child in node.children if child.type is NodeType.COLUMN_ITEM]
        if not columns:
            return y

        emitted = len(self.page.commands)
        max_y = y
        for column, col_area in zip(columns, column_areas(area, len(columns))):
            col_y = self.place_all(column.children, col_area, y)
            max_y = max(max_y, col_y)
        if len(self.page.commands) == emitted:
            return y
        return max_y + COLUMN_GAP

    def _place_image(self, node: ContentNode, area: ContentArea, y: float) -> float:
        if not node.url:
            return y

        image = self.images.get(node.url) if self.images is not None else None
        if image is None:
            self.page.add(self.placeholder(area.x, y, area.w, IMAGE_HEIGHT, IMAGE_NOT_FOUND))
        else:
            self.page.add(
                ImageBox(
                    x=area.x,
                    y=y,
                    w=area.w,
                    h=IMAGE_HEIGHT,
                    data=image.data,
                    content_type=image.content_type,
                    sizing="contain",
                    source=node.url,
                )
            )
        return y + IMAGE_HEIGHT + IMAGE_GAP

    def _place_chart(self, node: ContentNode, area: ContentArea, y: float) -> float:
        label = f"[Chart: {node.chart_type}]" if node.chart_type else "[Chart]"
        self.page.add(self.placeholder(area.x, y, area.w, CHART_HEIGHT, label))
        return y + CHART_HEIGHT + BLOCK_GAP

    def placeholder(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        label: str,
    ) -> TextBox:
        style = replace(resolve_style(NodeType.CHART, self.theme), italic=True)
        return TextBox(
            x=x,
            y=y,
            w=w,
            h=h,
            runs=(StyledRun(text=label, style=style),),
            align="center",
            valign="middle",
            auto_fit=False,
        )
