"""Absolute-positioned drawing commands produced by layout.

Coordinates and sizes are inches on the slide canvas. Commands are painted
in list order, so later commands cover earlier ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple, Union

from pptx.dml.color import RGBColor

from .model import ContentArea, StyledRun

SLIDE_WIDTH_IN = 10.0
SLIDE_HEIGHT_IN = 5.625


@dataclass(frozen=True)
class TextBox:
    x: float
    y: float
    w: float
    h: float
    runs: Tuple[StyledRun, ...]
    align: str = "left"
    valign: str = "top"
    bullet: bool = False
    line_spacing: Optional[float] = None
    auto_fit: bool = True


@dataclass(frozen=True)
class ImageBox:
    x: float
    y: float
    w: float
    h: float
    data: bytes
    content_type: str = ""
    sizing: str = "contain"  # contain | cover
    source: str = ""


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float
    fill: RGBColor
    transparency: float = 0.0  # 0..1, 1 = invisible


DrawingCommand = Union[TextBox, ImageBox, Rect]


@dataclass
class SlidePage:
    """Drawing commands and background of one output slide."""

    slide_id: str
    background: Optional[RGBColor] = None
    commands: List[DrawingCommand] = field(default_factory=list)
    content_area: Optional[ContentArea] = None

    def add(self, command: DrawingCommand) -> None:
        self.commands.append(command)

    def text_boxes(self) -> List[TextBox]:
        return [c for c in self.commands if isinstance(c, TextBox)]

    def images(self) -> List[ImageBox]:
        return [c for c in self.commands if isinstance(c, ImageBox)]

    def shift(self, start: int, dy: float) -> None:
        """Move every command from index ``start`` on down by ``dy`` inches."""
        for idx in range(start, len(self.commands)):
            self.commands[idx] = replace(self.commands[idx], y=self.commands[idx].y + dy)
