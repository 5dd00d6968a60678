"""In-memory representation of the slide document and layout primitives."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pptx.dml.color import RGBColor


class NodeType(str, Enum):
    """Closed set of content node types the layout engine understands."""

    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    H4 = "h4"
    H5 = "h5"
    H6 = "h6"
    PARAGRAPH = "p"
    BULLETS = "bullets"
    BULLET = "bullet"
    IMAGE = "img"
    COLUMN = "column"
    COLUMN_ITEM = "column_item"
    CHART = "chart"

    @classmethod
    def parse(cls, value: Any) -> Optional["NodeType"]:
        try:
            return cls(str(value or "").strip())
        except ValueError:
            return None

    @property
    def is_heading(self) -> bool:
        return self.value in {"h1", "h2", "h3", "h4", "h5", "h6"}


class LayoutType(str, Enum):
    """Placement of a slide's root image."""

    NONE = "none"
    LEFT = "left"
    RIGHT = "right"
    VERTICAL = "vertical"

    @classmethod
    def parse(cls, value: Any) -> "LayoutType":
        try:
            return cls(str(value or "none").strip().lower())
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class ContentNode:
    """One element of a slide's content tree."""

    type: Optional[NodeType]
    raw_type: str = ""
    children: Tuple["ContentNode", ...] = ()
    text: Optional[str] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    url: Optional[str] = None
    chart_type: Optional[str] = None

    @property
    def is_leaf(self) -> bool:
        return self.text is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentNode":
        raw_type = str(data.get("type") or "")
        text = data.get("text")
        children: Tuple[ContentNode, ...] = ()
        # Leaves carry text; their children, if any, are never traversed.
        if not isinstance(text, str):
            text = None
            raw_children = data.get("children")
            if isinstance(raw_children, list):
                children = tuple(cls.from_dict(child) for child in raw_children if isinstance(child, dict))

        url = data.get("url")
        chart_type = data.get("chartType") or data.get("chart_type")
        return cls(
            type=NodeType.parse(raw_type),
            raw_type=raw_type,
            children=children,
            text=text,
            bold=bool(data.get("bold")),
            italic=bool(data.get("italic")),
            underline=bool(data.get("underline")),
            strikethrough=bool(data.get("strikethrough")),
            url=url if isinstance(url, str) and url.strip() else None,
            chart_type=str(chart_type) if chart_type else None,
        )


@dataclass(frozen=True)
class RootImage:
    url: Optional[str] = None
    query: str = ""


@dataclass(frozen=True)
class Slide:
    """One page of the input presentation."""

    id: str
    content: Tuple[ContentNode, ...] = ()
    root_image: Optional[RootImage] = None
    layout_type: LayoutType = LayoutType.NONE
    alignment: Optional[str] = None
    bg_color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "Slide":
        content = data.get("content") or []
        root_image = None
        raw_image = data.get("rootImage")
        if isinstance(raw_image, dict):
            url = raw_image.get("url")
            root_image = RootImage(
                url=url if isinstance(url, str) and url.strip() else None,
                query=str(raw_image.get("query") or ""),
            )
        alignment = data.get("alignment")
        if isinstance(alignment, str):
            alignment = alignment.strip().lower()
        bg_color = data.get("bgColor")
        return cls(
            id=str(data.get("id") or f"slide-{index + 1}"),
            content=tuple(ContentNode.from_dict(node) for node in content if isinstance(node, dict)),
            root_image=root_image,
            layout_type=LayoutType.parse(data.get("layoutType")),
            alignment=alignment if alignment in {"start", "center", "end"} else None,
            bg_color=bg_color if isinstance(bg_color, str) and bg_color.strip() else None,
        )


@dataclass(frozen=True)
class Document:
    """A presentation ready for export."""

    title: str
    theme: Any = None
    slides: Tuple[Slide, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        slides = data.get("slides") or []
        return cls(
            title=str(data.get("title") or "").strip(),
            theme=data.get("theme"),
            slides=tuple(Slide.from_dict(slide, idx) for idx, slide in enumerate(slides) if isinstance(slide, dict)),
        )


@dataclass(frozen=True)
class ContentArea:
    """Axis-aligned rectangle in inches on the slide canvas."""

    x: float
    y: float
    w: float
    h: float

    @property
    def bottom(self) -> float:
        return self.y + self.h


@dataclass(frozen=True)
class TextStyle:
    """Concrete text formatting for one text box or run."""

    color: RGBColor
    font_face: str
    font_size: float
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    align: str = "left"
    valign: str = "top"
    line_spacing: Optional[float] = None
    bullet: bool = False


@dataclass(frozen=True)
class StyledRun:
    text: str
    style: TextStyle


@dataclass
class DocumentRecord:
    """A persisted presentation as returned by a document store."""

    id: str
    title: str = ""
    theme: Any = None
    content: Dict[str, Any] = field(default_factory=dict)

    def to_document_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "theme": self.theme, "slides": self.content.get("slides")}
