"""Mapping from content node types to concrete text styles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .model import NodeType, TextStyle
from .themes import ResolvedTheme


@dataclass(frozen=True)
class StyleSpec:
    font_size: float
    bold: bool = False
    role: str = "body"  # heading | body | muted
    align: str = "left"
    line_spacing: Optional[float] = None
    bullet: bool = False


BASE_STYLE = StyleSpec(font_size=16)

NODE_STYLES: Dict[NodeType, StyleSpec] = {
    NodeType.H1: StyleSpec(font_size=36, bold=True, role="heading", align="center"),
    NodeType.H2: StyleSpec(font_size=28, bold=True, role="heading", align="center"),
    NodeType.H3: StyleSpec(font_size=24, bold=True, role="heading", align="center"),
    NodeType.H4: StyleSpec(font_size=20, bold=True, role="heading", align="center"),
    NodeType.H5: StyleSpec(font_size=18, bold=True, role="heading", align="center"),
    NodeType.H6: StyleSpec(font_size=16, bold=True, role="heading", align="center"),
    NodeType.PARAGRAPH: StyleSpec(font_size=18, line_spacing=28),
    NodeType.BULLET: StyleSpec(font_size=16, bullet=True),
    NodeType.CHART: StyleSpec(font_size=14, role="muted", align="center"),
}


def style_spec_for(node_type: Optional[NodeType]) -> StyleSpec:
    if node_type is None:
        return BASE_STYLE
    return NODE_STYLES.get(node_type, BASE_STYLE)


def resolve_style(node_type: Optional[NodeType], theme: ResolvedTheme) -> TextStyle:
    spec = style_spec_for(node_type)
    if spec.role == "heading":
        color = theme.rgb("heading")
        font_face = theme.fonts.heading
    elif spec.role == "muted":
        color = theme.rgb("muted")
        font_face = theme.fonts.body
    else:
        color = theme.rgb("text")
        font_face = theme.fonts.body

    return TextStyle(
        color=color,
        font_face=font_face,
        font_size=spec.font_size,
        bold=spec.bold,
        align=spec.align,
        valign="top",
        line_spacing=spec.line_spacing,
        bullet=spec.bullet,
    )
