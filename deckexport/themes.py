"""Theme registry and resolution.

A theme reference coming from a document can be a registered theme name, an
inline ``{"colors": ..., "fonts": ...}`` mapping, or an already resolved
``{"name": ..., "properties": ...}`` pair. Resolution returns frozen objects;
per-slide adaptations (appearance mode, dark backgrounds, image overlays)
always build a new ``ResolvedTheme`` and never touch the registry.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from pptx.dml.color import RGBColor

logger = logging.getLogger(__name__)

DEFAULT_THEME_NAME = "daktilo"

LIGHT_TEXT = "#FFFFFF"
LIGHT_MUTED = "#E5E7EB"
DARK_LUMINANCE_THRESHOLD = 0.5


@dataclass(frozen=True)
class ThemeColors:
    background: str
    text: str
    heading: str
    muted: str
    primary: str
    secondary: str
    accent: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], fallback: "ThemeColors") -> "ThemeColors":
        values: Dict[str, str] = {}
        for f in fields(cls):
            raw = data.get(f.name)
            values[f.name] = raw if isinstance(raw, str) and parse_hex_color(raw) is not None else getattr(fallback, f.name)
        return cls(**values)


@dataclass(frozen=True)
class ThemeFonts:
    heading: str
    body: str


@dataclass(frozen=True)
class ThemeProperties:
    light: ThemeColors
    dark: ThemeColors
    fonts: ThemeFonts

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Optional["ThemeProperties"]:
        """Build properties from an inline mapping, or None when it is not one."""
        colors = data.get("colors")
        fonts = data.get("fonts")
        if not isinstance(colors, Mapping) or not isinstance(fonts, Mapping):
            return None
        light_raw = colors.get("light")
        if not isinstance(light_raw, Mapping):
            return None

        base = THEMES[DEFAULT_THEME_NAME]
        light = ThemeColors.from_dict(light_raw, base.light)
        dark_raw = colors.get("dark")
        dark = ThemeColors.from_dict(dark_raw, base.dark) if isinstance(dark_raw, Mapping) else light

        heading_font = fonts.get("heading")
        body_font = fonts.get("body")
        return cls(
            light=light,
            dark=dark,
            fonts=ThemeFonts(
                heading=str(heading_font) if heading_font else base.fonts.heading,
                body=str(body_font) if body_font else base.fonts.body,
            ),
        )


@dataclass(frozen=True)
class Theme:
    name: str
    properties: ThemeProperties

    def for_mode(self, is_dark: bool = False) -> "ResolvedTheme":
        palette = self.properties.dark if is_dark else self.properties.light
        return ResolvedTheme(name=self.name, colors=palette, fonts=self.properties.fonts)


@dataclass(frozen=True)
class ResolvedTheme:
    """Concrete palette and fonts used while laying out one slide."""

    name: str
    colors: ThemeColors
    fonts: ThemeFonts

    def rgb(self, role: str) -> RGBColor:
        value = getattr(self.colors, role)
        return parse_hex_color(value) or RGBColor(0, 0, 0)

    def with_light_text(self) -> "ResolvedTheme":
        colors = replace(self.colors, text=LIGHT_TEXT, heading=LIGHT_TEXT)
        return replace(self, colors=colors)

    def for_background(self, color: Any) -> "ResolvedTheme":
        """Return a copy with light text when ``color`` is a dark background."""
        rgb = parse_hex_color(color)
        if rgb is None or relative_luminance(rgb) >= DARK_LUMINANCE_THRESHOLD:
            return self
        colors = replace(self.colors, text=LIGHT_TEXT, heading=LIGHT_TEXT, muted=LIGHT_MUTED)
        return replace(self, colors=colors)


def parse_hex_color(value: Any) -> Optional[RGBColor]:
    if isinstance(value, RGBColor):
        return value
    if value is None:
        return None
    raw = str(value).strip()
    if raw.startswith("#"):
        raw = raw[1:]
    if re.fullmatch(r"[0-9A-Fa-f]{3}", raw):
        raw = "".join(ch * 2 for ch in raw)
    if re.fullmatch(r"[0-9A-Fa-f]{6}", raw):
        return RGBColor(int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16))
    return None


def relative_luminance(color: Any) -> float:
    """Perceptual luminance in [0, 1]; unparseable colors count as white."""
    rgb = parse_hex_color(color)
    if rgb is None:
        return 1.0
    r, g, b = rgb
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def _props(light: Dict[str, str], dark: Dict[str, str], heading: str, body: str) -> ThemeProperties:
    return ThemeProperties(light=ThemeColors(**light), dark=ThemeColors(**dark), fonts=ThemeFonts(heading, body))


THEMES: Dict[str, ThemeProperties] = {
    "daktilo": _props(
        {
            "background": "#FFFFFF",
            "text": "#1F2937",
            "heading": "#111827",
            "muted": "#6B7280",
            "primary": "#3B82F6",
            "secondary": "#10B981",
            "accent": "#F59E0B",
        },
        {
            "background": "#111827",
            "text": "#E5E7EB",
            "heading": "#F9FAFB",
            "muted": "#9CA3AF",
            "primary": "#60A5FA",
            "secondary": "#34D399",
            "accent": "#FBBF24",
        },
        heading="Inter",
        body="Inter",
    ),
    "cornflower": _props(
        {
            "background": "#F5F8FF",
            "text": "#1E293B",
            "heading": "#1E3A8A",
            "muted": "#64748B",
            "primary": "#6495ED",
            "secondary": "#4F46E5",
            "accent": "#F472B6",
        },
        {
            "background": "#0F172A",
            "text": "#CBD5E1",
            "heading": "#BFDBFE",
            "muted": "#94A3B8",
            "primary": "#93C5FD",
            "secondary": "#818CF8",
            "accent": "#F9A8D4",
        },
        heading="Poppins",
        body="Open Sans",
    ),
    "orbit": _props(
        {
            "background": "#FAFAF9",
            "text": "#292524",
            "heading": "#7C2D12",
            "muted": "#78716C",
            "primary": "#EA580C",
            "secondary": "#0D9488",
            "accent": "#CA8A04",
        },
        {
            "background": "#1C1917",
            "text": "#E7E5E4",
            "heading": "#FDBA74",
            "muted": "#A8A29E",
            "primary": "#FB923C",
            "secondary": "#2DD4BF",
            "accent": "#FACC15",
        },
        heading="Montserrat",
        body="Lato",
    ),
    "piano": _props(
        {
            "background": "#FFFFFF",
            "text": "#171717",
            "heading": "#000000",
            "muted": "#737373",
            "primary": "#262626",
            "secondary": "#525252",
            "accent": "#DC2626",
        },
        {
            "background": "#0A0A0A",
            "text": "#E5E5E5",
            "heading": "#FFFFFF",
            "muted": "#A3A3A3",
            "primary": "#F5F5F5",
            "secondary": "#D4D4D4",
            "accent": "#F87171",
        },
        heading="Playfair Display",
        body="Source Sans Pro",
    ),
    "mystique": _props(
        {
            "background": "#FAF5FF",
            "text": "#3B0764",
            "heading": "#581C87",
            "muted": "#7E22CE",
            "primary": "#9333EA",
            "secondary": "#DB2777",
            "accent": "#0EA5E9",
        },
        {
            "background": "#1E1B2E",
            "text": "#E9D5FF",
            "heading": "#F3E8FF",
            "muted": "#C4B5FD",
            "primary": "#C084FC",
            "secondary": "#F472B6",
            "accent": "#38BDF8",
        },
        heading="Raleway",
        body="Nunito",
    ),
}


def default_theme() -> Theme:
    return Theme(name=DEFAULT_THEME_NAME, properties=THEMES[DEFAULT_THEME_NAME])


def resolve_theme(theme_ref: Any) -> Optional[Theme]:
    """Resolve a theme name, inline properties or resolved pair; None if unusable."""
    if isinstance(theme_ref, Theme):
        return theme_ref
    if isinstance(theme_ref, ThemeProperties):
        return Theme(name="Custom", properties=theme_ref)

    if isinstance(theme_ref, Mapping):
        if "name" in theme_ref and "properties" in theme_ref:
            raw_props = theme_ref.get("properties")
            props = ThemeProperties.from_dict(raw_props) if isinstance(raw_props, Mapping) else None
            if props is None:
                logger.warning("Ignoring theme %r: properties are not a palette/fonts object", theme_ref.get("name"))
                return None
            return Theme(name=str(theme_ref.get("name") or "Custom"), properties=props)
        props = ThemeProperties.from_dict(theme_ref)
        if props is None:
            logger.warning("Ignoring inline theme without colors.light and fonts")
            return None
        return Theme(name="Custom", properties=props)

    if isinstance(theme_ref, str) and theme_ref.strip():
        name = theme_ref.strip()
        if name in THEMES:
            return Theme(name=name, properties=THEMES[name])
        logger.warning("Unknown theme %r", name)

    return None
