#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Theme Module
========================================
Copyright (c) 2025 PNGN-Tec LLC

Theme Resolution System
=======================
Maps the closed set of semantic element roles (heading levels, emphasis,
links, list markers, table borders, code tokens, browser chrome) to
terminal style attributes.

Design
======
- Role: closed enum of every styled element
- StyleAttributes: frozen value (foreground, background, text flags)
- Theme: frozen value wrapping a read-only role mapping; style_for() is
  total because missing roles are filled from TEXT at construction
- Themes are built once and passed into each render; nothing here is
  mutated after import

Built-in Themes
===============
- solarized-osaka: Solarized palette tuned for dark terminals (default)
- one-dark: Atom One Dark palette
- monochrome: No colors, text attributes only

Color Utilities
===============
- rgb_to_ansi() / rgb_to_hex(): Escape and hex forms of an RGB tuple
- adjust_brightness(): Percentage brightness change with clamping
- relative_luminance() / contrast_ratio(): WCAG 2.x contrast math
- dim_style() / highlight_style(): Style derivation

Module Interface
================
- get_theme(name): Look up a built-in theme (KeyError if unknown)
- available_themes(): Sorted list of theme names
- heading_role(level): Role for a heading level (clamped to 1-6)
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

# Configure logging
logger = logging.getLogger('mdp_theme')

# Type alias for RGB colors
RGBColor = Tuple[int, int, int]

MIN_BODY_CONTRAST = 3.0


# ============================================================================
# ROLES
# ============================================================================

class Role(Enum):
    """Semantic element roles resolved by a Theme"""
    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    HEADING4 = "heading4"
    HEADING5 = "heading5"
    HEADING6 = "heading6"
    TEXT = "text"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    INLINE_CODE = "inline_code"
    LINK = "link"
    IMAGE = "image"
    QUOTE_MARKER = "quote_marker"
    LIST_MARKER = "list_marker"
    TABLE_BORDER = "table_border"
    TABLE_HEADER = "table_header"
    DELIMITER = "delimiter"
    RULE = "rule"

    # Code blocks
    CODE_BLOCK = "code_block"
    CODE_KEYWORD = "code_keyword"
    CODE_STRING = "code_string"
    CODE_COMMENT = "code_comment"
    CODE_NUMBER = "code_number"
    CODE_FUNCTION = "code_function"
    CODE_OPERATOR = "code_operator"

    # Browser chrome
    FOCUS_BORDER = "focus_border"
    BORDER = "border"
    STATUS = "status"
    STATUS_ERROR = "status_error"


HEADING_ROLES = (Role.HEADING1, Role.HEADING2, Role.HEADING3,
                 Role.HEADING4, Role.HEADING5, Role.HEADING6)


def heading_role(level: int) -> Role:
    """Role for a heading level, clamped to 1-6"""
    return HEADING_ROLES[min(max(level, 1), 6) - 1]


# ============================================================================
# STYLE ATTRIBUTES
# ============================================================================

@dataclass(frozen=True)
class StyleAttributes:
    """Resolved terminal style for one run of text"""
    color: Optional[RGBColor] = None
    background: Optional[RGBColor] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False

    def union(self, other: 'StyleAttributes') -> 'StyleAttributes':
        """Keep this style's colors and add the other style's flags"""
        return replace(
            self,
            bold=self.bold or other.bold,
            italic=self.italic or other.italic,
            underline=self.underline or other.underline,
            strikethrough=self.strikethrough or other.strikethrough,
        )

    def with_color(self, color: Optional[RGBColor]) -> 'StyleAttributes':
        return replace(self, color=color)


PLAIN = StyleAttributes()


# ============================================================================
# COLOR UTILITIES
# ============================================================================

def rgb_to_ansi(rgb: RGBColor, background: bool = False) -> str:
    """Convert RGB tuple to ANSI truecolor code"""
    r, g, b = rgb
    return f"\033[{48 if background else 38};2;{r};{g};{b}m"


def rgb_to_hex(rgb: RGBColor) -> str:
    """Convert RGB tuple to #rrggbb"""
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def hex_to_rgb(value: str) -> RGBColor:
    """Convert #rrggbb to an RGB tuple"""
    value = value.lstrip('#')
    if len(value) != 6:
        raise ValueError(f"Expected #rrggbb, got {value!r}")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


def _clamp(channel: float) -> int:
    return max(0, min(255, int(channel)))


def adjust_brightness(color: RGBColor, percent: int) -> RGBColor:
    """Scale each channel by (100 + percent)%, clamped to 0-255"""
    factor = (100 + percent) / 100
    return tuple(_clamp(channel * factor) for channel in color)


def relative_luminance(color: RGBColor) -> float:
    """WCAG relative luminance in [0, 1]"""
    def linear(channel: int) -> float:
        c = channel / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = (linear(c) for c in color)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(color1: RGBColor, color2: RGBColor) -> float:
    """WCAG contrast ratio in [1, 21]"""
    l1 = relative_luminance(color1)
    l2 = relative_luminance(color2)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def dim_style(style: StyleAttributes) -> StyleAttributes:
    """Darken the foreground by 30%"""
    if style.color is None:
        return style
    return style.with_color(adjust_brightness(style.color, -30))


def highlight_style(style: StyleAttributes) -> StyleAttributes:
    """Brighten the foreground by 20% and make it bold"""
    color = adjust_brightness(style.color, 20) if style.color is not None else None
    return replace(style, color=color, bold=True)


# ============================================================================
# THEME VALUE
# ============================================================================

@dataclass(frozen=True, eq=False)
class Theme:
    """
    Immutable role-to-style mapping.

    Missing roles are filled from the TEXT style (or PLAIN) when the theme
    is constructed, so style_for() never fails.
    """
    name: str
    styles: Mapping[Role, StyleAttributes] = field(default_factory=dict)
    code_background: Optional[RGBColor] = None

    def __post_init__(self):
        text_style = self.styles.get(Role.TEXT, PLAIN)
        complete = {role: self.styles.get(role, text_style) for role in Role}
        object.__setattr__(self, 'styles', MappingProxyType(complete))

    def style_for(self, role: Role) -> StyleAttributes:
        return self.styles[role]

    def heading_style(self, level: int) -> StyleAttributes:
        return self.styles[heading_role(level)]

    def validate(self) -> bool:
        """Log a warning when body text is hard to read on code backgrounds"""
        text = self.styles[Role.TEXT].color
        if text is None or self.code_background is None:
            return True
        ratio = contrast_ratio(text, self.code_background)
        if ratio < MIN_BODY_CONTRAST:
            logger.warning(f"Theme {self.name!r}: text contrast {ratio:.2f}:1 "
                           f"below {MIN_BODY_CONTRAST}:1")
            return False
        return True


# ============================================================================
# SOLARIZED OSAKA
# ============================================================================

class SolarizedOsaka:
    BASE02 = (7, 54, 66)
    BASE01 = (88, 110, 117)
    BASE0 = (131, 148, 150)
    YELLOW = (181, 137, 0)
    ORANGE = (203, 75, 22)
    MAGENTA = (211, 54, 130)
    BLUE = (38, 139, 210)
    CYAN = (42, 161, 152)
    GREEN = (133, 153, 0)
    RED = (220, 50, 47)


def _solarized_osaka() -> Theme:
    c = SolarizedOsaka
    headings = (c.BLUE, c.GREEN, c.CYAN, c.YELLOW, c.ORANGE, c.MAGENTA)
    styles = {
        role: StyleAttributes(color=color, bold=level <= 2)
        for level, (role, color) in enumerate(zip(HEADING_ROLES, headings), start=1)
    }
    styles.update({
        Role.TEXT: StyleAttributes(color=c.BASE0),
        Role.STRONG: StyleAttributes(color=c.ORANGE, bold=True),
        Role.EMPHASIS: StyleAttributes(color=c.GREEN, italic=True),
        Role.STRIKETHROUGH: StyleAttributes(color=c.BASE01, strikethrough=True),
        Role.INLINE_CODE: StyleAttributes(color=c.GREEN, background=c.BASE02),
        Role.LINK: StyleAttributes(color=c.CYAN, underline=True),
        Role.IMAGE: StyleAttributes(color=c.MAGENTA, italic=True),
        Role.QUOTE_MARKER: StyleAttributes(color=c.BASE01),
        Role.LIST_MARKER: StyleAttributes(color=c.BLUE),
        Role.TABLE_BORDER: StyleAttributes(color=c.BASE01),
        Role.TABLE_HEADER: StyleAttributes(color=c.BLUE, bold=True),
        Role.DELIMITER: StyleAttributes(color=c.BASE01),
        Role.RULE: StyleAttributes(color=c.BASE01),
        Role.CODE_BLOCK: StyleAttributes(color=c.GREEN),
        Role.CODE_KEYWORD: StyleAttributes(color=c.GREEN, bold=True),
        Role.CODE_STRING: StyleAttributes(color=c.CYAN),
        Role.CODE_COMMENT: StyleAttributes(color=c.BASE01, italic=True),
        Role.CODE_NUMBER: StyleAttributes(color=c.MAGENTA),
        Role.CODE_FUNCTION: StyleAttributes(color=c.BLUE),
        Role.CODE_OPERATOR: StyleAttributes(color=c.YELLOW),
        Role.FOCUS_BORDER: StyleAttributes(color=c.BLUE),
        Role.BORDER: StyleAttributes(color=c.BASE01),
        Role.STATUS: StyleAttributes(color=c.GREEN, background=c.BASE02),
        Role.STATUS_ERROR: StyleAttributes(color=c.RED, background=c.BASE02, bold=True),
    })
    return Theme("solarized-osaka", styles, code_background=c.BASE02)


# ============================================================================
# ONE DARK
# ============================================================================

class OneDark:
    FOREGROUND = hex_to_rgb("#abb2bf")
    BLUE = hex_to_rgb("#61afef")
    YELLOW = hex_to_rgb("#e5c07b")
    RED = hex_to_rgb("#e06c75")
    GREEN = hex_to_rgb("#98c379")
    PURPLE = hex_to_rgb("#c678dd")
    CYAN = hex_to_rgb("#56b6c2")
    ORANGE = hex_to_rgb("#d19a66")
    GUTTER = hex_to_rgb("#5c6370")
    BACKGROUND = hex_to_rgb("#2c313a")


def _one_dark() -> Theme:
    c = OneDark
    headings = (c.BLUE, c.YELLOW, c.RED, c.GREEN, c.PURPLE, c.CYAN)
    styles = {
        role: StyleAttributes(color=color, bold=level <= 3)
        for level, (role, color) in enumerate(zip(HEADING_ROLES, headings), start=1)
    }
    styles.update({
        Role.TEXT: StyleAttributes(color=c.FOREGROUND),
        Role.STRONG: StyleAttributes(color=c.YELLOW, bold=True),
        Role.EMPHASIS: StyleAttributes(color=c.PURPLE, italic=True),
        Role.STRIKETHROUGH: StyleAttributes(color=c.GUTTER, strikethrough=True),
        Role.INLINE_CODE: StyleAttributes(color=c.GREEN, background=c.BACKGROUND),
        Role.LINK: StyleAttributes(color=c.BLUE, underline=True),
        Role.IMAGE: StyleAttributes(color=c.CYAN, italic=True),
        Role.QUOTE_MARKER: StyleAttributes(color=c.GUTTER),
        Role.LIST_MARKER: StyleAttributes(color=c.RED),
        Role.TABLE_BORDER: StyleAttributes(color=c.GUTTER),
        Role.TABLE_HEADER: StyleAttributes(color=c.YELLOW, bold=True),
        Role.DELIMITER: StyleAttributes(color=c.GUTTER),
        Role.RULE: StyleAttributes(color=c.GUTTER),
        Role.CODE_BLOCK: StyleAttributes(color=c.FOREGROUND),
        Role.CODE_KEYWORD: StyleAttributes(color=c.PURPLE),
        Role.CODE_STRING: StyleAttributes(color=c.GREEN),
        Role.CODE_COMMENT: StyleAttributes(color=c.GUTTER, italic=True),
        Role.CODE_NUMBER: StyleAttributes(color=c.ORANGE),
        Role.CODE_FUNCTION: StyleAttributes(color=c.BLUE),
        Role.CODE_OPERATOR: StyleAttributes(color=c.CYAN),
        Role.FOCUS_BORDER: StyleAttributes(color=c.BLUE),
        Role.BORDER: StyleAttributes(color=c.GUTTER),
        Role.STATUS: StyleAttributes(color=c.GREEN, background=c.BACKGROUND),
        Role.STATUS_ERROR: StyleAttributes(color=c.RED, background=c.BACKGROUND, bold=True),
    })
    return Theme("one-dark", styles, code_background=c.BACKGROUND)


# ============================================================================
# MONOCHROME
# ============================================================================

def _monochrome() -> Theme:
    styles = {role: StyleAttributes(bold=True) for role in HEADING_ROLES}
    styles[Role.HEADING1] = StyleAttributes(bold=True, underline=True)
    styles.update({
        Role.STRONG: StyleAttributes(bold=True),
        Role.EMPHASIS: StyleAttributes(italic=True),
        Role.STRIKETHROUGH: StyleAttributes(strikethrough=True),
        Role.LINK: StyleAttributes(underline=True),
        Role.IMAGE: StyleAttributes(italic=True),
        Role.TABLE_HEADER: StyleAttributes(bold=True),
        Role.CODE_KEYWORD: StyleAttributes(bold=True),
        Role.CODE_COMMENT: StyleAttributes(italic=True),
        Role.FOCUS_BORDER: StyleAttributes(bold=True),
        Role.STATUS_ERROR: StyleAttributes(bold=True),
    })
    return Theme("monochrome", styles)


# ============================================================================
# REGISTRY
# ============================================================================

_THEMES: Mapping[str, Theme] = MappingProxyType({
    theme.name: theme for theme in (_solarized_osaka(), _one_dark(), _monochrome())
})


def get_theme(name: str) -> Theme:
    """
    Look up a built-in theme.

    Raises:
        KeyError: If no theme has this name
    """
    try:
        return _THEMES[name]
    except KeyError:
        raise KeyError(f"Unknown theme {name!r}; available: "
                       f"{', '.join(available_themes())}") from None


def available_themes() -> List[str]:
    """Sorted list of built-in theme names"""
    return sorted(_THEMES)

