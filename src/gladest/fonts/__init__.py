"""Font sources and font metadata helpers."""

from __future__ import annotations

from .names import FontNames, read_font_names, resolve_family_name
from .sources import (
    DEFAULT_BODY_FONT,
    DEFAULT_MATH_FONT,
    FileFont,
    FontSource,
    InlineFont,
    StyleConfig,
    SystemFont,
    expand_home,
    font_file,
)


__all__ = [
    "DEFAULT_BODY_FONT",
    "DEFAULT_MATH_FONT",
    "FileFont",
    "FontNames",
    "FontSource",
    "InlineFont",
    "StyleConfig",
    "SystemFont",
    "expand_home",
    "font_file",
    "read_font_names",
    "resolve_family_name",
]
