"""Read display names from font files."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
import logging
import struct

from fontTools.ttLib import TTFont, TTLibError

from gladest.core.exceptions import FontParseError


logger = logging.getLogger(__name__)

FAMILY_NAME_ID = 1
SUBFAMILY_NAME_ID = 2
FULL_NAME_ID = 4
POSTSCRIPT_NAME_ID = 6
TYPOGRAPHIC_FAMILY_NAME_ID = 16
TYPOGRAPHIC_SUBFAMILY_NAME_ID = 17


@dataclass(frozen=True, slots=True)
class FontNames:
    """Names extracted from a font's ``name`` table.

    ``family_name`` and ``subfamily_name`` hold the resolved values: the
    typographic names when the font declares them, the legacy ones otherwise.
    """

    family_name: str | None = None
    subfamily_name: str | None = None
    full_name: str | None = None
    postscript_name: str | None = None
    typographic_family_name: str | None = None
    typographic_subfamily_name: str | None = None


def read_font_names(font_data: bytes, font_index: int = 0) -> FontNames:
    """Parse ``font_data`` and return its naming information.

    OpenType, TrueType, WOFF/WOFF2 and collections are supported; the
    ``font_index`` selects the face inside a collection and is ignored for
    single-face containers.
    """
    try:
        font = TTFont(BytesIO(font_data), fontNumber=font_index, lazy=True)
    except (TTLibError, OSError, ValueError, AssertionError, struct.error) as exc:
        raise FontParseError(f"Unable to parse font data: {exc}") from exc

    try:
        if "name" not in font:
            raise FontParseError("Font has no 'name' table")
        table = font["name"]

        def _lookup(name_id: int) -> str | None:
            value = table.getDebugName(name_id)
            return value.strip() if value and value.strip() else None

        typographic_family = _lookup(TYPOGRAPHIC_FAMILY_NAME_ID)
        typographic_subfamily = _lookup(TYPOGRAPHIC_SUBFAMILY_NAME_ID)
        return FontNames(
            family_name=typographic_family or _lookup(FAMILY_NAME_ID),
            subfamily_name=typographic_subfamily or _lookup(SUBFAMILY_NAME_ID),
            full_name=_lookup(FULL_NAME_ID),
            postscript_name=_lookup(POSTSCRIPT_NAME_ID),
            typographic_family_name=typographic_family,
            typographic_subfamily_name=typographic_subfamily,
        )
    except (TTLibError, KeyError, ValueError, struct.error) as exc:
        raise FontParseError(f"Unable to read font names: {exc}") from exc
    finally:
        font.close()


def resolve_family_name(font_data: bytes, font_index: int = 0) -> str:
    """Return the family name used to reference the font from a style template."""
    names = read_font_names(font_data, font_index)
    family = names.family_name or names.full_name or names.postscript_name
    if not family:
        raise FontParseError("Font declares no family, full, or PostScript name")
    logger.debug("Resolved font family %r (style %r)", family, names.subfamily_name)
    return family


__all__ = ["FontNames", "read_font_names", "resolve_family_name"]
