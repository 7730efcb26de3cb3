"""Font sources and the style configuration used to key compiled engines."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Union

from gladest.core.exceptions import ConfigurationError, FontParseError

from .names import resolve_family_name


DEFAULT_BODY_FONT = "New Computer Modern"
DEFAULT_MATH_FONT = "New Computer Modern Math"


def expand_home(path: str | Path) -> Path:
    """Expand a leading ``~`` to the user's home directory."""
    return Path(os.path.expanduser(str(path)))


@dataclass(frozen=True, slots=True)
class SystemFont:
    """Font looked up by family name among the fonts installed on the system."""

    name: str

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class FileFont:
    """Font read from a file on disk.

    ``family`` is filled in by :func:`font_file`, which reads it from the
    naming table; it does not take part in comparisons.
    """

    path: Path
    family: str | None = field(default=None, compare=False)

    def describe(self) -> str:
        return str(self.path)


@dataclass(frozen=True, slots=True)
class InlineFont:
    """Font supplied as raw bytes, optionally with its family name."""

    data: bytes = field(repr=False)
    family: str | None = None

    def describe(self) -> str:
        return self.family or f"<{len(self.data)} bytes>"


FontSource = Union[SystemFont, FileFont, InlineFont]


def font_file(path: str | Path) -> FileFont:
    """Return a :class:`FileFont` whose family name has been resolved.

    Missing, unreadable and unparsable files raise :class:`ConfigurationError`.
    """
    resolved = expand_home(path)
    if not resolved.is_file():
        raise ConfigurationError(f"Font file does not exist: {resolved}")
    if not os.access(resolved, os.R_OK):
        raise ConfigurationError(f"Font file is not readable: {resolved}")
    try:
        family = resolve_family_name(resolved.read_bytes())
    except OSError as exc:
        raise ConfigurationError(f"Cannot read font file {resolved}: {exc}") from exc
    except FontParseError as exc:
        raise ConfigurationError(f"Invalid font file {resolved}: {exc}") from exc
    return FileFont(resolved, family)


@dataclass(frozen=True, slots=True)
class StyleConfig:
    """Pair of fonts governing how a batch of formulas is typeset.

    Instances compare structurally and are hashable, which makes them usable
    as keys of the engine cache.
    """

    body_font: FontSource = field(default_factory=lambda: SystemFont(DEFAULT_BODY_FONT))
    math_font: FontSource = field(default_factory=lambda: SystemFont(DEFAULT_MATH_FONT))

    def __post_init__(self) -> None:
        for role, source in (("body", self.body_font), ("math", self.math_font)):
            if isinstance(source, FileFont) and not source.path.is_file():
                raise ConfigurationError(
                    f"{role.capitalize()} font file does not exist: {source.path}"
                )

    @property
    def uses_system_fonts(self) -> bool:
        """Whether installed system fonts must be made available to the compiler."""
        return isinstance(self.body_font, SystemFont) or isinstance(self.math_font, SystemFont)


__all__ = [
    "DEFAULT_BODY_FONT",
    "DEFAULT_MATH_FONT",
    "FileFont",
    "FontSource",
    "InlineFont",
    "StyleConfig",
    "SystemFont",
    "expand_home",
    "font_file",
]
