"""Configuration models for rendering runs.

FontSpec

`type` (`"system" | "file"`)
: Where the font comes from. System fonts are looked up by family name among
  the installed fonts; file fonts are read from disk.

`value` (`str`)
: Family name for system fonts, path for file fonts. A leading `~` expands
  to the home directory.

FontSettings

`body_font` / `bodyFont` (`FontSpec`)
: Font used for text inside formulas. Defaults to New Computer Modern.

`math_font` / `mathFont` (`FontSpec`)
: Font used for math glyphs. Defaults to New Computer Modern Math.

RenderSettings

`format` (`"png" | "svg"`)
: Image encoding embedded in the document.

`ppi` (`float`)
: Raster density used for PNG output.

`fonts` (`FontSettings`)
: Font pair used to typeset every formula of the run.

`jobs` (`int | None`)
: Worker count. Defaults to the number of available CPUs.

`tag` (`str`)
: Name of the element carrying a formula.

`mode_attribute` (`str`)
: Attribute selecting inline (`math`) or display (`displaymath`) layout.

`extension` (`str`)
: Extension given to outputs of non-HTML inputs.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from gladest.fonts.sources import (
    DEFAULT_BODY_FONT,
    DEFAULT_MATH_FONT,
    FontSource,
    StyleConfig,
    SystemFont,
    expand_home,
    font_file,
)

from .encoder import DEFAULT_PPI
from .exceptions import ConfigurationError
from .models import OutputFormat


DEFAULT_TAG = "eq"
DEFAULT_MODE_ATTRIBUTE = "env"
DEFAULT_EXTENSION = ".html"


class FontSpec(BaseModel):
    """Font reference as written in configuration files."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["system", "file"] = "system"
    value: str = Field(min_length=1)

    def to_source(self) -> FontSource:
        if self.type == "file":
            return font_file(self.value)
        return SystemFont(self.value)

    @classmethod
    def system(cls, name: str) -> FontSpec:
        return cls(type="system", value=name)

    @classmethod
    def file(cls, path: str | Path) -> FontSpec:
        return cls(type="file", value=str(path))


class FontSettings(BaseModel):
    """Body and math fonts of a rendering run."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    body_font: FontSpec = Field(
        default_factory=lambda: FontSpec.system(DEFAULT_BODY_FONT), alias="bodyFont"
    )
    math_font: FontSpec = Field(
        default_factory=lambda: FontSpec.system(DEFAULT_MATH_FONT), alias="mathFont"
    )

    @field_validator("body_font", "math_font", mode="before")
    @classmethod
    def _coerce_font(cls, value: Any) -> Any:
        # A bare string names a system font.
        if isinstance(value, str):
            return {"type": "system", "value": value}
        return value


class RenderSettings(BaseModel):
    """Options shared by every document of a rendering run."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    format: OutputFormat = OutputFormat.PNG
    ppi: float = Field(default=DEFAULT_PPI, gt=0)
    fonts: FontSettings = Field(default_factory=FontSettings)
    jobs: int | None = Field(default=None, gt=0)
    tag: str = Field(default=DEFAULT_TAG, min_length=1)
    mode_attribute: str = Field(default=DEFAULT_MODE_ATTRIBUTE, min_length=1, alias="modeAttribute")
    extension: str = Field(default=DEFAULT_EXTENSION, min_length=1)

    @field_validator("format", mode="before")
    @classmethod
    def _normalise_format(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("tag", "mode_attribute")
    @classmethod
    def _normalise_name(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("extension")
    @classmethod
    def _normalise_extension(cls, value: str) -> str:
        value = value.strip()
        return value if value.startswith(".") else f".{value}"

    def style_config(self) -> StyleConfig:
        """Build the engine key for these settings, validating font files."""
        return StyleConfig(
            body_font=self.fonts.body_font.to_source(),
            math_font=self.fonts.math_font.to_source(),
        )

    def with_overrides(self, **overrides: Any) -> RenderSettings:
        """Return a copy where every non-``None`` override replaces the stored value."""
        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        payload = self.model_dump()
        payload.update(updates)
        try:
            return RenderSettings.model_validate(payload)
        except ValidationError as exc:
            raise ConfigurationError(_validation_message(exc)) from exc


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid configuration: " + "; ".join(parts)


def settings_from_mapping(data: Mapping[str, Any] | None) -> RenderSettings:
    """Validate ``data`` into :class:`RenderSettings`."""
    try:
        return RenderSettings.model_validate(dict(data or {}))
    except ValidationError as exc:
        raise ConfigurationError(_validation_message(exc)) from exc


def load_settings(path: str | Path) -> RenderSettings:
    """Read rendering settings from a YAML file."""
    resolved = expand_home(path)
    try:
        payload = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read configuration '{resolved}': {exc}") from exc

    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in configuration '{resolved}': {exc}") from exc

    if data is None:
        return RenderSettings()
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Configuration '{resolved}' must contain a mapping.")
    return settings_from_mapping(data)


__all__ = [
    "DEFAULT_EXTENSION",
    "DEFAULT_MODE_ATTRIBUTE",
    "DEFAULT_TAG",
    "FontSettings",
    "FontSpec",
    "RenderSettings",
    "load_settings",
    "settings_from_mapping",
]
