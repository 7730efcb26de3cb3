"""Render math formulas embedded in HTML documents as images."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from gladest.api import (
    BatchRequest,
    BatchResult,
    BatchService,
    DocumentOutcome,
    FontSettings,
    FontSpec,
    RenderSettings,
    expand_inputs,
    load_settings,
    output_path_for,
    render_document,
    render_formula,
    render_markdown,
)
from gladest.core.cache import EngineCache
from gladest.core.exceptions import (
    ConfigurationError,
    DocumentIOError,
    FontParseError,
    FormulaCompileError,
    GladestError,
    PageEncodingError,
    PipelineInvariantError,
)
from gladest.core.models import ErrorReport, FormulaMode, OutputFormat, RenderResult
from gladest.fonts.sources import FileFont, InlineFont, StyleConfig, SystemFont


try:
    __version__ = _pkg_version("gladest")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    "BatchRequest",
    "BatchResult",
    "BatchService",
    "ConfigurationError",
    "DocumentIOError",
    "DocumentOutcome",
    "EngineCache",
    "ErrorReport",
    "FileFont",
    "FontParseError",
    "FontSettings",
    "FontSpec",
    "FormulaCompileError",
    "FormulaMode",
    "GladestError",
    "InlineFont",
    "OutputFormat",
    "PageEncodingError",
    "PipelineInvariantError",
    "RenderResult",
    "RenderSettings",
    "StyleConfig",
    "SystemFont",
    "__version__",
    "expand_inputs",
    "load_settings",
    "output_path_for",
    "render_document",
    "render_formula",
    "render_markdown",
]
