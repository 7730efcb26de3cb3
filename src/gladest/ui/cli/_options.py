"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from gladest.core.models import OutputFormat


INPUTS_PANEL = "Input Handling"
RENDERING_PANEL = "Rendering"
FONTS_PANEL = "Fonts"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

InputPatternArgument = Annotated[
    list[str],
    typer.Argument(
        metavar="INPUT...",
        help=(
            "Documents to render: HTML (.html, .htm, .xhtml), HTML templates such as .htex, "
            "or Markdown (.md). Glob patterns like 'docs/**/*.html' are expanded."
        ),
        show_default=False,
        rich_help_panel=INPUTS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML file with rendering settings. Command-line flags take precedence.",
        exists=True,
        dir_okay=False,
        rich_help_panel=INPUTS_PANEL,
    ),
]

TagOption = Annotated[
    str | None,
    typer.Option(
        "--tag",
        help="Element name marking a formula (default: eq).",
        rich_help_panel=INPUTS_PANEL,
    ),
]

ModeAttributeOption = Annotated[
    str | None,
    typer.Option(
        "--mode-attribute",
        help="Attribute selecting inline (math) or display (displaymath) layout (default: env).",
        rich_help_panel=INPUTS_PANEL,
    ),
]

OutputDirOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Directory receiving rendered documents. Defaults to each input's directory.",
        file_okay=False,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

ExtensionOption = Annotated[
    str | None,
    typer.Option(
        "--extension",
        help="Extension of outputs written for non-HTML inputs (default: .html).",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

FormatOption = Annotated[
    OutputFormat | None,
    typer.Option(
        "--format",
        "-f",
        help="Image encoding embedded for each formula (default: png).",
        case_sensitive=False,
        rich_help_panel=RENDERING_PANEL,
    ),
]

PpiOption = Annotated[
    float | None,
    typer.Option(
        "--ppi",
        "-p",
        help="Pixels per inch used when rasterising PNG output (default: 1200).",
        rich_help_panel=RENDERING_PANEL,
    ),
]

JobsOption = Annotated[
    int | None,
    typer.Option(
        "--jobs",
        "-j",
        min=1,
        help="Number of formulas rendered concurrently (default: CPU count).",
        rich_help_panel=RENDERING_PANEL,
    ),
]

BodyFontOption = Annotated[
    str | None,
    typer.Option(
        "--body-font",
        metavar="FAMILY",
        help="Installed font family used for text within formulas.",
        rich_help_panel=FONTS_PANEL,
    ),
]

BodyFontFileOption = Annotated[
    Path | None,
    typer.Option(
        "--body-font-file",
        metavar="PATH",
        help="Font file used for text within formulas.",
        dir_okay=False,
        rich_help_panel=FONTS_PANEL,
    ),
]

MathFontOption = Annotated[
    str | None,
    typer.Option(
        "--math-font",
        metavar="FAMILY",
        help="Installed font family used for math glyphs.",
        rich_help_panel=FONTS_PANEL,
    ),
]

MathFontFileOption = Annotated[
    Path | None,
    typer.Option(
        "--math-font-file",
        metavar="PATH",
        help="Font file used for math glyphs.",
        dir_okay=False,
        rich_help_panel=FONTS_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]


__all__ = [
    "BodyFontFileOption",
    "BodyFontOption",
    "ConfigOption",
    "DebugOption",
    "ExtensionOption",
    "FormatOption",
    "InputPatternArgument",
    "JobsOption",
    "MathFontFileOption",
    "MathFontOption",
    "ModeAttributeOption",
    "OutputDirOption",
    "PpiOption",
    "TagOption",
    "VerboseOption",
]
