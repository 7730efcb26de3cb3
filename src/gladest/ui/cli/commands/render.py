"""Implementation of the primary ``gladest`` CLI command."""

from __future__ import annotations

from pathlib import Path

import click
import typer

from gladest.api.service import BatchRequest, BatchService, expand_inputs
from gladest.core.cache import EngineCache
from gladest.core.config import FontSpec, RenderSettings, load_settings
from gladest.core.exceptions import ConfigurationError, PipelineInvariantError
from gladest.core.models import OutputFormat

from .._options import (
    BodyFontFileOption,
    BodyFontOption,
    ConfigOption,
    DebugOption,
    ExtensionOption,
    FormatOption,
    InputPatternArgument,
    JobsOption,
    MathFontFileOption,
    MathFontOption,
    ModeAttributeOption,
    OutputDirOption,
    PpiOption,
    TagOption,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..presenter import present_batch_summary, present_formula_failures
from ..progress import batch_progress
from ..state import emit_error, set_cli_state


EXIT_OK = 0
EXIT_DOCUMENT_FAILED = 1
EXIT_USAGE = 2


def _font_override(role: str, family: str | None, path: Path | None) -> FontSpec | None:
    if family is not None and path is not None:
        raise ConfigurationError(
            f"Use either --{role}-font or --{role}-font-file, not both."
        )
    if family is not None:
        return FontSpec.system(family)
    if path is not None:
        return FontSpec.file(path)
    return None


def resolve_settings(
    *,
    config: Path | None = None,
    fmt: OutputFormat | None = None,
    ppi: float | None = None,
    jobs: int | None = None,
    body_font: str | None = None,
    body_font_file: Path | None = None,
    math_font: str | None = None,
    math_font_file: Path | None = None,
    tag: str | None = None,
    mode_attribute: str | None = None,
    extension: str | None = None,
) -> RenderSettings:
    """Combine the configuration file and command-line flags, flags winning."""
    body = _font_override("body", body_font, body_font_file)
    math = _font_override("math", math_font, math_font_file)

    settings = load_settings(config) if config is not None else RenderSettings()
    fonts = None
    if body is not None or math is not None:
        fonts = settings.fonts.model_copy(
            update={
                "body_font": body or settings.fonts.body_font,
                "math_font": math or settings.fonts.math_font,
            }
        )
    return settings.with_overrides(
        format=fmt,
        ppi=ppi,
        jobs=jobs,
        fonts=fonts,
        tag=tag,
        mode_attribute=mode_attribute,
        extension=extension,
    )


def render(
    inputs: InputPatternArgument,
    output: OutputDirOption = None,
    fmt: FormatOption = None,
    ppi: PpiOption = None,
    jobs: JobsOption = None,
    body_font: BodyFontOption = None,
    body_font_file: BodyFontFileOption = None,
    math_font: MathFontOption = None,
    math_font_file: MathFontFileOption = None,
    config: ConfigOption = None,
    tag: TagOption = None,
    mode_attribute: ModeAttributeOption = None,
    extension: ExtensionOption = None,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Replace math formulas in HTML documents with embedded images."""

    ctx = click.get_current_context(silent=True)
    typer_ctx = ctx if isinstance(ctx, typer.Context) else None
    state = set_cli_state(ctx=typer_ctx, verbosity=verbose, debug=debug)

    try:
        settings = resolve_settings(
            config=config,
            fmt=fmt,
            ppi=ppi,
            jobs=jobs,
            body_font=body_font,
            body_font_file=body_font_file,
            math_font=math_font,
            math_font_file=math_font_file,
            tag=tag,
            mode_attribute=mode_attribute,
            extension=extension,
        )
        settings.style_config()
    except ConfigurationError as exc:
        emit_error(str(exc), exception=exc, state=state)
        raise typer.Exit(code=EXIT_USAGE) from exc

    documents = expand_inputs(inputs)
    if not documents:
        emit_error("No input documents matched the given paths or patterns.", state=state)
        raise typer.Exit(code=EXIT_USAGE)

    emitter = CliEmitter(state)
    cache = EngineCache(emitter=emitter)
    request = BatchRequest(inputs=documents, settings=settings, output_dir=output)

    try:
        with batch_progress(state) as progress_factory:
            service = BatchService(cache=cache, emitter=emitter, progress_factory=progress_factory)
            batch = service.run(request)
    except ConfigurationError as exc:
        emit_error(str(exc), exception=exc, state=state)
        raise typer.Exit(code=EXIT_USAGE) from exc
    except PipelineInvariantError as exc:
        if state.show_tracebacks:
            raise
        emit_error(str(exc), exception=exc, state=state)
        raise typer.Exit(code=EXIT_DOCUMENT_FAILED) from exc

    present_batch_summary(state, batch)
    present_formula_failures(state, batch)

    if not batch.ok:
        raise typer.Exit(code=EXIT_DOCUMENT_FAILED)


__all__ = ["EXIT_DOCUMENT_FAILED", "EXIT_OK", "EXIT_USAGE", "render", "resolve_settings"]
