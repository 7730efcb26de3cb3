"""Typst-backed formula engine."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from pathlib import Path
import queue
import shutil
import tempfile
import threading
from typing import Any

import typst

from gladest.core.exceptions import ConfigurationError, FontParseError, FormulaCompileError, PageEncodingError
from gladest.core.models import CompiledPage, FormulaMode
from gladest.fonts.names import resolve_family_name
from gladest.fonts.sources import FileFont, FontSource, InlineFont, StyleConfig, SystemFont

from .compiler import FormulaRequest, build_request, diagnostic_from_error, first_page, page_geometry


logger = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).with_name("template.typ")

_FONT_SUFFIXES = {
    b"OTTO": ".otf",
    b"ttcf": ".ttc",
    b"true": ".ttf",
    b"\x00\x01\x00\x00": ".ttf",
}


def _inline_suffix(data: bytes) -> str:
    return _FONT_SUFFIXES.get(data[:4], ".ttf")


class TypstEngine:
    """Compile formulas against a fixed template and font set.

    The engine owns a private workspace holding the template and every font
    that is not looked up among the system fonts. Compilers are pooled: a
    worker borrows an idle one or builds a new one, and returns it when done,
    so successive renders reuse compilers whose fonts are already loaded.
    The engine configuration is immutable after construction.
    """

    def __init__(
        self,
        config: StyleConfig,
        workspace: tempfile.TemporaryDirectory[str],
        *,
        body_family: str,
        math_family: str,
        font_paths: list[str],
    ) -> None:
        self.config = config
        self.body_family = body_family
        self.math_family = math_family
        self._workspace = workspace
        self._root = Path(workspace.name)
        self._template = self._root / TEMPLATE_PATH.name
        self._font_paths = font_paths
        self._ignore_system_fonts = not config.uses_system_fonts
        self._idle: queue.SimpleQueue[Any] = queue.SimpleQueue()
        self._created = 0
        self._created_lock = threading.Lock()

    @property
    def compilers_created(self) -> int:
        return self._created

    def _new_compiler(self) -> Any:
        compiler = typst.Compiler(
            str(self._template),
            root=str(self._root),
            font_paths=self._font_paths,
            ignore_system_fonts=self._ignore_system_fonts,
        )
        with self._created_lock:
            self._created += 1
        logger.debug("Created Typst compiler #%d", self._created)
        return compiler

    @contextmanager
    def _borrow_compiler(self) -> Iterator[Any]:
        try:
            compiler = self._idle.get_nowait()
        except queue.Empty:
            compiler = self._new_compiler()
        try:
            yield compiler
        finally:
            self._idle.put(compiler)

    def request(self, formula: str, mode: FormulaMode) -> FormulaRequest:
        return build_request(formula, mode, body_font=self.body_family, math_font=self.math_family)

    def compile(self, formula: str, mode: FormulaMode) -> CompiledPage:
        """Lay out ``formula`` on a tightly fitting page."""
        inputs = self.request(formula, mode).sys_inputs()
        try:
            with self._borrow_compiler() as compiler:
                output = compiler.compile(format="svg", sys_inputs=inputs)
        except RuntimeError as exc:
            raise FormulaCompileError(diagnostic_from_error(exc)) from exc

        svg = first_page(output).decode("utf-8")
        width_pt, height_pt = page_geometry(svg)

        def rasterize(ppi: float) -> bytes:
            try:
                with self._borrow_compiler() as compiler:
                    png = compiler.compile(format="png", ppi=ppi, sys_inputs=inputs)
            except RuntimeError as exc:
                raise PageEncodingError(f"Failed to rasterize formula: {exc}") from exc
            try:
                return first_page(png)
            except FormulaCompileError as exc:
                raise PageEncodingError(str(exc)) from exc

        return CompiledPage(width_pt=width_pt, height_pt=height_pt, svg=svg, rasterize=rasterize)

    def close(self) -> None:
        self._workspace.cleanup()


def _install_font(source: FontSource, role: str, font_dir: Path) -> str:
    """Make ``source`` available to the compiler and return its family name."""
    if isinstance(source, SystemFont):
        return source.name

    if isinstance(source, FileFont):
        try:
            data = source.path.read_bytes()
        except OSError as exc:
            raise ConfigurationError(f"Cannot read {role} font {source.path}: {exc}") from exc
        target = font_dir / f"{role}-{source.path.name}"
        family = source.family
    elif isinstance(source, InlineFont):
        data = source.data
        target = font_dir / f"{role}-inline{_inline_suffix(data)}"
        family = source.family
    else:
        raise ConfigurationError(f"Unsupported {role} font source: {source!r}")

    if family is None:
        try:
            family = resolve_family_name(data)
        except FontParseError as exc:
            raise ConfigurationError(f"Invalid {role} font {source.describe()}: {exc}") from exc

    font_dir.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    return family


def build_typst_engine(config: StyleConfig) -> TypstEngine:
    """Prepare the workspace for ``config`` and return a ready engine."""
    workspace = tempfile.TemporaryDirectory(prefix="gladest-")
    root = Path(workspace.name)
    try:
        shutil.copyfile(TEMPLATE_PATH, root / TEMPLATE_PATH.name)
        font_dir = root / "fonts"
        body_family = _install_font(config.body_font, "body", font_dir)
        math_family = _install_font(config.math_font, "math", font_dir)
    except BaseException:
        workspace.cleanup()
        raise

    font_paths = [str(font_dir)] if font_dir.is_dir() else []
    logger.debug(
        "Typst engine ready: body=%r math=%r system_fonts=%s",
        body_family,
        math_family,
        config.uses_system_fonts,
    )
    return TypstEngine(
        config,
        workspace,
        body_family=body_family,
        math_family=math_family,
        font_paths=font_paths,
    )


__all__ = ["TEMPLATE_PATH", "TypstEngine", "build_typst_engine"]
