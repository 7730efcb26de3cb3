"""Diagnostic emitter bridging the rendering pipeline with CLI rendering utilities."""

from __future__ import annotations

from collections.abc import Mapping
from threading import Lock
from typing import Any

from gladest.core.diagnostics import DiagnosticEmitter, format_event_message

from .state import CLIState, emit_error, emit_warning, get_cli_state, render_message


class CliEmitter(DiagnosticEmitter):
    """Emit diagnostics using the rich-enabled CLI helpers.

    Rendering workers report from several threads at once; output is
    serialised so messages never interleave.
    """

    def __init__(self, state: CLIState | None = None, *, debug_enabled: bool | None = None) -> None:
        self._state = state or get_cli_state()
        if debug_enabled is None:
            debug_enabled = self._state.show_tracebacks
        self.debug_enabled = bool(debug_enabled)
        self._lock = Lock()

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        with self._lock:
            emit_warning(message, exception=exc, state=self._state)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        with self._lock:
            emit_error(message, exception=exc, state=self._state)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        if self._state.verbosity < 1:
            return
        message = format_event_message(name, payload)
        if message:
            with self._lock:
                render_message("info", message, state=self._state)


__all__ = ["CliEmitter"]
