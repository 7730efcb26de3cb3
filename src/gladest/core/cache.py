"""Memoise compiled formula engines per style configuration."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable
import logging
from threading import Lock
from typing import Protocol, runtime_checkable

from gladest.fonts.sources import StyleConfig

from .diagnostics import DiagnosticEmitter, ensure_emitter
from .models import CompiledPage, FormulaMode


logger = logging.getLogger(__name__)


@runtime_checkable
class FormulaEngine(Protocol):
    """Compiled engine bound to one :class:`StyleConfig`.

    Engines are immutable once built and may be shared by any number of
    worker threads.
    """

    config: StyleConfig

    def compile(self, formula: str, mode: FormulaMode) -> CompiledPage: ...


EngineBuilder = Callable[[StyleConfig], FormulaEngine]


def default_engine_builder(config: StyleConfig) -> FormulaEngine:
    """Build a Typst-backed engine for ``config``."""
    from gladest.adapters.typst.engine import build_typst_engine

    return build_typst_engine(config)


class EngineCache:
    """Bounded map from style configuration to compiled engine.

    With the default capacity of one the cache holds the engine for the
    current configuration only; asking for another configuration replaces it.
    Builds run inside the cache lock, so concurrent callers asking for the
    same configuration wait for the first build and share its result.
    Replaced engines are simply dropped: renders still holding a reference
    keep using them until they finish.
    """

    def __init__(
        self,
        builder: EngineBuilder | None = None,
        *,
        capacity: int = 1,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("Engine cache capacity must be at least 1")
        self._builder = builder or default_engine_builder
        self._capacity = capacity
        self._emitter = ensure_emitter(emitter)
        self._entries: OrderedDict[StyleConfig, FormulaEngine] = OrderedDict()
        self._lock = Lock()
        self.builds = 0

    def get_or_build(self, config: StyleConfig) -> FormulaEngine:
        """Return the engine for ``config``, building it on a miss."""
        with self._lock:
            engine = self._entries.get(config)
            if engine is not None:
                self._entries.move_to_end(config)
                return engine

            logger.debug("Building formula engine for %r", config)
            engine = self._builder(config)
            self.builds += 1
            self._entries[config] = engine
            while len(self._entries) > self._capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Released formula engine for %r", evicted)
            self._emitter.event(
                "engine_built",
                {
                    "body_font": config.body_font.describe(),
                    "math_font": config.math_font.describe(),
                },
            )
            return engine

    def invalidate(self, config: StyleConfig | None = None) -> None:
        """Drop the engine for ``config``, or every cached engine."""
        with self._lock:
            if config is None:
                self._entries.clear()
            else:
                self._entries.pop(config, None)

    def __contains__(self, config: object) -> bool:
        with self._lock:
            return config in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["EngineBuilder", "EngineCache", "FormulaEngine", "default_engine_builder"]
