"""Shared output buffer merged into by parallel rendering workers."""

from __future__ import annotations

import logging
from threading import Lock

from .exceptions import BufferPoisonedError, PipelineInvariantError


logger = logging.getLogger(__name__)


class DocumentBuffer:
    """Mutable document text guarded by a single lock.

    Each placeholder token is replaced at most once. A merge that fails part
    way poisons the buffer: every later access raises
    :class:`BufferPoisonedError` instead of returning a half-merged document.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._lock = Lock()
        self._poisoned: BaseException | None = None

    @property
    def poisoned(self) -> bool:
        return self._poisoned is not None

    def _ensure_usable(self) -> None:
        if self._poisoned is not None:
            raise BufferPoisonedError(
                "Document buffer is unusable after a failed merge"
            ) from self._poisoned

    def replace(self, token: str, fragment: str) -> bool:
        """Swap ``token`` for ``fragment``; return False when it was already merged."""
        with self._lock:
            self._ensure_usable()
            try:
                occurrences = self._text.count(token)
                if occurrences == 0:
                    logger.debug("Placeholder %r already merged", token)
                    return False
                if occurrences > 1:
                    raise PipelineInvariantError(
                        f"Placeholder {token!r} occurs {occurrences} times in the document"
                    )
                self._text = self._text.replace(token, fragment, 1)
            except BaseException as exc:
                self._poisoned = exc
                raise
            return True

    def getvalue(self) -> str:
        """Return the current document text."""
        with self._lock:
            self._ensure_usable()
            return self._text

    def __contains__(self, token: str) -> bool:
        with self._lock:
            self._ensure_usable()
            return token in self._text


__all__ = ["DocumentBuffer"]
