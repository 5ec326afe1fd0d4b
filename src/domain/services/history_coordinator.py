from __future__ import annotations

import threading
from enum import Enum

from loguru import logger

from src.domain.entities.edit_history import HistoryEntry
from src.domain.entities.image import RasterImage
from src.domain.entities.operations import Operation
from src.domain.errors import IllegalStateError, PipelineError, ProcessingError

DEFAULT_MAX_HISTORY = 10
ORIGINAL_LABEL = "Original"


class CoordinatorState(str, Enum):
    IDLE = "idle"
    APPLYING = "applying"


class HistoryCoordinator:
    """Owns one session's current image and its bounded undo/redo stacks.

    `apply` is transactional: the operation runs against the current image, and
    the result either commits (a snapshot of the previous image pushed to the
    undo stack, redo stack cleared) or the previous image is restored and the
    error re-raised. A failed apply leaves the session exactly as it was.

    Stacks are ordered oldest first. Bound trimming only happens on a committed
    apply; undo and redo just move entries between the stacks.
    """

    def __init__(self, initial_image: RasterImage | None, max_history: int = DEFAULT_MAX_HISTORY) -> None:
        if initial_image is None:
            raise IllegalStateError("A session needs an initial image")
        if max_history < 1:
            raise ValueError("max_history must be >= 1")
        self.max_history = max_history
        self._lock = threading.RLock()
        self._state = CoordinatorState.IDLE
        self._current = initial_image
        self._current_label = ORIGINAL_LABEL
        self._undo: list[HistoryEntry] = []
        self._redo: list[HistoryEntry] = []
        # the initial state is the first history entry
        self._push_undo(HistoryEntry(initial_image.copy(), ORIGINAL_LABEL))

    # --------- transitions ---------
    def apply(self, operation: Operation) -> RasterImage:
        with self._lock:
            self._state = CoordinatorState.APPLYING
            previous = HistoryEntry(self._current, self._current_label)
            label = operation.tag.value
            # everything that can fail runs before the first mutation
            try:
                label = operation.name
                result = operation.apply(self._current)
                snapshot = HistoryEntry(previous.image.copy(), previous.label)
            except Exception as exc:
                self._rollback(previous)
                logger.warning(f"Rolled back '{label}': {exc}")
                if isinstance(exc, PipelineError):
                    raise
                raise ProcessingError(
                    f"{label} failed: {exc}", operation=operation.tag.value
                ) from exc
            self._push_undo(snapshot)
            self._current = result
            self._current_label = label
            self._redo.clear()
            self._state = CoordinatorState.IDLE
            logger.debug(
                f"Applied '{label}' -> {result.width}x{result.height} "
                f"(undo depth={len(self._undo)})"
            )
            return result

    def undo(self) -> RasterImage | None:
        with self._lock:
            if not self._undo:
                return None
            self._redo.append(HistoryEntry(self._current, self._current_label))
            entry = self._undo.pop()
            self._current, self._current_label = entry.image, entry.label
            logger.debug(f"Undo -> '{entry.label}' (undo depth={len(self._undo)})")
            return self._current

    def redo(self) -> RasterImage | None:
        with self._lock:
            if not self._redo:
                return None
            self._undo.append(HistoryEntry(self._current, self._current_label))
            entry = self._redo.pop()
            self._current, self._current_label = entry.image, entry.label
            logger.debug(f"Redo -> '{entry.label}' (redo depth={len(self._redo)})")
            return self._current

    # --------- queries ---------
    def can_undo(self) -> bool:
        with self._lock:
            return bool(self._undo)

    def can_redo(self) -> bool:
        with self._lock:
            return bool(self._redo)

    @property
    def current_image(self) -> RasterImage:
        with self._lock:
            return self._current

    @property
    def current_label(self) -> str:
        with self._lock:
            return self._current_label

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def history_size(self) -> int:
        with self._lock:
            return len(self._undo)

    @property
    def redo_size(self) -> int:
        with self._lock:
            return len(self._redo)

    def undo_labels(self) -> list[str]:
        with self._lock:
            return [entry.label for entry in self._undo]

    def redo_labels(self) -> list[str]:
        with self._lock:
            return [entry.label for entry in self._redo]

    # --------- helpers ---------
    def _push_undo(self, entry: HistoryEntry) -> None:
        self._undo.append(entry)
        # evict the oldest entries, never the newest
        while len(self._undo) > self.max_history:
            self._undo.pop(0)

    def _rollback(self, previous: HistoryEntry) -> None:
        self._current, self._current_label = previous.image, previous.label
        self._state = CoordinatorState.IDLE
