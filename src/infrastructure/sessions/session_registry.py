from __future__ import annotations

import threading
import uuid

from loguru import logger

from src.domain.entities.image import RasterImage
from src.domain.entities.session import EditSession
from src.domain.errors import ErrorKind, IllegalStateError
from src.domain.services.history_coordinator import DEFAULT_MAX_HISTORY, HistoryCoordinator


class SessionNotFoundError(IllegalStateError):
    """Raised when a request names a session that does not exist (or has ended)."""


class SessionRegistry:
    """In-memory store of editing sessions. Nothing here outlives the process."""

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY) -> None:
        self.max_history = max_history
        self._sessions: dict[str, EditSession] = {}
        self._lock = threading.Lock()

    def create(self, initial_image: RasterImage | None, original_filename: str | None = None) -> EditSession:
        coordinator = HistoryCoordinator(initial_image, max_history=self.max_history)
        session = EditSession(
            id=str(uuid.uuid4()),
            coordinator=coordinator,
            original_filename=original_filename,
        )
        with self._lock:
            self._sessions[session.id] = session
        logger.info(
            f"Session {session.id} started with {initial_image.width}x{initial_image.height} image"
        )
        return session

    def get(self, session_id: str) -> EditSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(
                f"Session {session_id} not found", kind=ErrorKind.IMAGE_NOT_LOADED
            )
        return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is not None:
            logger.info(f"Session {session_id} ended")
        return removed is not None

    def list_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
