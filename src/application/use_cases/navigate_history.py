from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass

from src.domain.entities.image import RasterImage
from src.domain.services.history_coordinator import HistoryCoordinator
from src.infrastructure.execution.harness import ExecutionHarness
from src.infrastructure.sessions.session_registry import SessionRegistry


@dataclass(frozen=True)
class SessionState:
    """Consistent view of a session taken between two queued tasks."""

    session_id: str
    image: RasterImage
    current_label: str
    can_undo: bool
    can_redo: bool
    undo_labels: list[str]
    redo_labels: list[str]


@dataclass
class NavigateHistoryUseCase:
    """Undo, redo and state queries, routed through the session's queue."""

    registry: SessionRegistry
    harness: ExecutionHarness

    def undo(self, session_id: str) -> Future:
        session = self.registry.get(session_id)
        return self.harness.submit_undo(session.id, session.coordinator)

    def redo(self, session_id: str) -> Future:
        session = self.registry.get(session_id)
        return self.harness.submit_redo(session.id, session.coordinator)

    def state(self, session_id: str) -> Future:
        session = self.registry.get(session_id)
        return self.harness.submit_query(
            session.id, lambda: _snapshot(session.id, session.coordinator)
        )

    def can_undo(self, session_id: str) -> bool:
        session = self.registry.get(session_id)
        return self.harness.submit_query(session.id, session.coordinator.can_undo).result()

    def can_redo(self, session_id: str) -> bool:
        session = self.registry.get(session_id)
        return self.harness.submit_query(session.id, session.coordinator.can_redo).result()

    def current_image(self, session_id: str) -> RasterImage:
        session = self.registry.get(session_id)
        return self.harness.submit_query(session.id, lambda: session.coordinator.current_image).result()


def _snapshot(session_id: str, coordinator: HistoryCoordinator) -> SessionState:
    return SessionState(
        session_id=session_id,
        image=coordinator.current_image,
        current_label=coordinator.current_label,
        can_undo=coordinator.can_undo(),
        can_redo=coordinator.can_redo(),
        undo_labels=coordinator.undo_labels(),
        redo_labels=coordinator.redo_labels(),
    )
