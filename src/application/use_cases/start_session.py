from __future__ import annotations

from dataclasses import dataclass

from src.domain.entities.image import RasterImage
from src.domain.entities.session import EditSession
from src.infrastructure.execution.harness import ExecutionHarness
from src.infrastructure.sessions.session_registry import SessionRegistry


@dataclass
class StartSessionUseCase:
    registry: SessionRegistry
    harness: ExecutionHarness

    def execute(self, initial_image: RasterImage | None, original_filename: str | None = None) -> EditSession:
        """
        Start a new editing session.

        The initial image becomes the session's current image and its first
        history entry.

        Raises:
            IllegalStateError: If no initial image is given
        """
        return self.registry.create(initial_image, original_filename=original_filename)

    def end(self, session_id: str) -> bool:
        """End a session and drop its history. Queued work still runs to completion."""
        removed = self.registry.delete(session_id)
        self.harness.forget(session_id)
        return removed
