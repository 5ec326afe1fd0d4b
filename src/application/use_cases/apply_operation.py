from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any

from loguru import logger

from src.domain.services.operation_resolver import OperationResolver
from src.infrastructure.execution.harness import ExecutionHarness
from src.infrastructure.sessions.session_registry import SessionRegistry


@dataclass(frozen=True)
class QueuedOperation:
    """An operation accepted for a session, named as it will appear in history."""

    name: str
    future: Future


@dataclass
class ApplyOperationUseCase:
    registry: SessionRegistry
    resolver: OperationResolver
    harness: ExecutionHarness

    def execute(self, session_id: str, operation: str, params: dict[str, Any] | None = None) -> QueuedOperation:
        """
        Resolve an operation request and queue it on the session.

        WORKFLOW:
        1. The session is looked up (unknown session -> IllegalStateError)
        2. The tag and parameter bag are resolved into an Operation; malformed
           input fails here, before anything is queued
        3. The apply is queued behind any earlier work on the same session

        Returns:
            QueuedOperation with the resolved operation's name and a Future
            resolving to the new current image, or failing with the
            ProcessingError that caused the rollback

        Raises:
            ValidationError: Missing or malformed parameters, unknown tag
            UnsupportedOperationError: Recognized tag without an implementation
            IllegalStateError: Unknown session or harness shut down
        """
        session = self.registry.get(session_id)
        op = self.resolver.resolve(operation, params or {})
        name = op.name
        logger.info(f"Session {session_id}: queued '{name}'")
        return QueuedOperation(name, self.harness.submit_apply(session.id, session.coordinator, op))
