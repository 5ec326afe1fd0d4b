from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.domain.services.history_coordinator import HistoryCoordinator


@dataclass(frozen=True)
class EditSession:
    id: str
    coordinator: HistoryCoordinator
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    original_filename: str | None = None
