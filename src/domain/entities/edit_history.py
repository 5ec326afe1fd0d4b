from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.domain.entities.image import RasterImage


@dataclass(frozen=True)
class HistoryEntry:
    image: RasterImage
    label: str  # Name of the operation that produced `image`
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
