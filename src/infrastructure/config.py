from __future__ import annotations

import os
from dataclasses import dataclass

from src.domain.services.history_coordinator import DEFAULT_MAX_HISTORY
from src.infrastructure.execution.harness import DEFAULT_MAX_WORKERS


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    env: str = "development"
    max_history: int = DEFAULT_MAX_HISTORY
    workers: int = DEFAULT_MAX_WORKERS
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            env=os.getenv("ENV", "development"),
            max_history=_int_env("IMGEDIT_MAX_HISTORY", DEFAULT_MAX_HISTORY),
            workers=_int_env("IMGEDIT_WORKERS", DEFAULT_MAX_WORKERS),
            log_level=os.getenv("IMGEDIT_LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("IMGEDIT_LOG_FILE") or None,
        )
