from __future__ import annotations

from src.application.use_cases.apply_operation import ApplyOperationUseCase
from src.application.use_cases.navigate_history import NavigateHistoryUseCase
from src.application.use_cases.start_session import StartSessionUseCase
from src.domain.services.operation_resolver import OperationResolver
from src.infrastructure.config import Settings
from src.infrastructure.execution.harness import ExecutionHarness
from src.infrastructure.sessions.session_registry import SessionRegistry
from src.infrastructure.storage.image_codec import ImageCodec

# Process-wide singletons; sessions live in memory for the lifetime of the process
_SETTINGS: Settings | None = None
_REGISTRY: SessionRegistry | None = None
_HARNESS: ExecutionHarness | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def get_session_registry() -> SessionRegistry:
    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = SessionRegistry(max_history=get_settings().max_history)
    return _REGISTRY


def get_execution_harness() -> ExecutionHarness:
    global _HARNESS
    if _HARNESS is None:
        _HARNESS = ExecutionHarness(max_workers=get_settings().workers)
    return _HARNESS


def shutdown_execution_harness() -> None:
    global _HARNESS
    if _HARNESS is not None:
        _HARNESS.shutdown(wait=True)
        _HARNESS = None


def get_operation_resolver() -> OperationResolver:
    return OperationResolver()


def get_image_codec() -> ImageCodec:
    return ImageCodec()


def get_start_session_use_case() -> StartSessionUseCase:
    return StartSessionUseCase(get_session_registry(), get_execution_harness())


def get_apply_operation_use_case() -> ApplyOperationUseCase:
    return ApplyOperationUseCase(
        get_session_registry(), get_operation_resolver(), get_execution_harness()
    )


def get_navigate_history_use_case() -> NavigateHistoryUseCase:
    return NavigateHistoryUseCase(get_session_registry(), get_execution_harness())
