"""Typed errors raised by the editing pipeline.

Every error carries enough context (operation tag, failing parameter) for the
API layer to build a structured response without inspecting the message.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    IMAGE_NOT_LOADED = "image_not_loaded"
    OPERATION_NOT_SUPPORTED = "operation_not_supported"
    INVALID_PARAMETERS = "invalid_parameters"
    PROCESSING_FAILED = "processing_failed"
    PROCESSING_TIMEOUT = "processing_timeout"
    OUT_OF_MEMORY = "out_of_memory"


class PipelineError(Exception):
    """Base class for all pipeline errors."""

    default_kind = ErrorKind.PROCESSING_FAILED

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        operation: str | None = None,
        parameter: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind
        self.operation = operation
        self.parameter = parameter

    @property
    def user_message(self) -> str:
        return f"Image processing error: {self.message}"

    def to_dict(self) -> dict[str, str | None]:
        return {
            "detail": self.message,
            "kind": self.kind.value,
            "operation": self.operation,
            "parameter": self.parameter,
        }


class ValidationError(PipelineError):
    """Malformed or missing parameters at resolution time."""

    default_kind = ErrorKind.INVALID_PARAMETERS


class ProcessingError(PipelineError):
    """An operation could not complete against the given image."""


class UnsupportedOperationError(PipelineError):
    """A recognized operation tag with no backing implementation."""

    default_kind = ErrorKind.OPERATION_NOT_SUPPORTED


class IllegalStateError(PipelineError):
    """A request arrived before the state it needs exists."""

    default_kind = ErrorKind.IMAGE_NOT_LOADED
