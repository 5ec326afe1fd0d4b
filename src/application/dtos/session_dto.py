from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class SessionMetadata(BaseModel):
    """Current state of an editing session."""
    id: str = Field(..., description="Unique identifier of the session", examples=["6f1c1e9a-2c4b-4a53-9d0e-1b2f3c4d5e6f"])
    width: int = Field(..., description="Width of the current image in pixels", examples=[1920], gt=0)
    height: int = Field(..., description="Height of the current image in pixels", examples=[1080], gt=0)
    channels: int = Field(..., description="Number of color channels of the current image", examples=[3], ge=1)
    current_label: str = Field(..., description="Name of the operation that produced the current image", examples=["Rotate 90° clockwise"])
    can_undo: bool = Field(..., description="Whether an undo step is available")
    can_redo: bool = Field(..., description="Whether a redo step is available")
    undo_history: list[str] = Field(default_factory=list, description="Labels of the undo stack, oldest first")
    redo_history: list[str] = Field(default_factory=list, description="Labels of the redo stack, oldest first")
    image_url: str = Field(..., description="Path to download the current image", examples=["/sessions/6f1c.../image"])
    created_at: datetime = Field(..., description="ISO timestamp when the session was started")
    original_filename: str | None = Field(None, description="Filename of the uploaded image", examples=["photo.jpg"])


class StartSessionResponse(BaseModel):
    """Response model for a newly started session."""
    session: SessionMetadata = Field(..., description="State of the new session")


class OperationRequest(BaseModel):
    """An operation tag plus its parameter bag."""
    operation: str = Field(..., description="Type of operation to apply", examples=["brightness"])
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Operation-specific parameters",
        examples=[{"brightness": 0.2}],
    )


class OperationResponse(BaseModel):
    """Response model for an applied operation."""
    operation: str = Field(..., description="Operation tag that was applied", examples=["crop"])
    operation_name: str = Field(..., description="Descriptive name recorded in the history", examples=["Crop [x=0, y=0, w=100, h=100]"])
    params: dict[str, Any] = Field(default_factory=dict, description="Parameters used for the operation")
    width: int = Field(..., description="Width of the resulting image in pixels", gt=0)
    height: int = Field(..., description="Height of the resulting image in pixels", gt=0)
    session: SessionMetadata = Field(..., description="Session state after the operation")


class HistoryStepResponse(BaseModel):
    """Response model for undo/redo."""
    changed: bool = Field(..., description="False when there was nothing to undo/redo")
    session: SessionMetadata = Field(..., description="Session state after the step")


class DeleteSessionResponse(BaseModel):
    """Response model for ending a session."""
    ok: bool = Field(True, description="Indicates whether the session existed and was removed")
