"""Common DTOs for API responses and error handling."""
from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Optional


class ErrorResponse(BaseModel):
    """Standard error response model."""
    detail: str = Field(..., description="Error message describing what went wrong")
    kind: Optional[str] = Field(None, description="Machine-readable error kind", examples=["invalid_parameters"])
    operation: Optional[str] = Field(None, description="Operation tag the error relates to", examples=["crop"])
    parameter: Optional[str] = Field(None, description="Name of the failing parameter, if any", examples=["width"])


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Health status", examples=["healthy"])
    sessions: int = Field(..., description="Number of open editing sessions", ge=0)


class RootResponse(BaseModel):
    """Root endpoint response model."""
    status: str = Field(..., description="API status", examples=["ok"])
    service: str = Field(..., description="Service name", examples=["imgedit-backend"])
    version: str = Field(..., description="API version", examples=["0.1.0"])
