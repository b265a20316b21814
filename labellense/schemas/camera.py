"""
==============================================================================
Camera Schemas Module
==============================================================================

Request/response schemas for camera control and scanning endpoints.

==============================================================================
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from labellense.scanner import DecodeOutcome


class CameraStatusResponse(BaseModel):
    """Current capture session status."""
    success: bool = Field(default=True)
    state: Literal["idle", "running"]
    device: str
    device_index: int
    device_open: bool
    worker_alive: bool
    frames_delivered: int = Field(ge=0)
    frames_missed: int = Field(ge=0)
    preview_subscribers: int = Field(default=0, ge=0)


class CameraActionResponse(BaseModel):
    """Result of a start/stop request."""
    success: bool = Field(default=True)
    state: Literal["idle", "running"]
    changed: bool = Field(description="False when the request was a no-op")
    message: str


class ScanResponse(BaseModel):
    """Result of a single scan request."""
    success: bool = Field(default=True)
    outcome: DecodeOutcome
    message: str = Field(description="Operator-facing result line")
    product_info: Optional[str] = Field(default=None)
