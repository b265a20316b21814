"""
==============================================================================
Schemas Package
==============================================================================

Pydantic request/response schemas for the HTTP API.

==============================================================================
"""

from .camera import CameraStatusResponse, CameraActionResponse, ScanResponse

__all__ = [
    "CameraStatusResponse",
    "CameraActionResponse",
    "ScanResponse",
]
