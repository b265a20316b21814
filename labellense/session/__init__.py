"""
==============================================================================
Session Package - Camera Lifecycle
==============================================================================

Capture session state machine and preview hand-off.

Classes:
--------
- CaptureSession: Owns the camera and the background preview thread
- DisplaySink: Receiver interface for preview images
- PreviewHub: Thread-to-asyncio preview fan-out

==============================================================================
"""

from .capture_session import (
    NO_FRAME_MESSAGE,
    CaptureSession,
    DisplaySink,
    SessionState,
)
from .preview import PreviewHub

__all__ = [
    "NO_FRAME_MESSAGE",
    "CaptureSession",
    "DisplaySink",
    "SessionState",
    "PreviewHub",
]
