"""
==============================================================================
Capture Package - Frame Acquisition
==============================================================================

Camera access and raw frame containers.

Classes:
--------
- Frame: Immutable raw pixel buffer with layout tag
- FrameSource: Abstract capture device contract
- OpenCVFrameSource: cv2.VideoCapture webcam source
- ImageFileFrameSource: Still image source for camera-less setups

==============================================================================
"""

from .models import ColorLayout, Frame
from .source import (
    FrameSource,
    ImageFileFrameSource,
    OpenCVFrameSource,
    create_frame_source,
)

__all__ = [
    "ColorLayout",
    "Frame",
    "FrameSource",
    "ImageFileFrameSource",
    "OpenCVFrameSource",
    "create_frame_source",
]
