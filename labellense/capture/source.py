"""
==============================================================================
Frame Source Module
==============================================================================

Capture device wrappers that hand out raw frames.

Classes:
--------
- FrameSource: Abstract open/read/release contract
- OpenCVFrameSource: Webcam access through cv2.VideoCapture
- ImageFileFrameSource: Serves a still image from disk (no camera needed)

A missed frame is reported as ``None`` from ``read()``, never as an
exception. ``release()`` is idempotent.

==============================================================================
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import cv2

from labellense.config import Settings
from .models import Frame


# Module logger
logger = logging.getLogger(__name__)


class FrameSource(ABC):
    """Abstract capture device holding an exclusive handle while open."""

    @abstractmethod
    def open(self, device_index: int) -> bool:
        """Open the device. Returns False when it cannot be opened."""

    @abstractmethod
    def read(self) -> Optional[Frame]:
        """Pull the next frame, or None when the device produced nothing."""

    @abstractmethod
    def is_open(self) -> bool:
        """Check whether the device handle is held."""

    @abstractmethod
    def release(self) -> None:
        """Release the device handle. Safe to call when not open."""

    def describe(self) -> str:
        """Short label used in log lines and error details."""
        return type(self).__name__


class OpenCVFrameSource(FrameSource):
    """
    Webcam frame source backed by ``cv2.VideoCapture``.

    Frames come out in OpenCV's native BGR order.

    Example:
        >>> source = OpenCVFrameSource(width=1280, height=720)
        >>> if source.open(0):
        ...     frame = source.read()
        ...     source.release()
    """

    def __init__(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        read_timeout_ms: Optional[int] = None
    ) -> None:
        self._width = width
        self._height = height
        self._read_timeout_ms = read_timeout_ms
        self._cap: Optional[cv2.VideoCapture] = None
        self._index: Optional[int] = None
        self._sequence = 0

    def open(self, device_index: int) -> bool:
        if self.is_open():
            return True

        cap = cv2.VideoCapture(device_index)

        if not cap.isOpened():
            cap.release()
            logger.error(f"Cannot open camera {device_index}")
            return False

        if self._width:
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        if self._height:
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        if self._read_timeout_ms and hasattr(cv2, "CAP_PROP_READ_TIMEOUT_MSEC"):
            cap.set(cv2.CAP_PROP_READ_TIMEOUT_MSEC, self._read_timeout_ms)

        self._cap = cap
        self._index = device_index
        self._sequence = 0

        logger.info(f"📷 Camera {device_index} opened")
        return True

    def read(self) -> Optional[Frame]:
        if not self.is_open():
            return None

        try:
            ret, image = self._cap.read()
        except cv2.error as e:
            logger.warning(f"Frame read error on camera {self._index}: {e}")
            return None

        if not ret or image is None or image.size == 0:
            logger.debug(f"Camera {self._index} returned no frame")
            return None

        self._sequence += 1
        return Frame.from_array(image, sequence=self._sequence)

    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            logger.info(f"📷 Camera {self._index} released")
        self._cap = None

    def describe(self) -> str:
        index = self._index if self._index is not None else "-"
        return f"camera {index}"


class ImageFileFrameSource(FrameSource):
    """
    Frame source that replays one still image on every read.

    Useful for demos and tests on machines without a camera. The device
    index is ignored.
    """

    def __init__(self, image_path: Path) -> None:
        self._image_path = Path(image_path)
        self._image = None
        self._sequence = 0

    def open(self, device_index: int) -> bool:
        if not self._image_path.exists():
            logger.error(f"Image not found: {self._image_path}")
            return False

        image = cv2.imread(str(self._image_path), cv2.IMREAD_COLOR)
        if image is None:
            logger.error(f"Could not read image: {self._image_path}")
            return False

        self._image = image
        self._sequence = 0
        logger.info(f"🖼️ Serving frames from {self._image_path}")
        return True

    def read(self) -> Optional[Frame]:
        if self._image is None:
            return None

        self._sequence += 1
        return Frame.from_array(self._image.copy(), sequence=self._sequence)

    def is_open(self) -> bool:
        return self._image is not None

    def release(self) -> None:
        self._image = None

    def describe(self) -> str:
        return f"image {self._image_path.name}"


def create_frame_source(settings: Settings) -> FrameSource:
    """
    Build the frame source selected by configuration.

    Args:
        settings: Application settings

    Returns:
        Unopened FrameSource instance
    """
    if settings.camera_source == "file":
        if not settings.camera_image_path:
            raise ValueError("camera_image_path is required when camera_source is 'file'")
        return ImageFileFrameSource(Path(settings.camera_image_path))

    return OpenCVFrameSource(
        width=settings.frame_width,
        height=settings.frame_height,
        read_timeout_ms=settings.read_timeout_ms,
    )
