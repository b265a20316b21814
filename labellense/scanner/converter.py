"""
==============================================================================
Frame Converter Module
==============================================================================

Turns raw frames into display images (RGB) and decode buffers (gray).

Conversions never change width or height. A frame whose buffer does not
match its declared dimensions is a programming error and raises
FRAME_CONTRACT_VIOLATION instead of producing an image.

==============================================================================
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

from labellense.capture.models import ColorLayout, Frame
from labellense.core import exceptions
from .models import DecodeBuffer, DisplayImage


# Module logger
logger = logging.getLogger(__name__)


# cv2 conversion codes per source layout (None = already in target order)
_TO_RGB = {
    ColorLayout.BGR: cv2.COLOR_BGR2RGB,
    ColorLayout.BGRA: cv2.COLOR_BGRA2RGB,
    ColorLayout.RGB: None,
    ColorLayout.RGBA: cv2.COLOR_RGBA2RGB,
    ColorLayout.GRAY: cv2.COLOR_GRAY2RGB,
}

_TO_GRAY = {
    ColorLayout.BGR: cv2.COLOR_BGR2GRAY,
    ColorLayout.BGRA: cv2.COLOR_BGRA2GRAY,
    ColorLayout.RGB: cv2.COLOR_RGB2GRAY,
    ColorLayout.RGBA: cv2.COLOR_RGBA2GRAY,
    ColorLayout.GRAY: None,
}


class FrameConverter:
    """
    Stateless frame converter.

    Example:
        >>> converter = FrameConverter()
        >>> image = converter.to_display_image(frame)
        >>> buffer = converter.to_decode_buffer(frame)
    """

    def to_display_image(self, frame: Frame) -> DisplayImage:
        """
        Convert a frame to an RGB display image.

        Args:
            frame: Raw frame in any supported layout

        Returns:
            DisplayImage with the frame's width, height and sequence
        """
        pixels = self._checked_pixels(frame)
        code = _TO_RGB[frame.layout]

        rgb = pixels.copy() if code is None else cv2.cvtColor(pixels, code)
        self._check_shape(rgb, (frame.height, frame.width, 3), frame)

        return DisplayImage(
            pixels=rgb,
            width=frame.width,
            height=frame.height,
            channels=3,
            sequence=frame.sequence,
        )

    def to_decode_buffer(self, frame: Frame) -> DecodeBuffer:
        """
        Convert a frame to a single-channel luminance buffer.

        Args:
            frame: Raw frame in any supported layout

        Returns:
            DecodeBuffer of shape (height, width)
        """
        pixels = self._checked_pixels(frame)
        code = _TO_GRAY[frame.layout]

        gray = pixels.copy() if code is None else cv2.cvtColor(pixels, code)
        gray = np.ascontiguousarray(gray)
        self._check_shape(gray, (frame.height, frame.width), frame)

        return DecodeBuffer(
            pixels=gray,
            width=frame.width,
            height=frame.height,
            sequence=frame.sequence,
        )

    @staticmethod
    def _checked_pixels(frame: Frame) -> np.ndarray:
        """Validate the raw buffer against the frame header and shape it."""
        pixels = frame.pixels

        if pixels.dtype != np.uint8 or pixels.size != frame.expected_size:
            logger.error(
                f"Frame {frame.sequence} buffer mismatch: "
                f"{pixels.size} values ({pixels.dtype}), "
                f"expected {frame.expected_size} for {frame.layout.value}"
            )
            raise exceptions.frame_contract_violation(
                frame.expected_size, int(pixels.size), frame.layout.value
            )

        if frame.channels == 1:
            return pixels.reshape(frame.height, frame.width)
        return pixels.reshape(frame.height, frame.width, frame.channels)

    @staticmethod
    def _check_shape(result: np.ndarray, expected: tuple, frame: Frame) -> None:
        if result.shape != expected:
            raise exceptions.frame_contract_violation(
                int(np.prod(expected)), int(result.size), frame.layout.value
            )
