"""
==============================================================================
Frame Models Module
==============================================================================

Immutable raw frame container produced by frame sources.

==============================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np


class ColorLayout(str, Enum):
    """Channel order of a raw frame buffer."""

    BGR = "BGR"
    BGRA = "BGRA"
    RGB = "RGB"
    RGBA = "RGBA"
    GRAY = "GRAY"

    @property
    def channels(self) -> int:
        """Number of interleaved channels for this layout."""
        return {
            ColorLayout.BGR: 3,
            ColorLayout.BGRA: 4,
            ColorLayout.RGB: 3,
            ColorLayout.RGBA: 4,
            ColorLayout.GRAY: 1,
        }[self]

    @classmethod
    def native_for_shape(cls, shape: Tuple[int, ...]) -> "ColorLayout":
        """
        Guess the OpenCV-native layout for an array shape.

        OpenCV hands out BGR(A) for colour images and a 2D array for gray.
        """
        if len(shape) == 2 or (len(shape) == 3 and shape[2] == 1):
            return cls.GRAY
        if len(shape) == 3 and shape[2] == 3:
            return cls.BGR
        if len(shape) == 3 and shape[2] == 4:
            return cls.BGRA
        raise ValueError(f"Unsupported frame shape: {shape}")


@dataclass(frozen=True)
class Frame:
    """
    One raw image sample pulled from a capture device.

    Attributes:
        pixels: Read-only uint8 pixel buffer (H x W or H x W x C)
        width: Frame width in pixels
        height: Frame height in pixels
        channels: Interleaved channel count
        layout: Channel order of ``pixels``
        sequence: Per-source capture counter
        captured_at: Monotonic capture timestamp
    """

    pixels: np.ndarray = field(repr=False)
    width: int
    height: int
    channels: int
    layout: ColorLayout
    sequence: int = 0
    captured_at: float = field(default_factory=time.monotonic)

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        layout: Optional[ColorLayout] = None,
        sequence: int = 0
    ) -> "Frame":
        """
        Wrap an OpenCV image array as a Frame.

        Args:
            array: uint8 image array as returned by OpenCV
            layout: Channel order (guessed from the shape when omitted)
            sequence: Capture counter assigned by the source

        Returns:
            Frame holding a read-only view of ``array``
        """
        if layout is None:
            layout = ColorLayout.native_for_shape(array.shape)

        height, width = array.shape[:2]
        array.setflags(write=False)

        return cls(
            pixels=array,
            width=int(width),
            height=int(height),
            channels=layout.channels,
            layout=layout,
            sequence=sequence,
        )

    @property
    def pixel_count(self) -> int:
        """Number of pixels (width x height)."""
        return self.width * self.height

    @property
    def expected_size(self) -> int:
        """Buffer length implied by the frame's dimensions and layout."""
        return self.width * self.height * self.channels
