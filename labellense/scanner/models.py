"""
==============================================================================
Scanner Models Module
==============================================================================

Converted image containers and the tri-state decode outcome.

Outcome Models:
---------------
- Decoded: a symbol was found; carries its primary text
- NotFound: decode attempted, no symbol present (the normal miss)
- DecodeError: decoder-internal fault or unusable input

==============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Literal, Optional, Union

import cv2
import numpy as np
from pydantic import BaseModel, Field


@dataclass(frozen=True)
class DisplayImage:
    """
    Presentation-ready RGB image derived from one frame.

    Attributes:
        pixels: H x W x 3 uint8 array in RGB order
        width: Image width in pixels
        height: Image height in pixels
        channels: Always 3
        sequence: Sequence number of the source frame
    """

    pixels: np.ndarray = field(repr=False)
    width: int
    height: int
    channels: int = 3
    sequence: int = 0

    def encode_jpeg(self, quality: int = 80) -> bytes:
        """Encode as JPEG bytes for transport to a browser client."""
        bgr = cv2.cvtColor(self.pixels, cv2.COLOR_RGB2BGR)
        ok, buf = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, quality])
        if not ok:
            raise ValueError(f"JPEG encoding failed for frame {self.sequence}")
        return buf.tobytes()


@dataclass(frozen=True)
class DecodeBuffer:
    """Luminance grid handed to symbol decoders (H x W uint8)."""

    pixels: np.ndarray = field(repr=False)
    width: int
    height: int
    sequence: int = 0


class Decoded(BaseModel):
    """A symbol was decoded."""

    kind: Literal["decoded"] = "decoded"
    text: str
    symbology: Optional[str] = None


class NotFound(BaseModel):
    """No symbol present in the frame."""

    kind: Literal["not_found"] = "not_found"


class DecodeError(BaseModel):
    """The decoder failed or the input could not be decoded."""

    kind: Literal["error"] = "error"
    message: str


DecodeOutcome = Annotated[
    Union[Decoded, NotFound, DecodeError],
    Field(discriminator="kind"),
]
