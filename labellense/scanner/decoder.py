"""
==============================================================================
Symbol Decoder Module
==============================================================================

Adapters over external barcode/QR decoding libraries.

Every decoder takes a luminance DecodeBuffer and returns one DecodeOutcome:

- Decoded(text)         best symbol in the frame
- NotFound()            nothing readable in the frame
- DecodeError(message)  malformed input or a fault inside the library

Backends:
---------
- PyZbarDecoder: zbar via pyzbar (1D barcodes and QR)
- OpenCVQRDecoder: cv2.QRCodeDetector (QR only)

==============================================================================
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import cv2
import numpy as np
from pyzbar.pyzbar import ZBarSymbol, decode as zbar_decode
from pyzbar.pyzbar_error import PyZbarError

from labellense.config import Settings
from .models import DecodeBuffer, DecodeError, DecodeOutcome, Decoded, NotFound


# Module logger
logger = logging.getLogger(__name__)


class SymbolDecoder(ABC):
    """Single-symbol decoder over a 2D luminance grid."""

    name = "decoder"

    def decode(self, buffer: DecodeBuffer) -> DecodeOutcome:
        """
        Decode the best symbol in the buffer.

        Args:
            buffer: Gray image of shape (height, width)

        Returns:
            Decoded, NotFound or DecodeError
        """
        problem = self._check_buffer(buffer)
        if problem:
            logger.warning(f"{self.name}: {problem}")
            return DecodeError(message=problem)

        return self._decode(buffer)

    @abstractmethod
    def _decode(self, buffer: DecodeBuffer) -> DecodeOutcome:
        """Backend-specific decode on a validated buffer."""

    @staticmethod
    def _check_buffer(buffer: DecodeBuffer) -> Optional[str]:
        pixels = buffer.pixels

        if not isinstance(pixels, np.ndarray):
            return f"malformed decode buffer: {type(pixels).__name__} is not an array"
        if pixels.ndim != 2:
            return f"malformed decode buffer: expected 2 dimensions, got {pixels.ndim}"
        if pixels.dtype != np.uint8:
            return f"unsupported pixel format: {pixels.dtype}"
        if pixels.shape != (buffer.height, buffer.width):
            return (
                f"malformed decode buffer: shape {pixels.shape} "
                f"does not match {buffer.width}x{buffer.height}"
            )
        if pixels.size == 0:
            return "malformed decode buffer: empty image"
        return None


class PyZbarDecoder(SymbolDecoder):
    """
    zbar-backed decoder.

    When several symbols are visible, the one zbar reports with the highest
    quality wins (first reported on ties).

    Example:
        >>> decoder = PyZbarDecoder(["QRCODE", "EAN13"])
        >>> outcome = decoder.decode(buffer)
    """

    name = "pyzbar"

    def __init__(self, symbologies: Optional[List[str]] = None) -> None:
        """
        Initialize decoder.

        Args:
            symbologies: zbar symbol names to look for (None/empty = all)

        Raises:
            ValueError: If a symbol name is unknown to zbar
        """
        self._symbols = None

        if symbologies:
            try:
                self._symbols = [ZBarSymbol[name.upper()] for name in symbologies]
            except KeyError as e:
                raise ValueError(f"Unknown zbar symbology: {e.args[0]}") from e

    def _decode(self, buffer: DecodeBuffer) -> DecodeOutcome:
        try:
            results = zbar_decode(
                (buffer.pixels.tobytes(), buffer.width, buffer.height),
                symbols=self._symbols,
            )
        except (PyZbarError, TypeError, ValueError) as e:
            logger.error(f"Decode error: {e}")
            return DecodeError(message=str(e))

        if not results:
            return NotFound()

        best = max(results, key=lambda r: getattr(r, "quality", 0) or 0)
        text = best.data.decode("utf-8", errors="replace")

        logger.debug(f"Decoded {best.type}: {text}")
        return Decoded(text=text, symbology=best.type)


class OpenCVQRDecoder(SymbolDecoder):
    """QR-only decoder using OpenCV's built-in detector."""

    name = "opencv"

    def _decode(self, buffer: DecodeBuffer) -> DecodeOutcome:
        # QRCodeDetector keeps internal state; one per call keeps it thread-safe
        detector = cv2.QRCodeDetector()

        try:
            text, points, _ = detector.detectAndDecode(buffer.pixels)
        except cv2.error as e:
            logger.error(f"Decode error: {e}")
            return DecodeError(message=str(e))

        if not text:
            return NotFound()

        logger.debug(f"Decoded QRCODE: {text}")
        return Decoded(text=text, symbology="QRCODE")


def create_decoder(settings: Settings) -> SymbolDecoder:
    """
    Build the decoder selected by configuration.

    Args:
        settings: Application settings

    Returns:
        SymbolDecoder instance
    """
    if settings.decoder_backend == "opencv":
        return OpenCVQRDecoder()

    return PyZbarDecoder(settings.symbology_list)
