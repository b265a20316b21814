"""
==============================================================================
Scanner Package - Frame Conversion & Symbol Decoding
==============================================================================

Barcode decoding with OpenCV and pyzbar.

Classes:
--------
- FrameConverter: Raw frame -> display image / decode buffer
- SymbolDecoder: Decoder interface (PyZbarDecoder, OpenCVQRDecoder)
- Decoded / NotFound / DecodeError: Decode outcomes

==============================================================================
"""

from .converter import FrameConverter
from .decoder import OpenCVQRDecoder, PyZbarDecoder, SymbolDecoder, create_decoder
from .models import (
    DecodeBuffer,
    DecodeError,
    DecodeOutcome,
    Decoded,
    DisplayImage,
    NotFound,
)

__all__ = [
    "FrameConverter",
    "SymbolDecoder",
    "PyZbarDecoder",
    "OpenCVQRDecoder",
    "create_decoder",
    "DecodeBuffer",
    "DisplayImage",
    "DecodeOutcome",
    "Decoded",
    "NotFound",
    "DecodeError",
]
