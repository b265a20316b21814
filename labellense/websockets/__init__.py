"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers.

Handlers:
---------
- preview: Live camera preview stream

==============================================================================
"""

from .preview import router as preview_router

__all__ = ["preview_router"]
