"""
==============================================================================
Utilities Package
==============================================================================

Utility classes and functions for the application.

Modules:
--------
- scan_logger: Daily scan history files

==============================================================================
"""

from .scan_logger import ScanLogger

__all__ = [
    "ScanLogger",
]
