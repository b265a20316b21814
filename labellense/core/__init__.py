"""
==============================================================================
Core Package
==============================================================================

Core utilities and infrastructure for the application.

This package provides:
- Custom exception handling with consistent error responses
- Exception factory functions for common error scenarios
- FastAPI dependencies for the capture session and metadata lookup

Modules:
--------
- exceptions: AppException class and error factory functions
- dependencies: Application service registry and FastAPI dependencies

Usage:
------
    from labellense.core import AppException
    from labellense.core import exceptions
    raise exceptions.camera_not_running()

    from labellense.core.dependencies import get_capture_session

==============================================================================
"""

from .exceptions import (
    AppException,
    register_exception_handlers,
)

__all__ = [
    "AppException",
    "register_exception_handlers",
]
