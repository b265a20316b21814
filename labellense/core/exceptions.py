"""
Application Exception Handling

Error codes raised by the capture session, frame converter and HTTP layer,
and the FastAPI handler that renders them as JSON.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# Module logger
logger = logging.getLogger(__name__)


class AppException(Exception):
    """
    Error raised by the scanner service, carrying an HTTP status.

    Lifecycle calls (start, scan) raise it directly; the API layer turns it
    into the JSON error body.

    Usage:
        raise AppException("Camera 0 could not be opened", "DEVICE_UNAVAILABLE", 503)
        raise AppException("Camera is not running", "CAMERA_NOT_RUNNING", 409)

    Error Codes:
        Camera:
            - DEVICE_UNAVAILABLE (503)
            - CAMERA_NOT_RUNNING (409)
            - CAMERA_BUSY (409)

        Frames:
            - FRAME_CONTRACT_VIOLATION (500)

        Catalog:
            - CATALOG_NOT_LOADED (500)
            - CODE_NOT_FOUND (404)

        General:
            - INTERNAL_ERROR (500)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.raised_at = datetime.now(timezone.utc)
        super().__init__(message)

    @property
    def is_server_error(self) -> bool:
        """True for 5xx codes (device and contract faults)."""
        return self.status_code >= 500

    def to_dict(self, path: Optional[str] = None) -> Dict[str, Any]:
        """
        Error body shared by every endpoint.

        Args:
            path: Request path, echoed back when given
        """
        error: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "timestamp": self.raised_at.isoformat(),
        }
        if path:
            error["path"] = path
        if self.details:
            error["details"] = self.details

        return {"success": False, "error": error}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException; 5xx codes are logged as errors."""
    if exc.is_server_error:
        logger.error(f"❌ {exc.code} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(request.url.path)
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the AppException handler on ``app``."""
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def device_unavailable(device: str) -> AppException:
    """Create camera open failure exception."""
    return AppException(
        f"Could not open the camera ({device})",
        "DEVICE_UNAVAILABLE",
        503,
        {"device": device}
    )


def camera_not_running() -> AppException:
    """Create camera not running exception."""
    return AppException("Camera is not running", "CAMERA_NOT_RUNNING", 409)


def frame_contract_violation(expected: int, actual: int, layout: str) -> AppException:
    """Create frame buffer length mismatch exception."""
    return AppException(
        f"Frame buffer holds {actual} values, expected {expected} for {layout}",
        "FRAME_CONTRACT_VIOLATION",
        500,
        {"expected": expected, "actual": actual, "layout": layout}
    )


def catalog_not_loaded() -> AppException:
    """Create catalog not loaded exception."""
    return AppException(
        "Product catalog not loaded",
        "CATALOG_NOT_LOADED",
        500
    )


def code_not_found(code: str) -> AppException:
    """Create unknown product code exception."""
    return AppException(
        f"No product registered for code '{code}'",
        "CODE_NOT_FOUND",
        404,
        {"code": code}
    )


def internal_error(message: str = "Internal server error") -> AppException:
    """Create internal server error exception."""
    return AppException(message, "INTERNAL_ERROR", 500)


def camera_busy(worker: str) -> AppException:
    """Create previous polling thread still running exception."""
    return AppException(
        "Camera is still shutting down, try again shortly",
        "CAMERA_BUSY",
        409,
        {"worker": worker}
    )
