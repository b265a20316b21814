"""
==============================================================================
Camera Endpoints
==============================================================================

Start/stop the camera preview and request single-frame scans.

Camera operations block for up to one frame read, so the handlers are
plain ``def`` functions and run in FastAPI's threadpool.

==============================================================================
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response

from labellense.catalog import MetadataLookup
from labellense.config import get_settings
from labellense.core.dependencies import (
    get_capture_session,
    get_metadata_lookup,
    get_preview_hub,
    get_scan_logger,
)
from labellense.scanner import DecodeOutcome, Decoded, NotFound
from labellense.schemas import CameraActionResponse, CameraStatusResponse, ScanResponse
from labellense.session import CaptureSession, PreviewHub
from labellense.utils import ScanLogger


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/camera", tags=["Camera"])


class CameraController:
    """Controller for camera and scan operations."""

    def __init__(
        self,
        session: CaptureSession,
        lookup: Optional[MetadataLookup] = None,
        scan_logger: Optional[ScanLogger] = None
    ):
        self._session = session
        self._lookup = lookup
        self._scan_logger = scan_logger

    def start(self) -> dict:
        """Start the camera preview."""
        changed = self._session.start()
        return {
            "success": True,
            "state": self._session.state.value,
            "changed": changed,
            "message": "Camera started" if changed else "Camera already running",
        }

    def stop(self) -> dict:
        """Stop the camera preview."""
        changed = self._session.stop()
        return {
            "success": True,
            "state": self._session.state.value,
            "changed": changed,
            "message": "Camera stopped" if changed else "Camera already stopped",
        }

    def scan(self) -> dict:
        """Scan one frame and describe the outcome for the operator."""
        outcome = self._session.scan_once()
        message = self.describe_outcome(outcome)

        product_info = None
        if isinstance(outcome, Decoded) and self._lookup is not None:
            product_info = self._lookup.lookup(outcome.text)

        if self._scan_logger is not None:
            try:
                self._scan_logger.record(message, product_info)
            except OSError as e:
                logger.error(f"Could not write scan history: {e}")

        return {
            "success": True,
            "outcome": outcome,
            "message": message,
            "product_info": product_info,
        }

    @staticmethod
    def describe_outcome(outcome: DecodeOutcome) -> str:
        """Operator-facing result line."""
        if isinstance(outcome, Decoded):
            return f"Scanned Barcode: {outcome.text}"
        if isinstance(outcome, NotFound):
            return "No barcode detected in this frame."
        return f"Scan failed: {outcome.message}"


@router.get("/status", response_model=CameraStatusResponse)
def camera_status(
    session: CaptureSession = Depends(get_capture_session),
    hub: PreviewHub = Depends(get_preview_hub)
):
    """Current session state and frame counters."""
    return {
        "success": True,
        **session.get_status(),
        "preview_subscribers": hub.subscriber_count,
    }


@router.post("/start", response_model=CameraActionResponse)
def start_camera(session: CaptureSession = Depends(get_capture_session)):
    """
    Open the camera and start the live preview.

    Responds 503 DEVICE_UNAVAILABLE when the camera cannot be opened and
    409 CAMERA_BUSY while the previous preview thread is still exiting.
    """
    return CameraController(session).start()


@router.post("/stop", response_model=CameraActionResponse)
def stop_camera(session: CaptureSession = Depends(get_capture_session)):
    """Stop the live preview and release the camera."""
    return CameraController(session).stop()


@router.post("/scan", response_model=ScanResponse)
def scan_frame(
    session: CaptureSession = Depends(get_capture_session),
    lookup: MetadataLookup = Depends(get_metadata_lookup),
    scan_logger: Optional[ScanLogger] = Depends(get_scan_logger)
):
    """
    Grab one frame and try to decode a barcode/QR code in it.

    Responds 409 CAMERA_NOT_RUNNING when the camera is stopped.
    """
    return CameraController(session, lookup, scan_logger).scan()


@router.get(
    "/frame",
    responses={200: {"content": {"image/jpeg": {}}}, 204: {"description": "No frame yet"}},
)
def latest_frame(hub: PreviewHub = Depends(get_preview_hub)):
    """Latest preview frame as JPEG."""
    image = hub.latest()
    if image is None:
        return Response(status_code=204)

    content = image.encode_jpeg(get_settings().preview_jpeg_quality)
    return Response(
        content=content,
        media_type="image/jpeg",
        headers={"X-Frame-Sequence": str(image.sequence)},
    )
