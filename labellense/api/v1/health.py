"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from fastapi import APIRouter, Depends

from labellense.catalog import MetadataLookup
from labellense.core.dependencies import get_capture_session, get_metadata_lookup
from labellense.session import CaptureSession


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, session: CaptureSession, lookup: MetadataLookup):
        self._session = session
        self._lookup = lookup

    def check_camera(self) -> str:
        """Camera status: running, idle, or degraded (running without a device)."""
        if not self._session.is_running:
            return "idle"
        if self._session.device_open and self._session.worker_alive:
            return "running"
        return "degraded"

    def check_catalog(self) -> dict:
        """Check catalog status."""
        catalog = self._lookup.catalog
        if catalog:
            return {"status": "healthy", "products": len(catalog.products)}
        return {"status": "not_loaded", "products": 0}

    def get_health(self) -> dict:
        """Get full health status."""
        camera_status = self.check_camera()
        catalog_info = self.check_catalog()

        overall = "degraded" if camera_status == "degraded" else "healthy"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "camera": camera_status,
                "catalog": catalog_info["status"]
            },
            "details": {
                "products_loaded": catalog_info["products"]
            }
        }


@router.get("")
async def health_check(
    session: CaptureSession = Depends(get_capture_session),
    lookup: MetadataLookup = Depends(get_metadata_lookup)
):
    """
    Health check endpoint.

    Returns system status including API, camera, and catalog.
    """
    controller = HealthController(session, lookup)
    return controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
