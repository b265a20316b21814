"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Application service container and dependency injection helpers.

The capture session, preview hub, metadata lookup and scan logger are
created once per application and stored on ``app.state.services``. Route
handlers and WebSocket handlers receive them through FastAPI's dependency
injection system.

Dependency Hierarchy:
--------------------
                    ┌─────────────────┐
                    │ get_services()  │
                    └────────┬────────┘
                             │
        ┌──────────────┬─────┴────────┬──────────────────┐
        │              │              │                  │
┌───────▼──────┐ ┌─────▼──────┐ ┌─────▼───────┐ ┌────────▼───────┐
│capture_session│ │preview_hub │ │metadata_    │ │ scan_logger    │
│               │ │            │ │lookup       │ │                │
└──────────────┘ └────────────┘ └─────────────┘ └────────────────┘

Usage Examples:
--------------
    @router.post("/start")
    def start(session: CaptureSession = Depends(get_capture_session)):
        session.start()

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends
from fastapi.requests import HTTPConnection

from labellense.catalog import MetadataLookup, get_catalog
from labellense.config import Settings
from labellense.core import exceptions
from labellense.session import CaptureSession, PreviewHub
from labellense.utils import ScanLogger


# Module logger
logger = logging.getLogger(__name__)


class AppServices:
    """
    Container for the long-lived application services.

    Attributes:
        session: Camera capture session
        preview_hub: Display sink shared by preview clients
        lookup: Metadata lookup for decoded codes
        scan_logger: Scan history writer (None when disabled)
    """

    def __init__(
        self,
        session: CaptureSession,
        preview_hub: PreviewHub,
        lookup: MetadataLookup,
        scan_logger: Optional[ScanLogger] = None
    ) -> None:
        self.session = session
        self.preview_hub = preview_hub
        self.lookup = lookup
        self.scan_logger = scan_logger

        if session.sink is None:
            session.sink = preview_hub

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppServices":
        """
        Build the services described by configuration.

        The catalog must already be initialised for lookups to use it.
        """
        preview_hub = PreviewHub(queue_size=settings.preview_queue_size)
        session = CaptureSession.from_settings(settings, sink=preview_hub)
        scan_logger = ScanLogger(settings.log_path) if settings.scan_log_enabled else None

        logger.debug(
            f"Services created: source={settings.camera_source}, "
            f"decoder={settings.decoder_backend}"
        )

        return cls(
            session=session,
            preview_hub=preview_hub,
            lookup=MetadataLookup(get_catalog()),
            scan_logger=scan_logger,
        )


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_services(connection: HTTPConnection) -> AppServices:
    """Resolve the service container for HTTP and WebSocket routes."""
    services = getattr(connection.app.state, "services", None)
    if services is None:
        raise exceptions.internal_error("Application services not initialised")
    return services


def get_capture_session(services: AppServices = Depends(get_services)) -> CaptureSession:
    return services.session


def get_preview_hub(services: AppServices = Depends(get_services)) -> PreviewHub:
    return services.preview_hub


def get_metadata_lookup(services: AppServices = Depends(get_services)) -> MetadataLookup:
    return services.lookup


def get_scan_logger(services: AppServices = Depends(get_services)) -> Optional[ScanLogger]:
    return services.scan_logger
