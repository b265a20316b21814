"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management for the camera scanner using Pydantic Settings.

This module implements the Singleton pattern to ensure a single global
configuration instance throughout the application lifecycle.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Camera, decoder and preview tuning knobs
- Thread-safe singleton implementation

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


CAMERA_SOURCES = {"device", "file"}
DECODER_BACKENDS = {"pyzbar", "opencv"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        camera_source: Frame source kind ("device" or "file")
        camera_index: Capture device index (0 = first camera)
        camera_image_path: Still image served by the "file" source
        frame_width: Requested capture width (None = device default)
        frame_height: Requested capture height (None = device default)
        read_timeout_ms: Backend read timeout where supported
        poll_interval_ms: Pause between polling iterations
        frame_retry_delay_ms: Pause after the device returned no frame
        worker_join_timeout_s: Bounded wait for a stale polling thread
        device_release_timeout_s: Bounded wait for the device on shutdown
        decoder_backend: Symbol decoder ("pyzbar" or "opencv")
        symbologies: Comma-separated pyzbar symbol names (empty = all)
        preview_jpeg_quality: JPEG quality for streamed preview frames
        preview_queue_size: Per-subscriber preview backlog
        products_file: Path to product metadata JSON
        scan_log_enabled: Write scan history files
        log_directory: Directory for scan history files
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings()
        >>> print(settings.camera_index)
        0
        >>> print(settings.symbology_list)
        []
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="LabelLense Scanner API",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=True,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # CAMERA SETTINGS
    # =========================================================================
    camera_source: str = Field(
        default="device",
        description="Frame source: 'device' (webcam) or 'file' (still image)"
    )

    camera_index: int = Field(
        default=0,
        ge=0,
        description="Capture device index"
    )

    camera_image_path: Optional[str] = Field(
        default=None,
        description="Image served by the 'file' frame source"
    )

    frame_width: Optional[int] = Field(
        default=None,
        ge=1,
        description="Requested capture width"
    )

    frame_height: Optional[int] = Field(
        default=None,
        ge=1,
        description="Requested capture height"
    )

    read_timeout_ms: Optional[int] = Field(
        default=None,
        ge=1,
        description="Backend read timeout in milliseconds"
    )

    # =========================================================================
    # POLLING LOOP SETTINGS
    # =========================================================================
    poll_interval_ms: int = Field(
        default=0,
        ge=0,
        le=5000,
        description="Pause between polling iterations"
    )

    frame_retry_delay_ms: int = Field(
        default=10,
        ge=0,
        le=5000,
        description="Pause after a missed frame"
    )

    worker_join_timeout_s: float = Field(
        default=1.0,
        ge=0,
        le=30,
        description="Bounded wait for a stale polling thread on restart"
    )

    device_release_timeout_s: float = Field(
        default=2.0,
        ge=0,
        le=30,
        description="Bounded wait for the device lock during shutdown"
    )

    # =========================================================================
    # DECODER SETTINGS
    # =========================================================================
    decoder_backend: str = Field(
        default="pyzbar",
        description="Symbol decoder backend: pyzbar or opencv"
    )

    symbologies: str = Field(
        default="",
        description="Comma-separated symbol types to decode (empty = all)"
    )

    # =========================================================================
    # PREVIEW SETTINGS
    # =========================================================================
    preview_jpeg_quality: int = Field(
        default=80,
        ge=1,
        le=100,
        description="JPEG quality for preview frames"
    )

    preview_queue_size: int = Field(
        default=2,
        ge=1,
        le=100,
        description="Preview frames buffered per subscriber"
    )

    # =========================================================================
    # FILE PATH SETTINGS
    # =========================================================================
    products_file: str = Field(
        default="data/products.json",
        description="Path to product metadata JSON"
    )

    scan_log_enabled: bool = Field(
        default=True,
        description="Write scan results to daily history files"
    )

    log_directory: str = Field(
        default="storage/logs",
        description="Directory for scan history files"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Args:
            value: Raw environment value

        Returns:
            Lowercase normalized environment name
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("camera_source")
    @classmethod
    def validate_camera_source(cls, value: str) -> str:
        """Validate the frame source kind."""
        normalized = value.lower().strip()

        if normalized not in CAMERA_SOURCES:
            raise ValueError(
                f"Unsupported camera source: {value}. "
                f"Supported: {', '.join(sorted(CAMERA_SOURCES))}"
            )

        return normalized

    @field_validator("decoder_backend")
    @classmethod
    def validate_decoder_backend(cls, value: str) -> str:
        """
        Validate decoder backend is supported.

        Args:
            value: Backend name

        Returns:
            Validated backend name

        Raises:
            ValueError: If backend is not supported
        """
        normalized = value.lower().strip()

        if normalized not in DECODER_BACKENDS:
            raise ValueError(
                f"Unsupported decoder backend: {value}. "
                f"Supported: {', '.join(sorted(DECODER_BACKENDS))}"
            )

        return normalized

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def log_path(self) -> Path:
        """
        Get log directory as Path object.

        Creates the directory if it doesn't exist.
        """
        path = Path(self.log_directory)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def products_path(self) -> Path:
        """Get products file as Path object."""
        return Path(self.products_file)

    @property
    def symbology_list(self) -> List[str]:
        """Parse symbologies into upper-case names."""
        return [
            name.strip().upper()
            for name in self.symbologies.split(",")
            if name.strip()
        ]

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def ensure_directories(self) -> None:
        """Create the scan history directory when scan logging is enabled."""
        if self.scan_log_enabled:
            self.log_path.mkdir(parents=True, exist_ok=True)

        logger.debug("Required directories created/verified")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"camera_source={self.camera_source!r}, "
            f"camera_index={self.camera_index}, "
            f"decoder_backend={self.decoder_backend!r})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance (singleton pattern).

    Uses lru_cache to ensure only one Settings instance is created
    throughout the application lifecycle.

    Returns:
        Global Settings instance
    """
    settings = Settings()

    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
