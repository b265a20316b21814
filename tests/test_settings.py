"""
==============================================================================
Settings Tests
==============================================================================

Tests for configuration parsing and validation.

==============================================================================
"""

import pytest
from pydantic import ValidationError

from labellense.config import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.camera_source == "device"
        assert settings.camera_index == 0
        assert settings.decoder_backend == "pyzbar"
        assert settings.symbology_list == []

    def test_symbology_list(self):
        settings = Settings(_env_file=None, symbologies=" ean13, qrcode ,,")

        assert settings.symbology_list == ["EAN13", "QRCODE"]

    def test_backend_is_normalized(self):
        assert Settings(_env_file=None, decoder_backend=" OpenCV ").decoder_backend == "opencv"

    def test_unknown_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, decoder_backend="zxing")

    def test_unknown_camera_source(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, camera_source="network")

    def test_negative_camera_index(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, camera_index=-1)

    def test_unknown_env_falls_back(self):
        assert Settings(_env_file=None, app_env="qa").app_env == "development"

    def test_cors_origins(self):
        assert Settings(_env_file=None, cors_origins='["http://a"]').cors_origins_list == ["http://a"]
        assert Settings(_env_file=None, cors_origins="not json").cors_origins_list == ["*"]

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("CAMERA_INDEX", "3")
        monkeypatch.setenv("SYMBOLOGIES", "CODE128")

        settings = Settings(_env_file=None)

        assert settings.camera_index == 3
        assert settings.symbology_list == ["CODE128"]
