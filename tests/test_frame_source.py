"""
==============================================================================
Frame Source Tests
==============================================================================

Tests for the OpenCV and image-file frame sources.

==============================================================================
"""

import cv2
import numpy as np
import pytest

from labellense.capture import (
    ColorLayout,
    ImageFileFrameSource,
    OpenCVFrameSource,
    create_frame_source,
)
from labellense.capture import source as source_module
from labellense.config import Settings


class FakeVideoCapture:
    """Stand-in for cv2.VideoCapture."""

    instances = []

    def __init__(self, index, opened=True, frames=None):
        self.index = index
        self.opened = opened
        self.frames = list(frames or [])
        self.props = {}
        self.release_calls = 0
        FakeVideoCapture.instances.append(self)

    def isOpened(self):
        return self.opened

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def read(self):
        if not self.frames:
            return False, None
        frame = self.frames.pop(0)
        if isinstance(frame, Exception):
            raise frame
        return True, frame

    def release(self):
        self.release_calls += 1
        self.opened = False


@pytest.fixture
def fake_capture(monkeypatch):
    """Patch cv2.VideoCapture; returns a function configuring the next capture."""
    FakeVideoCapture.instances = []
    config = {"opened": True, "frames": []}

    def factory(index):
        return FakeVideoCapture(index, opened=config["opened"], frames=config["frames"])

    monkeypatch.setattr(source_module.cv2, "VideoCapture", factory)
    return config


class TestOpenCVFrameSource:
    """Tests for the webcam source."""

    def test_open_applies_resolution(self, fake_capture):
        source = OpenCVFrameSource(width=640, height=480)

        assert source.open(1) is True

        capture = FakeVideoCapture.instances[0]
        assert capture.index == 1
        assert capture.props[cv2.CAP_PROP_FRAME_WIDTH] == 640
        assert capture.props[cv2.CAP_PROP_FRAME_HEIGHT] == 480
        assert source.is_open()
        assert source.describe() == "camera 1"

    def test_open_failure_releases_capture(self, fake_capture):
        fake_capture["opened"] = False
        source = OpenCVFrameSource()

        assert source.open(0) is False

        assert FakeVideoCapture.instances[0].release_calls == 1
        assert not source.is_open()

    def test_read_numbers_frames(self, fake_capture):
        image = np.zeros((4, 6, 3), dtype=np.uint8)
        fake_capture["frames"] = [image.copy(), image.copy()]
        source = OpenCVFrameSource()
        source.open(0)

        first, second = source.read(), source.read()

        assert (first.sequence, second.sequence) == (1, 2)
        assert first.layout is ColorLayout.BGR
        assert (first.width, first.height) == (6, 4)

    def test_failed_read_is_none(self, fake_capture):
        fake_capture["frames"] = [cv2.error("driver hiccup")]
        source = OpenCVFrameSource()
        source.open(0)

        assert source.read() is None
        assert source.read() is None

    def test_read_when_closed(self):
        assert OpenCVFrameSource().read() is None

    def test_release_is_idempotent(self, fake_capture):
        source = OpenCVFrameSource()
        source.open(0)

        source.release()
        source.release()

        assert FakeVideoCapture.instances[0].release_calls == 1
        assert not source.is_open()


class TestImageFileFrameSource:
    """Tests for the still-image source."""

    def test_serves_image(self, tmp_path, qr_image):
        path = tmp_path / "label.png"
        cv2.imwrite(str(path), qr_image)
        source = ImageFileFrameSource(path)

        assert source.open(0) is True
        frame = source.read()

        assert (frame.width, frame.height) == (320, 240)
        assert frame.sequence == 1
        assert source.read().sequence == 2

    def test_missing_file(self, tmp_path):
        source = ImageFileFrameSource(tmp_path / "missing.png")

        assert source.open(0) is False
        assert source.read() is None

    def test_release(self, tmp_path, qr_image):
        path = tmp_path / "label.png"
        cv2.imwrite(str(path), qr_image)
        source = ImageFileFrameSource(path)
        source.open(0)

        source.release()

        assert not source.is_open()
        assert source.read() is None


class TestFrameSourceFactory:
    """Tests for create_frame_source."""

    def test_device_source(self):
        source = create_frame_source(Settings(_env_file=None))

        assert isinstance(source, OpenCVFrameSource)

    def test_file_source(self, tmp_path):
        settings = Settings(
            _env_file=None,
            camera_source="file",
            camera_image_path=str(tmp_path / "label.png"),
        )

        assert isinstance(create_frame_source(settings), ImageFileFrameSource)

    def test_file_source_needs_path(self):
        settings = Settings(_env_file=None, camera_source="file", camera_image_path=None)

        with pytest.raises(ValueError):
            create_frame_source(settings)
