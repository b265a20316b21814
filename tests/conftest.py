"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides synthetic frames, fake frame sources, recording sinks, capture
sessions and an API test client wired to them.

==============================================================================
"""

import json
import threading
import time
from typing import Callable, Generator, List, Optional

import cv2
import numpy as np
import pytest
import qrcode
from fastapi.testclient import TestClient

from labellense.capture import Frame, FrameSource
from labellense.catalog import MetadataLookup, ProductCatalog
from labellense.core.dependencies import AppServices
from labellense.main import Application
from labellense.scanner import DisplayImage, FrameConverter, PyZbarDecoder, SymbolDecoder
from labellense.session import CaptureSession, DisplaySink, PreviewHub
from labellense.utils import ScanLogger


QR_TEXT = "4006381333931"


# ============================================================================
# SYNTHETIC IMAGES
# ============================================================================

def render_qr(text: str, box_size: int = 6, width: int = 320, height: int = 240) -> np.ndarray:
    """Render a QR code centred on a white BGR canvas."""
    qr = qrcode.QRCode(box_size=1, border=4)
    qr.add_data(text)
    qr.make(fit=True)

    modules = np.array(qr.get_matrix(), dtype=bool)
    gray = np.where(modules, 0, 255).astype(np.uint8)
    gray = np.kron(gray, np.ones((box_size, box_size), dtype=np.uint8))

    canvas = np.full((height, width), 255, dtype=np.uint8)
    top = (height - gray.shape[0]) // 2
    left = (width - gray.shape[1]) // 2
    canvas[top:top + gray.shape[0], left:left + gray.shape[1]] = gray

    return cv2.cvtColor(canvas, cv2.COLOR_GRAY2BGR)


@pytest.fixture
def qr_text() -> str:
    return QR_TEXT


@pytest.fixture
def qr_image() -> np.ndarray:
    """BGR image carrying QR_TEXT."""
    return render_qr(QR_TEXT)


@pytest.fixture
def blank_image() -> np.ndarray:
    """BGR image with no symbol in it."""
    image = np.full((240, 320, 3), 200, dtype=np.uint8)
    cv2.rectangle(image, (40, 40), (120, 120), (30, 60, 90), -1)
    return image


# ============================================================================
# FAKE FRAME SOURCE
# ============================================================================

class FakeFrameSource(FrameSource):
    """
    In-memory frame source.

    Returns copies of ``image`` (None = device yields no frames) and
    records how it was used.
    """

    def __init__(
        self,
        image: Optional[np.ndarray] = None,
        fail_open: bool = False,
        read_delay: float = 0.005,
        fail_reads: int = 0
    ):
        self.image = image
        self.fail_open = fail_open
        self.read_delay = read_delay
        self.fail_reads = fail_reads

        self.open_calls = 0
        self.release_calls = 0
        self.reads = 0
        self.reads_while_closed = 0
        self.max_concurrent_reads = 0

        self._open = False
        self._sequence = 0
        self._active_reads = 0
        self._lock = threading.Lock()

    def open(self, device_index: int) -> bool:
        self.open_calls += 1
        if self.fail_open:
            return False
        self._open = True
        return True

    def read(self) -> Optional[Frame]:
        with self._lock:
            self._active_reads += 1
            self.max_concurrent_reads = max(self.max_concurrent_reads, self._active_reads)
            self.reads += 1

        try:
            if not self._open:
                self.reads_while_closed += 1
                return None

            if self.read_delay:
                time.sleep(self.read_delay)

            if self.fail_reads > 0:
                self.fail_reads -= 1
                raise RuntimeError("simulated driver fault")

            if self.image is None:
                return None

            self._sequence += 1
            return Frame.from_array(self.image.copy(), sequence=self._sequence)
        finally:
            with self._lock:
                self._active_reads -= 1

    def is_open(self) -> bool:
        return self._open

    def release(self) -> None:
        self.release_calls += 1
        self._open = False

    def describe(self) -> str:
        return "fake camera"


@pytest.fixture
def make_source() -> Callable[..., FakeFrameSource]:
    """Factory for FakeFrameSource instances."""
    return FakeFrameSource


# ============================================================================
# RECORDING SINK
# ============================================================================

class RecordingSink(DisplaySink):
    """Display sink that keeps every image it receives."""

    def __init__(self):
        self.images: List[DisplayImage] = []
        self.clears = 0
        self.events: List[str] = []
        self._cond = threading.Condition()

    def on_display_image(self, image: DisplayImage) -> None:
        with self._cond:
            self.images.append(image)
            self.events.append("image")
            self._cond.notify_all()

    def on_clear(self) -> None:
        with self._cond:
            self.clears += 1
            self.events.append("clear")
            self._cond.notify_all()

    def wait_for(self, count: int, timeout: float = 5.0) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: len(self.images) >= count, timeout)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


# ============================================================================
# SESSION FIXTURES
# ============================================================================

@pytest.fixture
def make_session() -> Generator[Callable[..., CaptureSession], None, None]:
    """Factory for capture sessions; every session is shut down afterwards."""
    sessions: List[CaptureSession] = []

    def factory(
        source: FrameSource,
        sink: Optional[DisplaySink] = None,
        decoder: Optional[SymbolDecoder] = None,
        **kwargs
    ) -> CaptureSession:
        kwargs.setdefault("frame_retry_delay_s", 0.005)
        session = CaptureSession(
            source,
            FrameConverter(),
            decoder or PyZbarDecoder(),
            sink=sink,
            **kwargs
        )
        sessions.append(session)
        return session

    yield factory

    for session in sessions:
        session.shutdown()


# ============================================================================
# API FIXTURES
# ============================================================================

@pytest.fixture
def catalog(tmp_path) -> ProductCatalog:
    """Catalog that knows QR_TEXT."""
    products_file = tmp_path / "products.json"
    products_file.write_text(json.dumps({
        "ambient": {
            "Cereal": [
                {"name": "Rolled Oats 1kg", "code": QR_TEXT, "calories": 150,
                 "total_fat": "2.8g", "sugars": "0.4g"}
            ]
        }
    }), encoding="utf-8")
    return ProductCatalog(products_file)


@pytest.fixture
def make_client(
    tmp_path,
    catalog: ProductCatalog
) -> Generator[Callable[[FrameSource], TestClient], None, None]:
    """Factory for API clients backed by a given frame source."""
    clients: List[TestClient] = []

    def factory(source: FrameSource) -> TestClient:
        hub = PreviewHub(queue_size=2)
        session = CaptureSession(
            source,
            FrameConverter(),
            PyZbarDecoder(),
            sink=hub,
            frame_retry_delay_s=0.005,
        )
        services = AppServices(
            session=session,
            preview_hub=hub,
            lookup=MetadataLookup(catalog),
            scan_logger=ScanLogger(tmp_path / "logs"),
        )
        client = TestClient(Application(services=services).app)
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, qr_image) -> TestClient:
    """API client whose camera shows a QR code."""
    return make_client(FakeFrameSource(image=qr_image))


class SlowSink(RecordingSink):
    """Recording sink whose image callback blocks for ``delay`` seconds."""

    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay
        self.entered = threading.Event()

    def on_display_image(self, image: DisplayImage) -> None:
        self.entered.set()
        time.sleep(self.delay)
        super().on_display_image(image)


@pytest.fixture
def make_slow_sink() -> Callable[[float], SlowSink]:
    return SlowSink
