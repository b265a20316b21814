"""
==============================================================================
Capture Session Module
==============================================================================

State machine that owns the camera and the background preview loop.

States:
-------
    IDLE  --start()-->  RUNNING  --stop()/shutdown()-->  IDLE

While RUNNING, one daemon thread repeatedly reads a frame, converts it to
a display image and hands it to the DisplaySink. ``scan_once()`` pulls its
own frame and runs it through the symbol decoder.

Threading Model:
----------------
- Each polling thread gets its own cancellation Event; only the session
  sets it and only that thread waits on it.
- The device lock serialises every device access (preview reads, scan
  reads, release). The polling thread checks its Event while holding the
  lock, so once ``stop()`` has set the Event and released the device the
  thread never touches the device again.
- Sink callbacks run without any session lock held. An image already in
  flight when ``stop()`` clears the display is followed by another clear
  from the polling thread, so the display always ends up cleared.
- ``stop()`` and ``shutdown()`` never join the polling thread. ``start()``
  waits at most ``worker_join_timeout_s`` for a previous one and refuses
  with CAMERA_BUSY while it is still alive.

==============================================================================
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from labellense.capture import FrameSource, create_frame_source
from labellense.config import Settings
from labellense.core import exceptions
from labellense.scanner import (
    DecodeError,
    DecodeOutcome,
    DisplayImage,
    FrameConverter,
    SymbolDecoder,
    create_decoder,
)


# Module logger
logger = logging.getLogger(__name__)


NO_FRAME_MESSAGE = "no frame available"


class SessionState(str, Enum):
    """Capture session states."""

    IDLE = "idle"
    RUNNING = "running"


class DisplaySink(ABC):
    """
    Receiver of display images produced by the polling loop.

    ``on_display_image`` is called on the polling thread; implementations
    hand the image over to their own thread or event loop.
    """

    @abstractmethod
    def on_display_image(self, image: DisplayImage) -> None:
        """Accept the next display image (capture order)."""

    def on_clear(self) -> None:
        """Drop whatever image is currently shown."""


class CaptureSession:
    """
    Camera session with background preview and on-demand decode.

    Attributes:
        state: Current SessionState
        frames_delivered: Display images handed to the sink
        frames_missed: Reads that returned no frame

    Example:
        >>> session = CaptureSession(source, FrameConverter(), decoder, sink)
        >>> session.start()
        True
        >>> outcome = session.scan_once()
        >>> session.stop()
        True
    """

    def __init__(
        self,
        source: FrameSource,
        converter: FrameConverter,
        decoder: SymbolDecoder,
        sink: Optional[DisplaySink] = None,
        device_index: int = 0,
        poll_interval_s: float = 0.0,
        frame_retry_delay_s: float = 0.01,
        worker_join_timeout_s: float = 1.0,
        device_release_timeout_s: float = 2.0
    ) -> None:
        """
        Initialize session in IDLE state.

        Args:
            source: Unopened frame source
            converter: Frame converter
            decoder: Symbol decoder used by scan_once()
            sink: Receiver for preview images (optional)
            device_index: Index passed to source.open()
            poll_interval_s: Pause between polling iterations
            frame_retry_delay_s: Pause after a missed frame
            worker_join_timeout_s: Bounded wait for a stale thread on restart
            device_release_timeout_s: Bounded wait for the device on shutdown
        """
        self._source = source
        self._converter = converter
        self._decoder = decoder
        self._sink = sink
        self._device_index = device_index
        self._poll_interval_s = poll_interval_s
        self._frame_retry_delay_s = frame_retry_delay_s
        self._worker_join_timeout_s = worker_join_timeout_s
        self._device_release_timeout_s = device_release_timeout_s

        self._state = SessionState.IDLE
        self._state_lock = threading.RLock()
        self._device_lock = threading.Lock()
        self._delivery_lock = threading.Lock()
        self._cancel: Optional[threading.Event] = None
        self._worker: Optional[threading.Thread] = None

        self.frames_delivered = 0
        self.frames_missed = 0

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        sink: Optional[DisplaySink] = None
    ) -> "CaptureSession":
        """Build a session with the configured source and decoder."""
        return cls(
            source=create_frame_source(settings),
            converter=FrameConverter(),
            decoder=create_decoder(settings),
            sink=sink,
            device_index=settings.camera_index,
            poll_interval_s=settings.poll_interval_ms / 1000.0,
            frame_retry_delay_s=settings.frame_retry_delay_ms / 1000.0,
            worker_join_timeout_s=settings.worker_join_timeout_s,
            device_release_timeout_s=settings.device_release_timeout_s,
        )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SessionState.RUNNING

    @property
    def device_index(self) -> int:
        return self._device_index

    @property
    def device_open(self) -> bool:
        """Check whether the frame source currently holds the device."""
        return self._source.is_open()

    @property
    def worker_alive(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    @property
    def sink(self) -> Optional[DisplaySink]:
        return self._sink

    @sink.setter
    def sink(self, sink: Optional[DisplaySink]) -> None:
        with self._delivery_lock:
            self._sink = sink

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> bool:
        """
        Open the camera and launch the polling thread.

        Returns:
            True if the session started, False if it was already running

        Raises:
            AppException: DEVICE_UNAVAILABLE when the camera cannot be
                opened, CAMERA_BUSY when the previous polling thread has
                not exited yet (session stays IDLE, no thread is created)
        """
        with self._state_lock:
            if self._state is SessionState.RUNNING:
                logger.debug("start() ignored: session already running")
                return False

            self._reap_stale_worker()

            with self._device_lock:
                opened = self._source.open(self._device_index)
                if not opened:
                    self._source.release()

            if not opened:
                logger.error(f"❌ Camera {self._device_index} unavailable")
                raise exceptions.device_unavailable(f"device {self._device_index}")

            cancel = threading.Event()
            worker = threading.Thread(
                target=self._poll_loop,
                args=(cancel,),
                name=f"capture-poll-{self._device_index}",
                daemon=True,
            )

            self._cancel = cancel
            self._worker = worker
            self.frames_delivered = 0
            self.frames_missed = 0
            self._state = SessionState.RUNNING
            worker.start()

            logger.info(f"✅ Capture session started ({self._source.describe()})")
            return True

    def stop(self) -> bool:
        """
        Stop the preview and release the camera.

        Returns once the device is released; the polling thread exits on
        its own.

        Returns:
            True if the session was running, False if it was already IDLE
        """
        with self._state_lock:
            if self._state is SessionState.IDLE:
                logger.debug("stop() ignored: session idle")
                return False

            self._halt(timeout=None)
            logger.info("🛑 Capture session stopped")
            return True

    def shutdown(self) -> None:
        """
        Application teardown hook. Idempotent and safe from any state.

        Waits at most ``device_release_timeout_s`` for the device lock and
        never joins the polling thread.
        """
        with self._state_lock:
            if self._state is SessionState.RUNNING:
                self._halt(timeout=self._device_release_timeout_s)
                logger.info("🛑 Capture session shut down")
            elif self._cancel is not None:
                self._cancel.set()

    # =========================================================================
    # SCANNING
    # =========================================================================

    def scan_once(self) -> DecodeOutcome:
        """
        Grab one frame and try to decode a symbol in it.

        Returns:
            Decoded, NotFound, or DecodeError("no frame available") when
            the camera produced nothing

        Raises:
            AppException: CAMERA_NOT_RUNNING when called while IDLE
        """
        with self._state_lock:
            if self._state is not SessionState.RUNNING:
                raise exceptions.camera_not_running()

        with self._device_lock:
            frame = self._source.read() if self._source.is_open() else None

        if frame is None:
            logger.warning("Scan requested but no frame was available")
            return DecodeError(message=NO_FRAME_MESSAGE)

        buffer = self._converter.to_decode_buffer(frame)

        try:
            outcome = self._decoder.decode(buffer)
        except Exception as e:
            logger.exception(f"Decoder failure on frame {frame.sequence}")
            return DecodeError(message=str(e) or type(e).__name__)

        logger.info(f"🔍 Scan of frame {frame.sequence}: {outcome.kind}")
        return outcome

    # =========================================================================
    # STATUS
    # =========================================================================

    def get_status(self) -> dict:
        """Snapshot of session state and counters."""
        return {
            "state": self._state.value,
            "device": self._source.describe(),
            "device_index": self._device_index,
            "device_open": self.device_open,
            "worker_alive": self.worker_alive,
            "frames_delivered": self.frames_delivered,
            "frames_missed": self.frames_missed,
        }

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _poll_loop(self, cancel: threading.Event) -> None:
        """Background preview loop. Never raises."""
        logger.info("🔄 Polling loop started")

        while not cancel.is_set():
            try:
                with self._device_lock:
                    if cancel.is_set():
                        break
                    frame = self._source.read()

                if frame is None:
                    self.frames_missed += 1
                    cancel.wait(self._frame_retry_delay_s)
                    continue

                image = self._converter.to_display_image(frame)
                self._deliver(image, cancel)

                if self._poll_interval_s:
                    cancel.wait(self._poll_interval_s)

            except Exception as e:
                logger.error(f"Polling loop error: {e}")
                cancel.wait(self._frame_retry_delay_s)

        logger.info("🛑 Polling loop exited")

    def _deliver(self, image: DisplayImage, cancel: threading.Event) -> None:
        with self._delivery_lock:
            sink = None if cancel.is_set() else self._sink
        if sink is None:
            return

        try:
            sink.on_display_image(image)
            self.frames_delivered += 1
        except Exception as e:
            logger.error(f"Display sink error: {e}")

        # stop() cleared the display while this image was in flight
        if cancel.is_set():
            self._clear_sink(sink)

    def _clear_sink(self, sink: Optional[DisplaySink]) -> None:
        if sink is None:
            return
        try:
            sink.on_clear()
        except Exception as e:
            logger.error(f"Display sink error: {e}")

    def _halt(self, timeout: Optional[float]) -> None:
        """Signal the polling thread, release the device, clear the display."""
        if self._cancel is not None:
            self._cancel.set()

        acquired = self._device_lock.acquire(timeout=-1 if timeout is None else timeout)
        if acquired:
            try:
                self._source.release()
            finally:
                self._device_lock.release()
        else:
            logger.warning("Device busy during shutdown; leaving handle to process exit")

        with self._delivery_lock:
            sink = self._sink
        self._clear_sink(sink)

        self._state = SessionState.IDLE

    def _reap_stale_worker(self) -> None:
        """
        Wait up to ``worker_join_timeout_s`` for the previous polling thread.

        Raises:
            AppException: CAMERA_BUSY when it is still running, so at most
                one polling thread is ever alive
        """
        worker = self._worker
        if worker is None or worker is threading.current_thread():
            return

        if worker.is_alive():
            worker.join(self._worker_join_timeout_s)
            if worker.is_alive():
                logger.warning(f"Previous polling thread {worker.name} still exiting")
                raise exceptions.camera_busy(worker.name)

        self._worker = None
