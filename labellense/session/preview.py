"""
==============================================================================
Preview Hub Module
==============================================================================

Hand-off between the polling thread and asyncio consumers.

The polling thread calls ``on_display_image``; the hub keeps the latest
image for request/response clients and schedules delivery to every
subscribed asyncio queue with ``loop.call_soon_threadsafe``. Callbacks
scheduled from one thread run in FIFO order, so subscribers see frames in
capture order. A slow subscriber loses its oldest frames, never the order.

A ``None`` item in a subscriber queue means "display cleared".

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Dict, Optional

from labellense.scanner import DisplayImage
from .capture_session import DisplaySink


# Module logger
logger = logging.getLogger(__name__)


class PreviewHub(DisplaySink):
    """
    Fan-out display sink for WebSocket and HTTP preview clients.

    Example:
        >>> hub = PreviewHub(queue_size=2)
        >>> queue = hub.subscribe()          # inside a running event loop
        >>> image = await queue.get()
        >>> hub.unsubscribe(queue)
    """

    def __init__(self, queue_size: int = 2) -> None:
        self._queue_size = queue_size
        self._lock = threading.Lock()
        self._latest: Optional[DisplayImage] = None
        self._subscribers: Dict[asyncio.Queue, asyncio.AbstractEventLoop] = {}
        self.frames_published = 0

    # =========================================================================
    # DISPLAY SINK
    # =========================================================================

    def on_display_image(self, image: DisplayImage) -> None:
        with self._lock:
            self._latest = image
            self.frames_published += 1
            subscribers = list(self._subscribers.items())

        self._broadcast(subscribers, image)

    def on_clear(self) -> None:
        with self._lock:
            self._latest = None
            subscribers = list(self._subscribers.items())

        self._broadcast(subscribers, None)

    # =========================================================================
    # CONSUMERS
    # =========================================================================

    def latest(self) -> Optional[DisplayImage]:
        """Most recent display image, or None when nothing is shown."""
        with self._lock:
            return self._latest

    def subscribe(self) -> asyncio.Queue:
        """
        Register a queue on the running event loop.

        Returns:
            Queue receiving DisplayImage items (or None on clear)
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)

        with self._lock:
            self._subscribers[queue] = loop

        logger.debug(f"Preview subscriber added ({self.subscriber_count} total)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        with self._lock:
            self._subscribers.pop(queue, None)

        logger.debug(f"Preview subscriber removed ({self.subscriber_count} total)")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _broadcast(self, subscribers, item: Optional[DisplayImage]) -> None:
        for queue, loop in subscribers:
            try:
                loop.call_soon_threadsafe(self._enqueue, queue, item)
            except RuntimeError:
                # Event loop already closed
                self.unsubscribe(queue)

    @staticmethod
    def _enqueue(queue: asyncio.Queue, item: Optional[DisplayImage]) -> None:
        """Runs on the subscriber's loop. Drops the oldest item when full."""
        if queue.full():
            try:
                queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
        queue.put_nowait(item)
