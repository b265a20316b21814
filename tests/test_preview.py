"""
==============================================================================
Preview Hub Tests
==============================================================================

Tests for the thread-to-asyncio preview hand-off.

==============================================================================
"""

import asyncio
import threading

import numpy as np

from labellense.scanner import DisplayImage
from labellense.session import PreviewHub


def make_image(sequence: int) -> DisplayImage:
    return DisplayImage(
        pixels=np.zeros((2, 2, 3), dtype=np.uint8),
        width=2,
        height=2,
        sequence=sequence,
    )


class TestPreviewHub:
    """Tests for PreviewHub."""

    def test_latest_tracks_last_image(self):
        hub = PreviewHub()

        assert hub.latest() is None
        hub.on_display_image(make_image(1))
        hub.on_display_image(make_image(2))

        assert hub.latest().sequence == 2
        assert hub.frames_published == 2

        hub.on_clear()
        assert hub.latest() is None

    def test_images_from_thread_arrive_in_order(self):
        hub = PreviewHub(queue_size=100)

        async def scenario():
            queue = hub.subscribe()

            producer = threading.Thread(
                target=lambda: [hub.on_display_image(make_image(i)) for i in range(1, 51)]
            )
            producer.start()
            await asyncio.to_thread(producer.join)

            received = []
            while len(received) < 50:
                item = await asyncio.wait_for(queue.get(), timeout=5)
                received.append(item.sequence)

            hub.unsubscribe(queue)
            return received

        assert asyncio.run(scenario()) == list(range(1, 51))

    def test_slow_subscriber_drops_oldest(self):
        hub = PreviewHub(queue_size=2)

        async def scenario():
            queue = hub.subscribe()
            for i in range(1, 6):
                hub.on_display_image(make_image(i))

            # let the scheduled callbacks run
            await asyncio.sleep(0.01)

            items = [queue.get_nowait().sequence for _ in range(queue.qsize())]
            hub.unsubscribe(queue)
            return items

        assert asyncio.run(scenario()) == [4, 5]

    def test_clear_is_delivered_as_none(self):
        hub = PreviewHub()

        async def scenario():
            queue = hub.subscribe()
            hub.on_display_image(make_image(1))
            hub.on_clear()
            await asyncio.sleep(0.01)

            first = await queue.get()
            second = await queue.get()
            hub.unsubscribe(queue)
            return first, second

        first, second = asyncio.run(scenario())

        assert first.sequence == 1
        assert second is None

    def test_unsubscribe(self):
        hub = PreviewHub()

        async def scenario():
            queue = hub.subscribe()
            assert hub.subscriber_count == 1

            hub.unsubscribe(queue)
            hub.on_display_image(make_image(1))
            await asyncio.sleep(0.01)
            return queue.qsize()

        assert asyncio.run(scenario()) == 0
        assert hub.subscriber_count == 0

    def test_closed_loop_subscriber_is_dropped(self):
        hub = PreviewHub()

        async def scenario():
            hub.subscribe()

        asyncio.run(scenario())
        hub.on_display_image(make_image(1))

        assert hub.subscriber_count == 0
