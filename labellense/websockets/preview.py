"""
==============================================================================
Preview WebSocket Module
==============================================================================

Live camera preview over a WebSocket connection.

Protocol:
---------
1. Client connects to /ws/preview
2. Server sends {"type": "status", "state": "idle" | "running"}
3. Server streams preview frames in capture order:
   {"type": "frame", "sequence": n, "width": w, "height": h, "frame": <base64 JPEG>}
4. Server sends {"type": "clear"} when the camera stops
5. Client may send {"type": "ping"} (answered with "pong") or
   {"type": "stop"} to end the stream

==============================================================================
"""

import asyncio
import base64
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from labellense.config import get_settings
from labellense.core.dependencies import get_capture_session, get_preview_hub
from labellense.scanner import DisplayImage
from labellense.session import CaptureSession, PreviewHub


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class PreviewWebSocketHandler:
    """
    Handler for one preview WebSocket connection.

    Manages the lifecycle of a preview subscription:
    - Subscription to the preview hub
    - Frame encoding and streaming
    - Client control messages
    """

    def __init__(self, websocket: WebSocket, session: CaptureSession, hub: PreviewHub):
        self._websocket = websocket
        self._session = session
        self._hub = hub
        self._quality = get_settings().preview_jpeg_quality

    async def send_frame(self, image: DisplayImage) -> None:
        """Encode and send one preview frame."""
        jpeg = await asyncio.to_thread(image.encode_jpeg, self._quality)

        await self._websocket.send_json({
            "type": "frame",
            "sequence": image.sequence,
            "width": image.width,
            "height": image.height,
            "frame": base64.b64encode(jpeg).decode("ascii"),
        })

    async def pump_frames(self, queue: asyncio.Queue) -> None:
        """Forward hub items to the client until cancelled."""
        while True:
            image = await queue.get()

            if image is None:
                await self._websocket.send_json({"type": "clear"})
                continue

            await self.send_frame(image)

    async def listen(self) -> None:
        """Handle client messages; returns when the client asks to stop."""
        while True:
            data = await self._websocket.receive_json()
            message_type = data.get("type")

            if message_type == "stop":
                logger.info("🛑 Client requested stop")
                return

            if message_type == "ping":
                await self._websocket.send_json({"type": "pong"})

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info("📱 Preview WebSocket connected")

        queue = self._hub.subscribe()
        tasks = set()

        try:
            await self._websocket.send_json({
                "type": "status",
                "state": self._session.state.value,
            })

            tasks = {
                asyncio.create_task(self.pump_frames(queue)),
                asyncio.create_task(self.listen()),
            }
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

            for task in done:
                error = task.exception()
                if error is not None:
                    raise error

            await self._websocket.close()

        except WebSocketDisconnect:
            logger.info("📱 Client disconnected")
        except Exception as e:
            logger.error(f"WebSocket error: {e}")
        finally:
            for task in tasks:
                task.cancel()
            self._hub.unsubscribe(queue)
            logger.info("✅ Preview WebSocket closed")


@router.websocket("/ws/preview")
async def websocket_preview(
    websocket: WebSocket,
    session: CaptureSession = Depends(get_capture_session),
    hub: PreviewHub = Depends(get_preview_hub)
):
    """Live camera preview via WebSocket."""
    handler = PreviewWebSocketHandler(websocket, session, hub)
    await handler.run()
