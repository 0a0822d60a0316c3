"""WebSocket endpoint — push every logo change to connected viewers.

Learn: Each viewer connects to /live. The handler:
1. Registers an Outbox with the live service (new, never-reused id)
2. Drains the Outbox onto the socket as binary PNG frames
3. Reads (and discards) whatever the viewer sends
4. Unregisters on every exit path

Registration happens before the handshake completes, so a viewer counts as
subscribed as soon as its connect call returns.
"""

import asyncio

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from logo_png.live.service import LiveLogoService, get_live_service

logger = structlog.get_logger()
router = APIRouter()


@router.websocket("/live")
async def live_websocket(
    websocket: WebSocket,
    live: LiveLogoService = Depends(get_live_service),
):
    """WebSocket endpoint for live logo frames.

    Learn: Two concurrent tasks run:
    1. Outbox drain — awaits frames, sends them as binary messages
    2. Client listener — reads from the socket until the viewer goes away

    When either side finishes (viewer disconnect, send error, outbox closed
    on overflow), the other is cancelled.
    """
    subscriber = live.subscribe()
    log = logger.bind(subscriber_id=subscriber.id)

    async def outbox_drain():
        """Forward queued frames to the viewer."""
        while True:
            frame = await subscriber.outbox.get()
            if frame is None:
                log.info("live.outbox_closed")
                return
            await websocket.send_bytes(frame)

    async def client_listener():
        """Consume viewer messages; the live feed is one-way."""
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    return
                log.debug("live.client_message_ignored")
        except WebSocketDisconnect:
            pass

    tasks: list[asyncio.Task] = []
    try:
        await websocket.accept()

        tasks = [
            asyncio.create_task(outbox_drain()),
            asyncio.create_task(client_listener()),
        ]
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                log.warning("live.connection_error", error=str(task.exception()))
    finally:
        for task in tasks:
            task.cancel()
        live.unsubscribe(subscriber)
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close()
