"""WebSocket endpoint for the live timer channel.

Browsers connect to the site root (or ``/ws``), send ``authenticate`` with
their token, and from then on receive ``all_timers`` after every change plus
``active_timers`` from the broadcaster.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..realtime.connection import WebSocketConnection
from ..realtime.sync import LiveSyncSession

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/")
@router.websocket("/ws")
async def live_channel(websocket: WebSocket):
    state = websocket.app.state
    await websocket.accept()
    connection = WebSocketConnection(websocket)
    session = LiveSyncSession(
        connection,
        registry=state.registry,
        resolver=state.auth_resolver,
        gateway=state.storage,
    )
    logger.info("ws.connected", extra={"extra_data": {"connection": connection.id}})
    try:
        while not session.closed:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            await session.receive_text(raw)
    except WebSocketDisconnect:
        pass
    finally:
        connection.mark_closed()
        await session.disconnected()
