from __future__ import annotations

import logging
from typing import Any, Protocol
from uuid import uuid4

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

logger = logging.getLogger(__name__)


class LiveConnection(Protocol):
    """What the protocol runner and broadcaster need from a connection."""

    id: str

    @property
    def is_open(self) -> bool: ...

    async def send_json(self, payload: dict[str, Any]) -> bool: ...

    async def close(self, code: int, reason: str) -> None: ...


class WebSocketConnection:
    """``LiveConnection`` over a Starlette ``WebSocket``."""

    def __init__(self, websocket: WebSocket, connection_id: str | None = None) -> None:
        self.websocket = websocket
        self.id = connection_id or uuid4().hex
        self._closed = False

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def mark_closed(self) -> None:
        self._closed = True

    async def send_json(self, payload: dict[str, Any]) -> bool:
        """Send one frame. Returns ``False`` if the socket is already gone."""

        if not self.is_open:
            return False
        try:
            await self.websocket.send_json(payload)
        except (WebSocketDisconnect, RuntimeError) as exc:
            self._closed = True
            logger.info(
                "ws.send_dropped",
                extra={"extra_data": {"connection": self.id, "error": str(exc)}},
            )
            return False
        return True

    async def close(self, code: int, reason: str) -> None:
        if self.websocket.application_state == WebSocketState.DISCONNECTED:
            self._closed = True
            return
        self._closed = True
        try:
            await self.websocket.close(code=code, reason=reason)
        except RuntimeError:
            logger.debug("ws.close_ignored", extra={"extra_data": {"connection": self.id}})
