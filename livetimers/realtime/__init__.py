from __future__ import annotations

from .broadcaster import TimerBroadcaster
from .connection import LiveConnection, WebSocketConnection
from .registry import ConnectionRegistry
from .sync import LiveSyncSession

__all__ = [
    "ConnectionRegistry",
    "LiveConnection",
    "LiveSyncSession",
    "TimerBroadcaster",
    "WebSocketConnection",
]
