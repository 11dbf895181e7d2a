from __future__ import annotations

import logging
from typing import Iterator

from .connection import LiveConnection

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Process-wide map of user id to that user's single live connection.

    Only touched from the event loop, so no locking. Registering a second
    connection for a user replaces the first without telling it.
    """

    def __init__(self) -> None:
        self._connections: dict[str, LiveConnection] = {}

    def register(self, user_id: str, connection: LiveConnection) -> LiveConnection | None:
        key = str(user_id)
        previous = self._connections.get(key)
        self._connections[key] = connection
        if previous is not None and previous is not connection:
            logger.info(
                "registry.replaced",
                extra={"extra_data": {"user_id": key, "previous": previous.id, "connection": connection.id}},
            )
        return previous

    def unregister(self, user_id: str, connection: LiveConnection | None = None) -> bool:
        """Drop the entry for ``user_id``.

        With ``connection`` given, the entry is only dropped while it still
        points at that connection, so a replaced connection closing late does
        not evict its replacement.
        """

        key = str(user_id)
        current = self._connections.get(key)
        if current is None:
            return False
        if connection is not None and current is not connection:
            return False
        del self._connections[key]
        return True

    def lookup(self, user_id: str) -> LiveConnection | None:
        return self._connections.get(str(user_id))

    def items(self) -> list[tuple[str, LiveConnection]]:
        # A copy: callers await between entries and the map may change.
        return list(self._connections.items())

    def __iter__(self) -> Iterator[tuple[str, LiveConnection]]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, user_id: object) -> bool:
        return str(user_id) in self._connections

    def clear(self) -> None:
        self._connections.clear()
