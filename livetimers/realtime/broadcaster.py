from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Callable

from ..core.errors import StorageFailure
from ..db.gateway import StorageGateway
from ..schemas.messages import active_timers_message
from ..services.timecalc import now_ms
from ..services.timers import active_snapshot
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class TimerBroadcaster:
    """Pushes ``active_timers`` to every registered connection on a fixed cadence.

    Each tick walks a copy of the registry. Users with no running timers get
    no message at all. A tick is not ordered against concurrent
    ``stop_timer`` handling, so a just-stopped timer can show up in one more
    ``active_timers`` push; clients treat the next ``all_timers`` as truth.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        gateway: StorageGateway,
        *,
        interval: float = 1.0,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.registry = registry
        self.gateway = gateway
        self.interval = interval
        self.clock = clock
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> int:
        """Run one broadcast pass; returns how many messages were sent."""

        sent = 0
        for user_id, connection in self.registry.items():
            if not connection.is_open:
                continue
            try:
                timers = await self.gateway.run(active_snapshot, user_id, self.clock())
            except StorageFailure:
                logger.exception("broadcast.storage_failure", extra={"extra_data": {"user_id": user_id}})
                continue
            if not timers:
                continue
            # The user may have reconnected while we were reading.
            if self.registry.lookup(user_id) is not connection:
                continue
            if await connection.send_json(active_timers_message(timers)):
                sent += 1
        return sent

    async def run(self) -> None:
        logger.info("broadcast.started", extra={"extra_data": {"interval": self.interval}})
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                await self.tick()
            except Exception:
                logger.exception("broadcast.tick_failed")
            await asyncio.sleep(max(self.interval - (loop.time() - started), 0))

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self.run(), name="timer-broadcaster")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("broadcast.stopped")
