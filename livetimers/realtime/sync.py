"""Runs the live-channel state machine for one connection.

``LiveSyncSession`` feeds events through ``protocol.handle`` and carries out
the effects in order. An effect can end its chain early: a stop that matched
no active timer, or any storage failure, skips the rest (normally the snapshot
push), and the client hears nothing.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..core.errors import ProtocolViolation, StorageFailure
from ..db.gateway import StorageGateway
from ..schemas.messages import all_timers_message, parse_client_message
from ..services.auth import AuthResolver
from ..services.timecalc import now_ms
from ..services.timers import finish_timer, snapshot, start_timer
from .connection import LiveConnection
from .protocol import (
    AuthResolved,
    Close,
    ConnectionState,
    CreateTimer,
    Disconnected,
    Effect,
    Event,
    Phase,
    PushSnapshot,
    Register,
    ResolveToken,
    StopTimer,
    Unregister,
    handle,
)
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


async def push_snapshot(registry: ConnectionRegistry, gateway: StorageGateway, user_id: str) -> bool:
    """Send ``all_timers`` to whichever connection is registered for the user."""

    connection = registry.lookup(user_id)
    if connection is None or not connection.is_open:
        return False
    timers = await gateway.run(snapshot, user_id)
    return await connection.send_json(all_timers_message(timers))


class LiveSyncSession:
    def __init__(
        self,
        connection: LiveConnection,
        *,
        registry: ConnectionRegistry,
        resolver: AuthResolver,
        gateway: StorageGateway,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.connection = connection
        self.registry = registry
        self.resolver = resolver
        self.gateway = gateway
        self.clock = clock
        self.state = ConnectionState()

    @property
    def user_id(self) -> str | None:
        return self.state.user_id

    @property
    def closed(self) -> bool:
        return self.state.phase is Phase.CLOSED

    def _log_extra(self, **fields) -> dict:
        data = {"connection": self.connection.id}
        if self.state.user_id:
            data["user_id"] = self.state.user_id
        data.update(fields)
        return {"extra_data": data}

    async def receive_text(self, raw: str | bytes) -> None:
        try:
            message = parse_client_message(raw)
        except ProtocolViolation as exc:
            logger.warning("ws.protocol_violation", extra=self._log_extra(error=str(exc)))
            return
        await self.feed(message)

    async def disconnected(self) -> None:
        await self.feed(Disconnected())

    async def feed(self, event: Event) -> None:
        self.state, effects = handle(self.state, event)
        for effect in effects:
            try:
                proceed = await self._apply(effect)
            except StorageFailure:
                logger.exception("ws.storage_failure", extra=self._log_extra(effect=type(effect).__name__))
                return
            if not proceed:
                return

    async def _apply(self, effect: Effect) -> bool:
        if isinstance(effect, ResolveToken):
            user = await self.resolver.by_token(effect.token)
            if user is not None:
                logger.info("ws.authenticated", extra=self._log_extra(user_id=user.id, username=user.username))
            else:
                logger.info("ws.auth_failed", extra=self._log_extra())
            await self.feed(AuthResolved(user.id if user is not None else None))
            return True
        if isinstance(effect, Register):
            self.registry.register(effect.user_id, self.connection)
            return True
        if isinstance(effect, Unregister):
            self.registry.unregister(effect.user_id, self.connection)
            logger.info("ws.disconnected", extra=self._log_extra())
            return True
        if isinstance(effect, PushSnapshot):
            await push_snapshot(self.registry, self.gateway, effect.user_id)
            return True
        if isinstance(effect, CreateTimer):
            timer = await self.gateway.run(start_timer, effect.user_id, effect.description, self.clock())
            logger.info("ws.timer_created", extra=self._log_extra(timer_id=timer.timer_id))
            return True
        if isinstance(effect, StopTimer):
            timer = await self.gateway.run(finish_timer, effect.user_id, effect.timer_id, self.clock())
            if timer is None:
                logger.info("ws.stop_ignored", extra=self._log_extra(timer_id=effect.timer_id))
                return False
            logger.info("ws.timer_stopped", extra=self._log_extra(timer_id=timer.timer_id, duration=timer.duration))
            return True
        if isinstance(effect, Close):
            await self.connection.close(effect.code, effect.reason)
            return True
        raise TypeError(f"unknown effect {effect!r}")
