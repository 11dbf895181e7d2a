"""Per-connection state machine for the live channel.

``handle(state, event)`` is pure: it returns the next state and a list of
effects for the runner (``realtime.sync``) to carry out. Events are the parsed
client messages plus two the runner produces itself: ``AuthResolved`` once a
token lookup finishes, and ``Disconnected`` when the transport goes away.

    UNAUTHENTICATED --authenticate(ok)--> AUTHENTICATED
    UNAUTHENTICATED --authenticate(bad)-> CLOSED
    any             --disconnect-------->  CLOSED

``CLOSED`` is terminal and swallows every further event.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..schemas.messages import AuthenticateMessage, CreateTimerMessage, StopTimerMessage

POLICY_VIOLATION = 1008
AUTH_FAILED_REASON = "Authentication failed"


class Phase(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass(frozen=True)
class ConnectionState:
    phase: Phase = Phase.UNAUTHENTICATED
    user_id: str | None = None


# ---------- runner-produced events ----------


@dataclass(frozen=True)
class AuthResolved:
    user_id: str | None


@dataclass(frozen=True)
class Disconnected:
    pass


Event = Union[AuthenticateMessage, CreateTimerMessage, StopTimerMessage, AuthResolved, Disconnected]


# ---------- effects ----------


@dataclass(frozen=True)
class ResolveToken:
    token: str


@dataclass(frozen=True)
class Register:
    user_id: str


@dataclass(frozen=True)
class Unregister:
    user_id: str


@dataclass(frozen=True)
class PushSnapshot:
    user_id: str


@dataclass(frozen=True)
class CreateTimer:
    user_id: str
    description: str


@dataclass(frozen=True)
class StopTimer:
    user_id: str
    timer_id: str


@dataclass(frozen=True)
class Close:
    code: int = POLICY_VIOLATION
    reason: str = AUTH_FAILED_REASON


Effect = Union[ResolveToken, Register, Unregister, PushSnapshot, CreateTimer, StopTimer, Close]

_CLOSED = ConnectionState(phase=Phase.CLOSED)


def handle(state: ConnectionState, event: Event) -> tuple[ConnectionState, list[Effect]]:
    if state.phase is Phase.CLOSED:
        return state, []

    if isinstance(event, Disconnected):
        closed = ConnectionState(phase=Phase.CLOSED, user_id=state.user_id)
        if state.phase is Phase.AUTHENTICATED and state.user_id:
            return closed, [Unregister(state.user_id)]
        return closed, []

    if state.phase is Phase.UNAUTHENTICATED:
        return _handle_unauthenticated(state, event)
    return _handle_authenticated(state, event)


def _handle_unauthenticated(state: ConnectionState, event: Event) -> tuple[ConnectionState, list[Effect]]:
    if isinstance(event, AuthenticateMessage):
        if not event.token:
            return _CLOSED, [Close()]
        return state, [ResolveToken(event.token)]
    if isinstance(event, AuthResolved):
        if not event.user_id:
            return _CLOSED, [Close()]
        user_id = str(event.user_id)
        return (
            ConnectionState(phase=Phase.AUTHENTICATED, user_id=user_id),
            [Register(user_id), PushSnapshot(user_id)],
        )
    # Mutations before authenticating are ignored.
    return state, []


def _handle_authenticated(state: ConnectionState, event: Event) -> tuple[ConnectionState, list[Effect]]:
    user_id = state.user_id or ""
    if isinstance(event, CreateTimerMessage):
        if not event.description:
            return state, []
        return state, [CreateTimer(user_id, event.description), PushSnapshot(user_id)]
    if isinstance(event, StopTimerMessage):
        return state, [StopTimer(user_id, event.timer_id), PushSnapshot(user_id)]
    # Re-authentication and stray AuthResolved events are ignored.
    return state, []
