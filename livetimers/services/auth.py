"""Auth Resolver: credential in, user (or nothing) out.

The cookie path (``sessionId``) and the live-channel path (``token``) share
one walk: session row, owning user id, user row. A missing link at any step
means "not authenticated"; only storage errors are exceptional, and those are
logged and also reported as "not authenticated".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from ..core.errors import StorageFailure
from ..crud.sessions import find_session_user_id
from ..crud.users import get_user
from ..db.gateway import StorageGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedUser:
    id: str
    username: str


def is_well_formed_user_id(value: object) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def resolve_user(db: Session, *, session_id: str | None = None, token: str | None = None) -> ResolvedUser | None:
    """Synchronous resolution against an open ORM session."""

    user_id = find_session_user_id(db, session_id=session_id, token=token)
    if user_id is None:
        logger.info("auth.session_not_found", extra={"extra_data": {"key": "session_id" if session_id else "token"}})
        return None
    if not is_well_formed_user_id(user_id):
        logger.warning("auth.malformed_user_id", extra={"extra_data": {"user_id": user_id}})
        return None
    user = get_user(db, user_id)
    if user is None:
        logger.info("auth.user_not_found", extra={"extra_data": {"user_id": user_id}})
        return None
    return ResolvedUser(id=user.id, username=user.username)


class AuthResolver:
    """Async front for ``resolve_user`` used by the live channel."""

    def __init__(self, gateway: StorageGateway) -> None:
        self._gateway = gateway

    async def by_token(self, token: str | None) -> ResolvedUser | None:
        if not token:
            return None
        return await self._resolve(token=token)

    async def by_session_id(self, session_id: str | None) -> ResolvedUser | None:
        if not session_id:
            return None
        return await self._resolve(session_id=session_id)

    async def _resolve(self, **credential: str) -> ResolvedUser | None:
        try:
            return await self._gateway.run(resolve_user, **credential)
        except StorageFailure:
            logger.exception("auth.storage_failure")
            return None
