"""Persistence helpers for login sessions (the Session Store)."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.login_session import LoginSession
from ..services.timecalc import utcnow_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionCredentials:
    session_id: str
    token: str


def new_credential(nbytes: int | None = None) -> str:
    return secrets.token_urlsafe(nbytes or settings.CREDENTIAL_BYTES)


def create_session(db: Session, user_id: str) -> SessionCredentials:
    """Persist a session for ``user_id`` and return its two credentials.

    Both columns are unique; on the (astronomically unlikely) collision the
    insert is rolled back and a fresh pair generated, up to
    ``CREDENTIAL_ATTEMPTS`` times.
    """

    attempts = max(settings.CREDENTIAL_ATTEMPTS, 1)
    attempt = 0
    while True:
        attempt += 1
        credentials = SessionCredentials(session_id=new_credential(), token=new_credential())
        db.add(
            LoginSession(
                session_id=credentials.session_id,
                token=credentials.token,
                user_id=user_id,
                created_at=utcnow_iso(),
            )
        )
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                "session.credential_collision",
                extra={"extra_data": {"user_id": user_id, "attempt": attempt}},
            )
            if attempt >= attempts:
                raise
            continue
        return credentials


def delete_session(db: Session, session_id: str) -> bool:
    """Remove the session keyed by ``session_id``. Missing rows only warn."""

    result = db.execute(delete(LoginSession).where(LoginSession.session_id == session_id))
    db.commit()
    if result.rowcount == 0:
        logger.warning("session.delete_missing", extra={"extra_data": {"session_id": session_id}})
        return False
    logger.info("session.deleted", extra={"extra_data": {"session_id": session_id}})
    return True


def get_session(db: Session, session_id: str) -> LoginSession | None:
    return db.execute(select(LoginSession).where(LoginSession.session_id == session_id)).scalars().first()


def find_session_user_id(db: Session, *, session_id: str | None = None, token: str | None = None) -> str | None:
    """Return the owning user id for a session credential, or ``None``.

    Exactly one of ``session_id`` (cookie) or ``token`` (live channel) is the
    lookup key; only the ``user_id`` column is loaded.
    """

    if (session_id is None) == (token is None):
        raise ValueError("pass exactly one of session_id or token")
    if session_id is not None:
        condition = LoginSession.session_id == session_id
    else:
        condition = LoginSession.token == token
    return db.execute(select(LoginSession.user_id).where(condition)).scalars().first()
