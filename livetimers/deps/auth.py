from __future__ import annotations

import logging

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import AuthenticationFailure
from ..db.session import get_db
from ..middlewares import principal_ctx_var
from ..services.auth import ResolvedUser, resolve_user

logger = logging.getLogger(__name__)


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


def current_session_id(request: Request) -> str | None:
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def optional_user(request: Request, db: Session = Depends(get_db)) -> ResolvedUser | None:
    """Resolve the ``sessionId`` cookie; storage errors count as logged out."""

    session_id = current_session_id(request)
    if not session_id:
        return None
    try:
        user = resolve_user(db, session_id=session_id)
    except SQLAlchemyError:
        logger.exception("auth.storage_failure")
        return None
    if user is not None:
        _set_principal(request, f"user:{user.id}")
    return user


def require_user(user: ResolvedUser | None = Depends(optional_user)) -> ResolvedUser:
    if user is None:
        raise AuthenticationFailure("Login required")
    return user
