from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import AuthenticationFailure, StorageFailure
from ..crud.sessions import get_session
from ..db.session import get_db
from ..deps.auth import current_session_id, optional_user, require_user
from ..schemas.auth import SessionInfo
from ..services.auth import ResolvedUser

router = APIRouter(tags=["session"])


@router.get("/", summary="Login state for the landing page")
def index(
    user: ResolvedUser | None = Depends(optional_user),
    auth_error: str | None = Query(default=None, alias="authError"),
):
    # The HTML page itself is rendered elsewhere; this reports what it needs.
    if auth_error == "true":
        auth_error = "Wrong username or password"
    return {
        "authenticated": user is not None,
        "username": user.username if user else None,
        "authError": auth_error,
    }


@router.get(
    "/api/v1/session",
    response_model=SessionInfo,
    response_model_by_alias=True,
    summary="Live-channel token for the logged-in browser session",
)
def session_info(
    request: Request,
    user: ResolvedUser = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        row = get_session(db, current_session_id(request) or "")
    except SQLAlchemyError as exc:
        raise StorageFailure("session lookup failed") from exc
    if row is None:
        # Logged out between resolving the cookie and reading the row.
        raise AuthenticationFailure("Login required")
    return SessionInfo(user_id=user.id, username=user.username, token=row.token)
