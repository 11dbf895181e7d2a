"""Browser login, signup and logout.

Failures never produce an error status: the browser is redirected to ``/``
with an ``authError`` query parameter the page can show.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.security import hash_password, verify_password
from ..crud.sessions import SessionCredentials, create_session, delete_session
from ..crud.users import create_user, get_user_by_username
from ..db.session import get_db
from ..deps.auth import current_session_id, optional_user
from ..services.auth import ResolvedUser

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

WRONG_CREDENTIALS = "true"
SERVER_ERROR = "Server error"


def _redirect_home(auth_error: str | None = None) -> RedirectResponse:
    url = "/"
    if auth_error:
        url = f"/?{urlencode({'authError': auth_error})}"
    return RedirectResponse(url=url, status_code=302)


def _set_session_cookies(response: RedirectResponse, credentials: SessionCredentials) -> None:
    for name, value in (
        (settings.TOKEN_COOKIE_NAME, credentials.token),
        (settings.SESSION_COOKIE_NAME, credentials.session_id),
    ):
        response.set_cookie(
            name,
            value,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
        )


@router.post("/login")
def login_submit(
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        user = get_user_by_username(db, username)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("auth.login_rejected", extra={"extra_data": {"username": username}})
            return _redirect_home(WRONG_CREDENTIALS)
        credentials = create_session(db, user.id)
    except SQLAlchemyError:
        logger.exception("auth.login_failed")
        return _redirect_home(SERVER_ERROR)
    logger.info("auth.login", extra={"extra_data": {"user_id": user.id}})
    response = _redirect_home()
    _set_session_cookies(response, credentials)
    return response


@router.post("/signup")
def signup_submit(
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    if not username or not password:
        return _redirect_home("Please enter both username and password")
    try:
        if get_user_by_username(db, username) is not None:
            return _redirect_home("User already exists")
        user = create_user(db, username, hash_password(password))
        credentials = create_session(db, user.id)
    except SQLAlchemyError:
        logger.exception("auth.signup_failed")
        return _redirect_home(SERVER_ERROR)
    logger.info("auth.signup", extra={"extra_data": {"user_id": user.id}})
    response = _redirect_home()
    _set_session_cookies(response, credentials)
    return response


@router.get("/logout")
def logout(
    request: Request,
    user: ResolvedUser | None = Depends(optional_user),
    db: Session = Depends(get_db),
):
    if user is None:
        return _redirect_home()
    try:
        delete_session(db, current_session_id(request) or "")
    except SQLAlchemyError:
        logger.exception("auth.logout_failed")
        return _redirect_home("Logout failed")
    response = _redirect_home()
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    response.delete_cookie(settings.TOKEN_COOKIE_NAME)
    return response
