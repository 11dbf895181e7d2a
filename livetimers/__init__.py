"""Application wiring for the Live Timers service.

This module builds the FastAPI instance and the process-scoped objects the
live channel shares:

* ``registry``: user id to live connection (``realtime.registry``)
* ``storage``: async bridge to the SQLAlchemy session factory
* ``auth_resolver``: credential to user lookup used by the live channel
* ``broadcaster``: the once-a-second ``active_timers`` push

They hang off ``app.state`` so routes and tests reach them without module
globals. The broadcaster starts with the app and is cancelled on shutdown.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import (
    AuthenticationFailure,
    StorageFailure,
    authentication_failure_handler,
    http_exception_handler,
    storage_failure_handler,
    validation_exception_handler,
)
from .db.gateway import StorageGateway
from .db.session import Base, SessionLocal, engine
from .middlewares import RequestIdMiddleware
from .realtime.broadcaster import TimerBroadcaster
from .realtime.registry import ConnectionRegistry
from .services.auth import AuthResolver

# Importing the models registers their tables on ``Base.metadata``.
from .models import login_session as _login_session  # noqa: F401
from .models import timer as _timer  # noqa: F401
from .models import user as _user  # noqa: F401

# ---------- App init ----------
app = FastAPI(title=settings.APP_NAME)

Base.metadata.create_all(bind=engine)

# ---------- Shared live-channel state ----------
app.state.registry = ConnectionRegistry()
app.state.storage = StorageGateway(SessionLocal)
app.state.auth_resolver = AuthResolver(app.state.storage)
app.state.broadcaster = TimerBroadcaster(
    app.state.registry,
    app.state.storage,
    interval=settings.TICK_INTERVAL_SECONDS,
)


@app.on_event("startup")
async def _start_broadcaster() -> None:
    if settings.broadcast_enabled:
        app.state.broadcaster.start()


@app.on_event("shutdown")
async def _stop_broadcaster() -> None:
    await app.state.broadcaster.stop()
    app.state.registry.clear()


# ---------- Middleware ----------
app.add_middleware(RequestIdMiddleware)
if settings.ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

# ---------- Routers ----------
from .routers import auth_ui as auth_ui_router  # noqa: E402

app.include_router(auth_ui_router.router)

from .routers import api_auth as api_auth_router  # noqa: E402

app.include_router(api_auth_router.router)

from .routers import live as live_router  # noqa: E402

app.include_router(live_router.router)

# ---------- Exception handling ----------
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(AuthenticationFailure, authentication_failure_handler)
app.add_exception_handler(StorageFailure, storage_failure_handler)


__all__ = ["app"]
