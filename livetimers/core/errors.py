from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException


class LiveTimersError(Exception):
    """Base class for failures raised inside the service."""


class AuthenticationFailure(LiveTimersError):
    """A credential was missing, unknown, or pointed at a vanished user."""


class StorageFailure(LiveTimersError):
    """A persistence call raised; callers degrade instead of crashing."""


class ProtocolViolation(LiveTimersError):
    """A live-channel frame was not valid JSON or not a known message."""


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, str) and detail:
        message = detail
    else:
        message = "Unauthorized" if exc.status_code == status.HTTP_401_UNAUTHORIZED else "Error"
    details = detail if isinstance(detail, dict) else None
    code = "unauthorized" if exc.status_code == status.HTTP_401_UNAUTHORIZED else "http_error"
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=code,
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc):  # type: ignore[override]
    from fastapi.exceptions import RequestValidationError

    if isinstance(exc, RequestValidationError):
        return ErrorEnvelope(
            status_code=422,
            code="validation_error",
            message="Validation failed",
            details={"errors": jsonable_encoder(exc.errors())},
        )
    raise exc


async def authentication_failure_handler(request: Request, exc: AuthenticationFailure):
    return ErrorEnvelope(
        status_code=status.HTTP_401_UNAUTHORIZED,
        code="unauthorized",
        message=str(exc) or "Unauthorized",
    )


async def storage_failure_handler(request: Request, exc: StorageFailure):
    return ErrorEnvelope(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        code="storage_unavailable",
        message="Storage is temporarily unavailable",
    )
