"""Live-channel message schema.

Client frames are JSON objects with a ``type`` discriminator. Anything that is
not valid JSON or not one of the known shapes raises ``ProtocolViolation``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from ..core.errors import ProtocolViolation
from .timer import ActiveTimerOut, TimerOut, dump_timer


class AuthenticateMessage(BaseModel):
    type: Literal["authenticate"]
    # Missing, null or non-string tokens are a failed authentication, not a bad frame.
    token: str | None = None

    @field_validator("token", mode="before")
    @classmethod
    def non_string_token_is_missing(cls, value):
        return value if isinstance(value, str) else None


class CreateTimerMessage(BaseModel):
    type: Literal["create_timer"]
    description: str = ""

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, value):
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value


class StopTimerMessage(BaseModel):
    type: Literal["stop_timer"]
    timer_id: str = Field(..., alias="timerId", min_length=1)

    model_config = {"populate_by_name": True}


ClientMessage = Annotated[
    Union[AuthenticateMessage, CreateTimerMessage, StopTimerMessage],
    Field(discriminator="type"),
]

_client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


def parse_client_message(raw: str | bytes) -> ClientMessage:
    try:
        return _client_message_adapter.validate_json(raw)
    except ValidationError as exc:
        raise ProtocolViolation(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    errors = exc.errors(include_url=False, include_context=False, include_input=False)
    if not errors:
        return "invalid message"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "message"
    return f"{location}: {first.get('msg', 'invalid')}"


def all_timers_message(timers: list[TimerOut]) -> dict:
    return {"type": "all_timers", "data": [dump_timer(timer) for timer in timers]}


def active_timers_message(timers: list[ActiveTimerOut]) -> dict:
    return {"type": "active_timers", "data": [dump_timer(timer) for timer in timers]}
