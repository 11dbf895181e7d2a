"""Snapshot builders run inside a storage session.

They return pydantic models rather than ORM rows so results survive the
session closing on the worker thread.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from ..crud.timers import create_timer, list_active_timers, list_timers, stop_timer
from ..schemas.timer import ActiveTimerOut, TimerOut
from .timecalc import elapsed_ms


def snapshot(db: Session, user_id: str) -> list[TimerOut]:
    return [TimerOut.model_validate(timer) for timer in list_timers(db, user_id)]


def active_snapshot(db: Session, user_id: str, now: int) -> list[ActiveTimerOut]:
    items: list[ActiveTimerOut] = []
    for timer in list_active_timers(db, user_id):
        payload = TimerOut.model_validate(timer).model_dump()
        payload["duration"] = elapsed_ms(timer.start, now)
        items.append(ActiveTimerOut.model_validate(payload))
    return items


def start_timer(db: Session, user_id: str, description: str, now: int | None = None) -> TimerOut:
    return TimerOut.model_validate(create_timer(db, user_id, description, now=now))


def finish_timer(db: Session, user_id: str, timer_id: str, now: int | None = None) -> TimerOut | None:
    timer = stop_timer(db, user_id, timer_id, now=now)
    return TimerOut.model_validate(timer) if timer is not None else None
