"""Timer Ledger: plain persistence for per-user timers.

Every query filters on the caller's own ``user_id``; that filter is the only
thing standing between one user and another user's timers.
"""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..models.timer import Timer
from ..services.timecalc import close_interval, now_ms


def list_timers(db: Session, user_id: str) -> list[Timer]:
    stmt = select(Timer).where(Timer.user_id == user_id).order_by(Timer.start, Timer.id)
    return list(db.execute(stmt).scalars().all())


def list_active_timers(db: Session, user_id: str) -> list[Timer]:
    stmt = (
        select(Timer)
        .where(Timer.user_id == user_id, Timer.is_active.is_(True))
        .order_by(Timer.start, Timer.id)
    )
    return list(db.execute(stmt).scalars().all())


def get_active_timer(db: Session, user_id: str, timer_id: str) -> Timer | None:
    stmt = select(Timer).where(
        Timer.user_id == user_id,
        Timer.timer_id == timer_id,
        Timer.is_active.is_(True),
    )
    return db.execute(stmt).scalars().first()


def create_timer(db: Session, user_id: str, description: str, *, now: int | None = None) -> Timer:
    timer = Timer(
        timer_id=uuid4().hex,
        user_id=user_id,
        description=description,
        start=now_ms() if now is None else now,
        is_active=True,
    )
    db.add(timer)
    db.commit()
    db.refresh(timer)
    return timer


def stop_timer(db: Session, user_id: str, timer_id: str, *, now: int | None = None) -> Timer | None:
    """Stop the caller's active timer ``timer_id``.

    Returns ``None`` (and writes nothing) when the timer is unknown, already
    stopped, or owned by someone else.
    """

    timer = get_active_timer(db, user_id, timer_id)
    if timer is None:
        return None
    end, duration = close_interval(timer.start, now_ms() if now is None else now)
    # Only a still-active row matches; a stop that lost the race updates nothing.
    stmt = (
        update(Timer)
        .where(
            Timer.id == timer.id,
            Timer.user_id == user_id,
            Timer.is_active.is_(True),
        )
        .values(is_active=False, end=end, duration=duration)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    if result.rowcount == 0:
        return None
    db.refresh(timer)
    return timer
