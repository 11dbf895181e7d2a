from __future__ import annotations

from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.user import User
from ..services.timecalc import utcnow_iso


def get_user(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    # Usernames are case-sensitive; no normalisation here.
    return db.execute(select(User).where(User.username == username)).scalars().first()


def create_user(db: Session, username: str, password_hash: str) -> User:
    if not username:
        raise ValueError("username is required")
    user = User(
        id=uuid4().hex,
        username=username,
        password_hash=password_hash,
        created_at=utcnow_iso(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
