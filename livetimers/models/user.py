"""SQLAlchemy model for accounts that own sessions and timers."""

from __future__ import annotations

from sqlalchemy import Column, Text

from ..db.session import Base


class User(Base):
    __tablename__ = "users"

    # UUID hex string; opaque to everything outside this package.
    id = Column(Text, primary_key=True)
    username = Column(Text, nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)


__all__ = ["User"]
