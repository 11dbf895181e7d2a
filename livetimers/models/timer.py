from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Column, Integer, Text

from ..db.session import Base


class Timer(Base):
    __tablename__ = "timers"

    id = Column(Integer, primary_key=True, index=True)
    timer_id = Column(Text, nullable=False, unique=True, index=True)
    user_id = Column(Text, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    # Epoch milliseconds. ``end`` and ``duration`` stay NULL while active.
    start = Column(BigInteger, nullable=False)
    end = Column(BigInteger, nullable=True)
    duration = Column(BigInteger, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)


__all__ = ["Timer"]
