"""SQLAlchemy model for browser login sessions.

One row carries two independent credentials for the same user: ``session_id``
travels in the ``sessionId`` cookie and gates HTTP routes, ``token`` is handed
to the page and presented on the live channel.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, Text

from ..db.session import Base


class LoginSession(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Text, nullable=False, unique=True, index=True)
    token = Column(Text, nullable=False, unique=True, index=True)
    # Not a foreign key: resolution validates the id and looks the user up.
    user_id = Column(Text, nullable=False, index=True)
    created_at = Column(Text, nullable=False)


__all__ = ["LoginSession"]
