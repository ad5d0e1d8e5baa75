from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text

from .base import Base
from ..time_utils import utcnow


class SecurityEvent(Base):
    """
    Security event audit log.

    Tracks login attempts, lockouts and admin actions against accounts.
    Events are written to whichever store is active, so sandbox activity
    never reaches the production log.

    IMMUTABLE: Never update or delete. Append-only for audit integrity.
    """
    __tablename__ = "security_events"
    __table_args__ = (
        Index("ix_security_events_user_type", "user_id", "event_type"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)  # Nullable for unknown usernames
    username = Column(String(64), nullable=True)

    # LOGIN_FAILED, ACCOUNT_LOCKED, USER_CREATED, PERMISSIONS_REPLACED, ...
    event_type = Column(String(64), nullable=False)
    success = Column(Boolean, nullable=False)
    reason = Column(Text, nullable=True)

    occurred_at = Column(DateTime, nullable=False, default=utcnow)

