# Overview: Clock helpers. Stored timestamps are naive UTC.

from __future__ import annotations

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    """users.join_date value for accounts created now."""
    return utcnow().date()


def timestamp_text(dt: datetime | None = None) -> str:
    """Second-precision ISO text for TEXT timestamp columns (password_reset_requests.request_date)."""
    return (dt or utcnow()).replace(microsecond=0).isoformat()

