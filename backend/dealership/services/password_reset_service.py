# Overview: Self-service password reset requests (append-only log read by admins).

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import PasswordResetRequest
from ..time_utils import timestamp_text


def add_password_reset_request(session: Session, username: str) -> PasswordResetRequest:
    request = PasswordResetRequest(username=username, request_date=timestamp_text())
    session.add(request)
    session.flush()
    return request


def list_password_reset_requests(session: Session) -> list[PasswordResetRequest]:
    """Oldest first. Requests are never deleted automatically."""
    return list(session.execute(
        select(PasswordResetRequest).order_by(PasswordResetRequest.id)
    ).scalars())
