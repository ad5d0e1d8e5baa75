"""
Account lockout

WHY: Prevent brute-force password attacks by limiting failed login attempts.
After MAX_FAILED_ATTEMPTS consecutive failures a non-admin account is
deactivated and stays that way until an administrator reactivates it.

- The counter lives in users.failed_attempts
- Admin accounts are never counted or locked
- A successful login resets the counter
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..models import User
from ..permissions import ROLE_IDS, RoleName

MAX_FAILED_ATTEMPTS = 3


def is_lockable(user: User) -> bool:
    return user.role_id != ROLE_IDS[RoleName.ADMIN]


def read_is_active(session: Session, user_id: int) -> bool:
    """Authoritative active flag, read from the store rather than a cached object."""
    return bool(session.execute(
        select(User.is_active).where(User.id == user_id)
    ).scalar_one())


def read_failed_attempts(session: Session, user_id: int) -> int:
    return session.execute(
        select(User.failed_attempts).where(User.id == user_id)
    ).scalar_one()


def is_account_locked(session: Session, user: User) -> bool:
    if not is_lockable(user):
        return False
    return not read_is_active(session, user.id)


def record_failed_attempt(
    session: Session,
    user: User,
    max_attempts: int = MAX_FAILED_ATTEMPTS,
) -> tuple[int, bool]:
    """
    Count one failed attempt and lock the account when the threshold is hit.

    The increment is done in SQL, then the count is read back from the
    store before deciding on the lockout; the caller's transaction makes the
    increment, read-back and deactivation one unit.

    Returns (failed_attempts, locked).
    """
    session.execute(
        update(User)
        .where(User.id == user.id)
        .values(failed_attempts=User.failed_attempts + 1)
    )
    count = read_failed_attempts(session, user.id)

    locked = count >= max_attempts
    if locked:
        session.execute(
            update(User).where(User.id == user.id).values(is_active=False)
        )
    return count, locked


def reset_failed_attempts(session: Session, user: User) -> None:
    session.execute(
        update(User).where(User.id == user.id).values(failed_attempts=0)
    )


def get_lockout_status(session: Session, user: User, max_attempts: int = MAX_FAILED_ATTEMPTS) -> dict:
    """
    Get detailed lockout status for an account.

    Returns dict with:
    - lockable: bool
    - locked: bool
    - failed_attempts: int
    - max_attempts: int
    - remaining_attempts: int | None
    """
    lockable = is_lockable(user)
    failed = read_failed_attempts(session, user.id)
    return {
        "lockable": lockable,
        "locked": is_account_locked(session, user),
        "failed_attempts": failed,
        "max_attempts": max_attempts,
        "remaining_attempts": max(max_attempts - failed, 0) if lockable else None,
    }
