# Overview: Service-layer operations for accounts and passwords; encapsulates business logic and database work.

"""
Accounts and passwords

Every function takes the SQLAlchemy session of the active store as its first
argument; callers own the transaction (see StoreHandle.session).

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Username lookups are case-insensitive
- Password changes never touch failed_attempts or is_active
"""

from __future__ import annotations

import secrets

import bcrypt
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ValidationError
from ..models import Role, User
from ..permissions import ROLE_IDS, RoleName
from ..time_utils import today

DEFAULT_BCRYPT_ROUNDS = 12


def validate_password(password: str | None, *, min_length: int = 1, confirm: str | None = None) -> None:
    """
    Validate a new password.

    Requirements:
    - Not empty
    - At least min_length characters
    - Equal to confirm, when a confirmation is supplied

    Raises ValidationError if requirements not met.
    """
    if not password:
        raise ValidationError("Password cannot be empty")

    if len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters long")

    if confirm is not None and password != confirm:
        raise ValidationError("Passwords do not match")


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. A stored value that is not a bcrypt
    hash (e.g. a legacy plaintext password) never matches.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def generate_temp_password() -> str:
    """Temporary password handed to a new user; must be changed on first login."""
    return "temp" + secrets.token_hex(4)


def username_key(username: str) -> str:
    """Comparison form of a username. casefold() covers non-ASCII letters ('Émile' -> 'émile')."""
    return username.strip().casefold()


def find_user(session: Session, username: str | None) -> User | None:
    """Case-insensitive lookup by username."""
    if not username or not username.strip():
        return None
    return session.execute(
        select(User).where(User.username_key == username_key(username))
    ).scalar_one_or_none()


def get_user(session: Session, user_id: int) -> User | None:
    return session.get(User, user_id)


def list_users(session: Session) -> list[User]:
    return list(session.execute(select(User).order_by(User.id)).scalars())


def count_admins(session: Session) -> int:
    return session.execute(
        select(func.count()).select_from(User).where(User.role_id == ROLE_IDS[RoleName.ADMIN])
    ).scalar_one()


def create_default_roles(session: Session) -> int:
    """Create the three fixed roles at their contract ids if they don't exist."""
    created = 0
    for role_name, role_id in ROLE_IDS.items():
        if session.get(Role, role_id) is None:
            session.add(Role(id=role_id, name=role_name.value))
            created += 1
    session.flush()
    return created


def create_user(
    session: Session,
    *,
    role,
    username: str,
    password_hash: str,
    name: str,
    email: str | None,
    phone: str | None,
    is_temp_password: bool = True,
) -> User:
    """
    Insert a new account.

    Username must not collide (case-insensitively) with an existing one or
    ValidationError is raised. The UNIQUE username_key column backs this
    check up if two creations race.
    """
    try:
        role = RoleName.parse(role)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    role_row = session.get(Role, ROLE_IDS[role])
    if role_row is None:
        raise ValidationError(f"Role {role.value} not found")

    username = username.strip()
    if find_user(session, username) is not None:
        raise ValidationError(f"Username '{username}' already exists")

    user = User(
        username=username,
        username_key=username_key(username),
        password_hash=password_hash,
        role=role_row,
        name=name.strip(),
        email=email,
        phone=phone,
        is_active=True,
        is_temp_password=is_temp_password,
        failed_attempts=0,
        join_date=today(),
    )
    session.add(user)
    try:
        session.flush()
    except IntegrityError as exc:
        raise ValidationError(f"Username '{username}' already exists") from exc

    return user


def change_password(session: Session, user: User, password_hash: str) -> None:
    """Voluntary or forced change: new hash, temporary flag cleared."""
    user.password_hash = password_hash
    user.is_temp_password = False
    session.flush()


def reset_password(session: Session, user: User, password_hash: str) -> None:
    """Admin reset: new hash only; the temporary flag is left as it is."""
    user.password_hash = password_hash
    session.flush()


def toggle_active(session: Session, user: User) -> bool:
    """
    Flip is_active and return the new value.

    Activating also zeroes failed_attempts in the same UPDATE, so an
    active account with a full attempt counter is never persisted.
    """
    if user.is_active:
        user.is_active = False
    else:
        user.is_active = True
        user.failed_attempts = 0
    session.flush()
    return user.is_active
