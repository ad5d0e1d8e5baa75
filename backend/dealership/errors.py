"""Exception hierarchy for the access-control core."""

from __future__ import annotations


class AccessError(Exception):
    """Base exception for all access-control errors."""


class UserNotFoundError(AccessError):
    """Raised when no account matches the supplied username."""

    def __init__(self, username: str):
        super().__init__("Username not found")
        self.username = username


class InvalidCredentialsError(AccessError):
    """
    Raised when the account exists but the password does not match.

    remaining_attempts is None for accounts that cannot be locked (Admin)
    and when the attempt counter could not be read back from the store.
    """

    def __init__(self, remaining_attempts: int | None = None):
        if remaining_attempts is None:
            message = "Invalid password"
        else:
            plural = "" if remaining_attempts == 1 else "s"
            message = f"Invalid password. {remaining_attempts} attempt{plural} remaining."
        super().__init__(message)
        self.remaining_attempts = remaining_attempts


class AccountLockedError(AccessError):
    """Raised for a deactivated non-admin account."""

    def __init__(self, message: str = "Account is locked. Contact an administrator."):
        super().__init__(message)


class ValidationError(AccessError):
    """Raised when input is missing, malformed or collides with existing data."""


class PermissionDeniedError(AccessError):
    """Raised when a principal lacks the role or permission an operation needs."""


class StoreError(AccessError):
    """
    Raised when the underlying store fails (I/O, constraint, schema copy).

    The SQLAlchemy exception is kept as __cause__ and its message is attached.
    """
