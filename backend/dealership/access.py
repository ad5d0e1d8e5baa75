# Overview: Composition root exposing login, account administration, permissions and sandbox mode.

"""
AccessController

Wires SandboxController -> StoreHandle -> services and exposes the
operations the surrounding application calls. Each operation runs in its
own store transaction against whichever store is active at call time.

Login outcomes:
- Principal                 credentials accepted (check must_change_password)
- UserNotFoundError         no such username
- InvalidCredentialsError   wrong password (remaining_attempts for lockable accounts)
- AccountLockedError        non-admin account deactivated
- StoreError                store failure while loading the account
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Iterable, Mapping

from .decorators import admin_required
from .errors import (
    AccountLockedError,
    InvalidCredentialsError,
    StoreError,
    UserNotFoundError,
    ValidationError,
)
from .models import PasswordResetRequest, User
from .permissions import DEFAULT_ROLE_PERMISSIONS, RoleName
from .persistence import SandboxController, StoreHandle, initialize_store, seed_sandbox_fixtures
from .services import auth_service, lockout_service, password_reset_service, permission_service
from .services.permission_service import PermissionSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """
    Authenticated identity plus a permission snapshot taken at login.

    The snapshot does not follow later admin edits; log in again to refresh.
    A principal holding a temporary password has no permissions and cannot
    act as an admin until the password is changed.
    """
    user_id: int
    username: str
    name: str
    role: RoleName
    is_active: bool
    is_temp_password: bool
    permissions: PermissionSet

    @classmethod
    def from_user(cls, user: User, permissions: PermissionSet) -> "Principal":
        return cls(
            user_id=user.id,
            username=user.username,
            name=user.name,
            role=RoleName.parse(user.role_name),
            is_active=bool(user.is_active),
            is_temp_password=bool(user.is_temp_password),
            permissions=permissions,
        )

    @property
    def is_admin(self) -> bool:
        return self.role is RoleName.ADMIN

    @property
    def must_change_password(self) -> bool:
        return self.is_temp_password

    def has_permission(self, name: str, default: bool | None = None) -> bool:
        if self.must_change_password:
            return False
        return self.permissions.has_permission(name, default)


def _require_fields(**fields) -> None:
    missing = [name for name, value in fields.items() if value is None or not str(value).strip()]
    if missing:
        raise ValidationError(f"Required field(s) empty: {', '.join(missing)}")


class AccessController:
    def __init__(
        self,
        sandbox: SandboxController,
        *,
        bcrypt_rounds: int = auth_service.DEFAULT_BCRYPT_ROUNDS,
        max_failed_attempts: int = lockout_service.MAX_FAILED_ATTEMPTS,
        min_password_length: int = 6,
    ):
        self.sandbox = sandbox
        self.store = StoreHandle(sandbox)
        self.bcrypt_rounds = bcrypt_rounds
        self.max_failed_attempts = max_failed_attempts
        self.min_password_length = min_password_length

    @classmethod
    def from_config(cls, config: Mapping) -> "AccessController":
        """Open the durable store named in config and make sure its schema exists."""
        rounds = int(config.get("BCRYPT_ROUNDS", auth_service.DEFAULT_BCRYPT_ROUNDS))
        sandbox = SandboxController(
            config["DATABASE_PATH"],
            seed_fixtures=partial(seed_sandbox_fixtures, bcrypt_rounds=rounds),
            echo=bool(config.get("SQL_ECHO", False)),
        )
        controller = cls(
            sandbox,
            bcrypt_rounds=rounds,
            max_failed_attempts=int(config.get("MAX_FAILED_ATTEMPTS", lockout_service.MAX_FAILED_ATTEMPTS)),
            min_password_length=int(config.get("MIN_PASSWORD_LENGTH", 6)),
        )
        controller.initialize_store()
        return controller

    def initialize_store(self) -> dict:
        return initialize_store(self.store)

    def close(self) -> None:
        self.sandbox.close()

    # -- internals --

    def _hash(self, password: str) -> str:
        return auth_service.hash_password(password, self.bcrypt_rounds)

    def _audit(self, event_type: str, *, success: bool, user_id=None, username=None, reason=None) -> None:
        """Best-effort audit write in its own transaction; failures are logged, not raised."""
        try:
            with self.store.session() as session:
                permission_service.log_security_event(
                    session,
                    event_type=event_type,
                    success=success,
                    user_id=user_id,
                    username=username,
                    reason=reason,
                )
        except StoreError:
            logger.exception("Failed to record security event %s for %s", event_type, username)

    def _target(self, session, username: str) -> User:
        user = auth_service.find_user(session, username)
        if user is None:
            raise UserNotFoundError(username)
        return user

    # -- login --

    def login(self, username: str, password: str) -> Principal:
        """
        An empty username is reported as not found. An empty password is a
        wrong password and counts toward the lockout like any other.
        """
        with self.store.session() as session:
            user = auth_service.find_user(session, username)
            locked = user is not None and lockout_service.is_account_locked(session, user)

        if user is None:
            logger.info("Login failed: unknown username %r", username)
            self._audit("LOGIN_FAILED", success=False, username=username, reason="Unknown username")
            raise UserNotFoundError(username)

        if locked:
            logger.warning("Blocked login attempt for locked account %s", user.username)
            self._audit("LOGIN_BLOCKED", success=False, user_id=user.id, username=user.username,
                        reason="Account is locked")
            raise AccountLockedError()

        if not auth_service.verify_password(password, user.password_hash):
            self._wrong_password(user)

        with self.store.session() as session:
            if lockout_service.is_lockable(user):
                lockout_service.reset_failed_attempts(session, user)
            permissions = permission_service.load_permissions(session, user.id)

        self._audit("LOGIN_SUCCESS", success=True, user_id=user.id, username=user.username)
        principal = Principal.from_user(user, permissions)
        if principal.must_change_password:
            logger.info("User %s logged in with a temporary password", user.username)
        return principal

    def _wrong_password(self, user: User) -> None:
        """Count the failure (non-admins only) and raise the matching error."""
        if not lockout_service.is_lockable(user):
            self._audit("LOGIN_FAILED", success=False, user_id=user.id, username=user.username,
                        reason="Invalid password")
            raise InvalidCredentialsError()

        try:
            with self.store.session() as session:
                count, locked = lockout_service.record_failed_attempt(
                    session, user, self.max_failed_attempts
                )
        except StoreError as exc:
            # Same message as a plain mismatch so an outage is not revealed
            logger.exception("Error tracking failed attempts for %s", user.username)
            raise InvalidCredentialsError() from exc

        logger.info("User %s has %d failed attempts", user.username, count)
        self._audit("LOGIN_FAILED", success=False, user_id=user.id, username=user.username,
                    reason=f"Invalid password ({count} consecutive)")

        if locked:
            logger.warning("Account %s locked after %d failed attempts", user.username, count)
            self._audit("ACCOUNT_LOCKED", success=False, user_id=user.id, username=user.username,
                        reason="Too many failed attempts")
            raise AccountLockedError(
                "Account locked due to too many failed attempts. Contact an administrator."
            )

        raise InvalidCredentialsError(self.max_failed_attempts - count)

    def logout(self, principal: Principal | None) -> None:
        """Sessions are not tracked; the caller just drops the principal."""
        if principal is not None:
            self._audit("LOGOUT", success=True, user_id=principal.user_id, username=principal.username)

    def change_password(self, principal: Principal, new_password: str, confirm_password: str | None = None) -> None:
        """
        Set a new password for the logged-in user and clear the temporary flag.

        The principal is not updated; log in again with the new password.
        """
        auth_service.validate_password(
            new_password, min_length=self.min_password_length, confirm=confirm_password
        )
        password_hash = self._hash(new_password)
        with self.store.session() as session:
            user = auth_service.get_user(session, principal.user_id)
            if user is None:
                raise UserNotFoundError(principal.username)
            auth_service.change_password(session, user, password_hash)
        self._audit("PASSWORD_CHANGED", success=True, user_id=principal.user_id, username=principal.username)

    def request_password_reset(self, username: str) -> PasswordResetRequest:
        """Record a self-service request for an admin to act on."""
        with self.store.session() as session:
            user = self._target(session, username)
            return password_reset_service.add_password_reset_request(session, user.username)

    # -- administration --

    def bootstrap_admin(self, *, username: str, password: str, name: str,
                        email: str | None = None, phone: str | None = None) -> User:
        """
        Create the first Admin account (no acting principal exists yet).

        Refused once any Admin exists; from then on use create_user.
        """
        _require_fields(username=username, password=password, name=name)
        auth_service.validate_password(password, min_length=self.min_password_length)
        password_hash = self._hash(password)
        with self.store.session() as session:
            if auth_service.count_admins(session):
                raise ValidationError("An admin account already exists")
            user = auth_service.create_user(
                session,
                role=RoleName.ADMIN,
                username=username,
                password_hash=password_hash,
                name=name,
                email=email,
                phone=phone,
                is_temp_password=False,
            )
            permission_service.replace_permissions(
                session, user.id, DEFAULT_ROLE_PERMISSIONS[RoleName.ADMIN]
            )
        self._audit("USER_CREATED", success=True, user_id=user.id, username=user.username,
                    reason="Bootstrap admin")
        return user

    @admin_required
    def create_user(self, actor: Principal, role, username: str, temp_password: str,
                    name: str, email: str, phone: str) -> User:
        """
        Create an account with a temporary password the user must change on first login.

        The new account starts with its role's default permissions.
        """
        _require_fields(role=role, username=username, temp_password=temp_password,
                        name=name, email=email, phone=phone)
        try:
            role = RoleName.parse(role)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        auth_service.validate_password(temp_password, min_length=self.min_password_length)
        password_hash = self._hash(temp_password)

        with self.store.session() as session:
            user = auth_service.create_user(
                session,
                role=role,
                username=username,
                password_hash=password_hash,
                name=name,
                email=email,
                phone=phone,
                is_temp_password=True,
            )
            permission_service.replace_permissions(
                session, user.id, DEFAULT_ROLE_PERMISSIONS[role]
            )

        logger.info("%s created %s account %s", actor.username, role.value, user.username)
        self._audit("USER_CREATED", success=True, user_id=user.id, username=user.username,
                    reason=f"Created by {actor.username} as {role.value}")
        return user

    @admin_required
    def reset_password(self, actor: Principal, target_username: str, new_password: str) -> None:
        """Set a user's password. The temporary flag is not set, so no forced change follows."""
        auth_service.validate_password(new_password, min_length=self.min_password_length)
        password_hash = self._hash(new_password)
        with self.store.session() as session:
            user = self._target(session, target_username)
            auth_service.reset_password(session, user, password_hash)

        logger.info("%s reset the password of %s", actor.username, user.username)
        self._audit("PASSWORD_RESET", success=True, user_id=user.id, username=user.username,
                    reason=f"Reset by {actor.username}")

    @admin_required
    def toggle_active(self, actor: Principal, target_username: str) -> bool:
        """Flip the active flag; reactivation also clears the failed-attempt counter. Returns the new flag."""
        with self.store.session() as session:
            user = self._target(session, target_username)
            is_active = auth_service.toggle_active(session, user)

        event = "USER_ACTIVATED" if is_active else "USER_DEACTIVATED"
        logger.info("%s set %s active=%s", actor.username, user.username, is_active)
        self._audit(event, success=True, user_id=user.id, username=user.username,
                    reason=f"Toggled by {actor.username}")
        return is_active

    @admin_required
    def list_users(self, actor: Principal) -> list[dict]:
        """Every account with its enabled permissions, for the user management table."""
        with self.store.session() as session:
            rows = []
            for user in auth_service.list_users(session):
                row = user.to_dict()
                row["permissions"] = permission_service.load_permissions(session, user.id).enabled()
                rows.append(row)
        return rows

    @admin_required
    def list_password_reset_requests(self, actor: Principal) -> list[PasswordResetRequest]:
        with self.store.session() as session:
            return password_reset_service.list_password_reset_requests(session)

    # -- permissions --

    def load_permissions(self, user_id: int, default: bool = False) -> PermissionSet:
        with self.store.session() as session:
            return permission_service.load_permissions(session, user_id, default)

    @admin_required
    def replace_permissions(self, actor: Principal, user_id: int,
                            desired: Iterable[str] | Mapping[str, bool]) -> PermissionSet:
        """
        Replace a user's permissions in one transaction.

        Inactive users cannot be edited. Changes reach the affected user at
        their next login.
        """
        with self.store.session() as session:
            user = auth_service.get_user(session, user_id)
            if user is None:
                raise UserNotFoundError(str(user_id))
            if not user.is_active:
                raise ValidationError("Cannot edit permissions for an inactive user")
            permissions = permission_service.replace_permissions(session, user_id, desired)

        self._audit("PERMISSIONS_REPLACED", success=True, user_id=user.id, username=user.username,
                    reason=f"By {actor.username}: {', '.join(permissions.enabled()) or 'none'}")
        return permissions

    # -- sandbox mode --

    def enter_sandbox(self) -> bool:
        return self.sandbox.enter()

    def exit_sandbox(self) -> bool:
        return self.sandbox.exit()

    def is_sandbox_active(self) -> bool:
        return self.sandbox.is_active()
