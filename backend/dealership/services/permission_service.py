# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Per-user permission flags and security event logging

DESIGN PRINCIPLES:
- Closed vocabulary: only codes from PERMISSION_DEFINITIONS are accepted
- Snapshot reads: load_permissions returns an immutable PermissionSet;
  callers reload after an admin edit to see changes
- Full replace: replace_permissions clears a user's rows and re-inserts the
  enabled ones inside the caller's single transaction (all-or-nothing)
- Defaults are explicit: a permission with no stored row resolves to the
  default the caller asks for
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..errors import PermissionDeniedError, ValidationError
from ..models import Permission, SecurityEvent, UserPermission
from ..permissions import PERMISSION_DEFINITIONS, unknown_permission_codes
from ..time_utils import utcnow


class PermissionSet:
    """Point-in-time name -> enabled map for one user."""

    __slots__ = ("_flags", "default")

    def __init__(self, flags: Mapping[str, bool] | None = None, default: bool = False):
        self._flags = dict(flags or {})
        self.default = default

    def has_permission(self, name: str, default: bool | None = None) -> bool:
        """
        Pure lookup. A name with no stored row resolves to ``default`` when
        given, otherwise to the set's own default.
        """
        if name in self._flags:
            return self._flags[name]
        return self.default if default is None else default

    def enabled(self) -> list[str]:
        return sorted(name for name, on in self._flags.items() if on)

    def as_dict(self) -> dict[str, bool]:
        return dict(self._flags)

    def __contains__(self, name: str) -> bool:
        return self.has_permission(name)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PermissionSet):
            return NotImplemented
        return self._flags == other._flags and self.default == other.default

    def __repr__(self) -> str:
        return f"PermissionSet({self.enabled()!r}, default={self.default!r})"


def log_security_event(
    session: Session,
    *,
    event_type: str,
    success: bool,
    user_id: int | None = None,
    username: str | None = None,
    reason: str | None = None,
) -> SecurityEvent:
    """
    Append a security event to the active store's audit trail.

    event_type examples:
    - LOGIN_SUCCESS / LOGIN_FAILED / LOGIN_BLOCKED
    - ACCOUNT_LOCKED
    - PERMISSION_DENIED
    - USER_CREATED / USER_ACTIVATED / USER_DEACTIVATED
    - PASSWORD_CHANGED / PASSWORD_RESET
    - PERMISSIONS_REPLACED
    - LOGOUT
    """
    event = SecurityEvent(
        user_id=user_id,
        username=username,
        event_type=event_type,
        success=success,
        reason=reason,
        occurred_at=utcnow(),
    )
    session.add(event)
    session.flush()
    return event


def list_security_events(session: Session, *, user_id: int | None = None, limit: int = 50) -> list[SecurityEvent]:
    query = select(SecurityEvent).order_by(SecurityEvent.id.desc()).limit(limit)
    if user_id is not None:
        query = query.where(SecurityEvent.user_id == user_id)
    return list(session.execute(query).scalars())


def initialize_permissions(session: Session) -> int:
    """
    Create Permission records for all codes in PERMISSION_DEFINITIONS.

    Idempotent: Safe to run multiple times.
    """
    existing = set(session.execute(select(Permission.name)).scalars())
    created_count = 0

    for code, _name, _description, _category in PERMISSION_DEFINITIONS:
        if code not in existing:
            session.add(Permission(name=code))
            created_count += 1

    session.flush()
    return created_count


def load_permissions(session: Session, user_id: int, default: bool = False) -> PermissionSet:
    rows = session.execute(
        select(Permission.name, UserPermission.is_enabled)
        .join(UserPermission, UserPermission.permission_id == Permission.id)
        .where(UserPermission.user_id == user_id)
    ).all()
    return PermissionSet({name: bool(enabled) for name, enabled in rows}, default=default)


def _desired_codes(desired: Iterable[str] | Mapping[str, bool]) -> set[str]:
    if isinstance(desired, Mapping):
        codes = {code for code, enabled in desired.items() if enabled}
    else:
        codes = set(desired)

    unknown = unknown_permission_codes(codes)
    if unknown:
        raise ValidationError(f"Unknown permission(s): {', '.join(unknown)}")
    return codes


def replace_permissions(
    session: Session,
    user_id: int,
    desired: Iterable[str] | Mapping[str, bool],
) -> PermissionSet:
    """
    Replace every permission row for a user.

    ``desired`` is either a collection of codes to enable or a code -> bool
    map (only True entries are stored). Unknown codes raise ValidationError
    before anything is written.
    """
    codes = _desired_codes(desired)

    permission_ids = dict(session.execute(
        select(Permission.name, Permission.id).where(Permission.name.in_(codes))
    ).all())
    missing = sorted(codes - permission_ids.keys())
    if missing:
        raise ValidationError(f"Permission(s) not found in store: {', '.join(missing)}")

    session.execute(delete(UserPermission).where(UserPermission.user_id == user_id))
    for code in sorted(codes):
        session.add(UserPermission(user_id=user_id, permission_id=permission_ids[code], is_enabled=True))
    session.flush()

    return load_permissions(session, user_id)


def require_permission(principal, permission_code: str) -> None:
    """
    Require a principal to hold a permission, raise PermissionDeniedError if not.

    Usage:
        require_permission(principal, "SELL_VEHICLE")
    """
    if not principal.has_permission(permission_code):
        raise PermissionDeniedError(f"Permission denied: {permission_code}")
