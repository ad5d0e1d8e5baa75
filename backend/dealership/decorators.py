# Overview: Role and permission guards for operations that take a principal.

from functools import wraps

from .errors import PermissionDeniedError
from .services import permission_service


def admin_required(f):
    """
    Guard an AccessController method whose first argument is the acting principal.

    Denials are written to the audit trail before PermissionDeniedError is raised.
    """
    @wraps(f)
    def decorated_function(self, actor, *args, **kwargs):
        if actor is None or not actor.is_admin or actor.must_change_password:
            self._audit(
                "PERMISSION_DENIED",
                success=False,
                user_id=getattr(actor, "user_id", None),
                username=getattr(actor, "username", None),
                reason=f"Admin role required for {f.__name__}",
            )
            raise PermissionDeniedError(f"Admin role required: {f.__name__}")
        return f(self, actor, *args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific permission on the principal passed as first argument.

    For the surrounding application's operations (sell, add vehicle, ...):

        @require_permission("SELL_VEHICLE")
        def sell_vehicle(principal, vehicle_id, buyer): ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(principal, *args, **kwargs):
            permission_service.require_permission(principal, permission_code)
            return f(principal, *args, **kwargs)

        return decorated_function

    return decorator
