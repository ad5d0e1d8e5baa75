from .base import Base
from .auth import User, Role, Permission, UserPermission, PasswordResetRequest
from .inventory import Dealership, Vehicle, Sale
from .security import SecurityEvent

__all__ = [
    'Base',
    'User', 'Role', 'Permission', 'UserPermission', 'PasswordResetRequest',
    'Dealership', 'Vehicle', 'Sale',
    'SecurityEvent',
]
