# Overview: Permission system package.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    INVENTORY_PERMISSIONS,
    SALES_PERMISSIONS,
    USER_PERMISSIONS,
    DEALERSHIP_PERMISSIONS,
)
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_category,
    get_permission_definition,
    validate_permission_code,
    unknown_permission_codes,
)
from .roles import (
    RoleName,
    ROLE_IDS,
    DEFAULT_ROLE_PERMISSIONS,
    PERMISSION_DISPLAY_DEFAULTS,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "INVENTORY_PERMISSIONS",
    "SALES_PERMISSIONS",
    "USER_PERMISSIONS",
    "DEALERSHIP_PERMISSIONS",
    "RoleName",
    "ROLE_IDS",
    "DEFAULT_ROLE_PERMISSIONS",
    "PERMISSION_DISPLAY_DEFAULTS",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "get_permission_definition",
    "validate_permission_code",
    "unknown_permission_codes",
]
