# Overview: Fixed roles, their store ids and default permission sets.

import enum

from .helpers import get_all_permission_codes


class RoleName(str, enum.Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    SALESPERSON = "Salesperson"

    @classmethod
    def parse(cls, value):
        """Accept a RoleName, its value, or its name in any case."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for role in cls:
            if text.lower() in (role.value.lower(), role.name.lower()):
                return role
        raise ValueError(f"Unknown role: {value!r}")


# roles.role_id values are part of the persisted contract
ROLE_IDS = {
    RoleName.ADMIN: 1,
    RoleName.MANAGER: 2,
    RoleName.SALESPERSON: 3,
}


# Granted to a user at creation time; admins edit them afterwards.
DEFAULT_ROLE_PERMISSIONS = {
    RoleName.ADMIN: set(get_all_permission_codes()),
    RoleName.MANAGER: {
        "ADD_VEHICLE",
        "EDIT_VEHICLE",
        "REMOVE_VEHICLE",
        "SEARCH_VEHICLES",
        "SELL_VEHICLE",
        "VIEW_DEALERSHIP_INFO",
        "VIEW_SALES_HISTORY",
    },
    RoleName.SALESPERSON: {
        "SEARCH_VEHICLES",
        "SELL_VEHICLE",
        "VIEW_DEALERSHIP_INFO",
    },
}


# Value a dashboard assumes when a permission has no stored row.
# Search is visible unless explicitly disabled; everything else is hidden.
PERMISSION_DISPLAY_DEFAULTS = {
    "SEARCH_VEHICLES": True,
}
