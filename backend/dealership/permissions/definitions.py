# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)
# Codes are case-sensitive and form a closed set; the store's permissions
# table holds exactly these names.

from .categories import PermissionCategory


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "ADD_VEHICLE",
        "Add Vehicle",
        "Add cars and motorcycles to a dealership's inventory",
        PermissionCategory.INVENTORY,
    ),
    (
        "EDIT_VEHICLE",
        "Edit Vehicle",
        "Change details of a vehicle in inventory",
        PermissionCategory.INVENTORY,
    ),
    (
        "REMOVE_VEHICLE",
        "Remove Vehicle",
        "Remove a vehicle from inventory",
        PermissionCategory.INVENTORY,
    ),
    (
        "SEARCH_VEHICLES",
        "Search Vehicles",
        "Search and filter the vehicle inventory",
        PermissionCategory.INVENTORY,
    ),
]


# -- SALES --

SALES_PERMISSIONS = [
    (
        "SELL_VEHICLE",
        "Sell Vehicle",
        "Record the sale of a vehicle to a buyer",
        PermissionCategory.SALES,
    ),
    (
        "VIEW_SALES_HISTORY",
        "View Sales History",
        "View past sales and sales reports",
        PermissionCategory.SALES,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "MANAGE_USERS",
        "Manage Users",
        "Create users, toggle active status and edit permissions",
        PermissionCategory.USERS,
    ),
    (
        "RESET_PASSWORDS",
        "Reset Passwords",
        "Handle password reset requests",
        PermissionCategory.USERS,
    ),
]


# -- DEALERSHIP --

DEALERSHIP_PERMISSIONS = [
    (
        "VIEW_DEALERSHIP_INFO",
        "View Dealership Info",
        "View dealership name, location and capacity",
        PermissionCategory.DEALERSHIP,
    ),
]


PERMISSION_DEFINITIONS = sorted(
    INVENTORY_PERMISSIONS
    + SALES_PERMISSIONS
    + USER_PERMISSIONS
    + DEALERSHIP_PERMISSIONS,
    key=lambda perm: perm[0],
)
