# Overview: Lookups over the permission vocabulary.

from .definitions import PERMISSION_DEFINITIONS

_BY_CODE = {perm[0]: perm for perm in PERMISSION_DEFINITIONS}


def get_all_permission_codes():
    """Every code, alphabetical."""
    return list(_BY_CODE)


def get_permissions_by_category(category):
    return [perm for perm in PERMISSION_DEFINITIONS if perm[3] == category]


def get_permission_definition(code):
    """Definition as a dict, or None for a code outside the vocabulary."""
    perm = _BY_CODE.get(code)
    if perm is None:
        return None
    return dict(zip(("code", "name", "description", "category"), perm))


def validate_permission_code(code):
    # Exact match; "sell_vehicle" is not SELL_VEHICLE
    return code in _BY_CODE


def unknown_permission_codes(codes):
    """Sorted codes from ``codes`` that are not in the vocabulary."""
    return sorted(code for code in set(codes) if code not in _BY_CODE)
