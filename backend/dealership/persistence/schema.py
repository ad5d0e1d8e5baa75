# Overview: Durable store bootstrap: tables, fixed roles and the permission vocabulary.

from __future__ import annotations

import logging

from ..models import Base
from ..services import auth_service, permission_service
from .handle import StoreHandle

logger = logging.getLogger(__name__)


def initialize_store(store: StoreHandle) -> dict:
    """
    Create any missing tables and seed roles/permissions.

    Idempotent: existing tables and rows are left alone.
    """
    with store.transaction() as conn:
        Base.metadata.create_all(conn)

    with store.session() as session:
        roles_created = auth_service.create_default_roles(session)
        permissions_created = permission_service.initialize_permissions(session)

    if roles_created or permissions_created:
        logger.info(
            "Initialized store: %d roles, %d permissions created",
            roles_created, permissions_created,
        )
    return {"roles_created": roles_created, "permissions_created": permissions_created}
