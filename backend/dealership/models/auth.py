from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import Base
from ..time_utils import today


class Role(Base):
    """
    The three fixed roles. Seeded at ids 1/2/3 (Admin, Manager, Salesperson);
    the ids are part of the persisted contract.
    """
    __tablename__ = "roles"

    id = Column("role_id", Integer, primary_key=True)
    name = Column("role_name", Text, nullable=False)


class User(Base):
    """
    Identity and security record for one account.

    username keeps the spelling it was created with. username_key holds its
    casefolded form; lookups go through the key and its UNIQUE constraint
    rejects "émile" when "Émile" exists.
    Users are never physically deleted; deactivation goes through is_active.
    """
    __tablename__ = "users"

    id = Column("user_id", Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), nullable=False, unique=True)
    username_key = Column(String(64), nullable=False, unique=True)

    # bcrypt hash; column keeps its historical name
    password_hash = Column("password", Text, nullable=False)

    role_id = Column(Integer, ForeignKey("roles.role_id"), nullable=False)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    is_temp_password = Column(Boolean, nullable=False, default=False)
    failed_attempts = Column(Integer, nullable=False, default=0)

    join_date = Column(Date, nullable=False, default=today)

    role = relationship("Role", lazy="joined")

    @property
    def role_name(self) -> str:
        return self.role.name

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role_name,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "is_active": self.is_active,
            "is_temp_password": self.is_temp_password,
            "failed_attempts": self.failed_attempts,
            "join_date": self.join_date.isoformat() if self.join_date else None,
        }


class Permission(Base):
    """Closed vocabulary of permission names (see permissions.definitions)."""
    __tablename__ = "permissions"

    id = Column("permission_id", Integer, primary_key=True, autoincrement=True)
    name = Column("permission_name", String(64), nullable=False, unique=True)


class UserPermission(Base):
    """
    Per-user permission flag.

    The composite primary key guarantees at most one row per
    (user, permission).
    """
    __tablename__ = "user_permissions"

    user_id = Column(Integer, ForeignKey("users.user_id"), primary_key=True)
    permission_id = Column(Integer, ForeignKey("permissions.permission_id"), primary_key=True)
    is_enabled = Column(Boolean, nullable=False, default=True)


class PasswordResetRequest(Base):
    """Append-only log of self-service reset requests."""
    __tablename__ = "password_reset_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False)
    # second-precision ISO-8601 text
    request_date = Column(Text, nullable=False)
