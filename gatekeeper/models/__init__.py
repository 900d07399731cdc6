"""SQLAlchemy ORM models."""

from gatekeeper.models.base import Base
from gatekeeper.models.permission import Permission, RolePermission
from gatekeeper.models.role import Role, UserRole
from gatekeeper.models.user import User

__all__ = ["Base", "Permission", "Role", "RolePermission", "User", "UserRole"]
