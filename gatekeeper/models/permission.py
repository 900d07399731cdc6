"""ORM models for permissions and role-permission grants."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint, func, text

from gatekeeper.models.base import Base, IdType, TimestampMixin


class Permission(TimestampMixin, Base):
    """Named permission (stored lower-cased)."""

    __tablename__ = "permissions"

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)

    __table_args__ = (
        Index(
            "uq_permissions_name_active",
            "name",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    def __repr__(self) -> str:
        return f"Permission(id={self.id!r}, name={self.name!r})"


class RolePermission(Base):
    """Join row: role grants permission. One row per (role, permission) pair."""

    __tablename__ = "role_permissions"

    id = Column(IdType, primary_key=True, autoincrement=True)
    role_id = Column(IdType, ForeignKey("roles.id"), nullable=False, index=True)
    permission_id = Column(IdType, ForeignKey("permissions.id"), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permissions_pair"),
    )
