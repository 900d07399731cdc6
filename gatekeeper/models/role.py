"""ORM models for roles and user-role membership."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint, func, text

from gatekeeper.models.base import Base, IdType, TimestampMixin


class Role(TimestampMixin, Base):
    """Named role; users gain permissions through the roles they hold."""

    __tablename__ = "roles"

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)

    __table_args__ = (
        Index(
            "uq_roles_name_active",
            "name",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    def __repr__(self) -> str:
        return f"Role(id={self.id!r}, name={self.name!r})"


class UserRole(Base):
    """Join row: user holds role. One row per (user, role) pair."""

    __tablename__ = "user_roles"

    id = Column(IdType, primary_key=True, autoincrement=True)
    user_id = Column(IdType, ForeignKey("users.id"), nullable=False, index=True)
    role_id = Column(IdType, ForeignKey("roles.id"), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_roles_pair"),)
