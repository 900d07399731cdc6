"""ORM model for user accounts."""

from sqlalchemy import Column, Index, String, text

from gatekeeper.models.base import Base, IdType, TimestampMixin


class User(TimestampMixin, Base):
    """
    User account. Username and email are unique among rows that are not soft-deleted.

    password_hash is an opaque bcrypt digest; plain passwords are never stored.
    """

    __tablename__ = "users"

    id = Column(IdType, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)

    __table_args__ = (
        Index(
            "uq_users_username_active",
            "username",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
        Index(
            "uq_users_email_active",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r})"
