"""SQLAlchemy declarative Base and shared model configuration."""

from sqlalchemy import BigInteger, Column, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase

# 64-bit ids; SQLite only autoincrements a column declared exactly as INTEGER.
IdType = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


class TimestampMixin:
    """created_at/updated_at plus soft-delete marker for entity tables."""

    # Load server-generated timestamps at flush so detached rows stay readable.
    __mapper_args__ = {"eager_defaults": True}

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
