"""SQLAlchemy declarative base with common mixins."""
from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDPrimaryKeyMixin:
    """Mixin that adds a server-generated UUID primary key."""

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        server_default=func.gen_random_uuid(),
    )


class CreatedAtMixin:
    """
    Mixin that adds a created_at column.

    Timestamps are timezone-aware (stored as TIMESTAMP WITH TIME ZONE in PostgreSQL)
    and assigned by the database on first insert. Upserts never touch this column.

    Uses clock_timestamp() instead of now() to get actual wall-clock time rather than
    transaction start time, so rows inserted in one transaction still order correctly.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )
