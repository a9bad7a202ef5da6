"""Bookmark model for storing per-credential bookmarks."""
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from models.credential import Credential


class Bookmark(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """Bookmark model - stores URLs with an optional title and AI-generated tags."""

    __tablename__ = "bookmarks"
    __table_args__ = (
        # Upsert conflict target: one row per URL per credential
        UniqueConstraint("url", "owner_id", name="uq_bookmarks_url_owner_id"),
    )

    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(
        ARRAY(Text),
        nullable=False,
        server_default="{}",
    )
    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("credentials.id", ondelete="CASCADE"),
        index=True,
    )

    owner: Mapped["Credential"] = relationship(back_populates="bookmarks")
