"""Credential model for bearer API keys."""
from typing import TYPE_CHECKING

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from models.bookmark import Bookmark


class Credential(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """
    Credential model - an opaque bearer secret and the identity it resolves to.

    Credentials are the unit of isolation: every bookmark belongs to exactly one.
    They are created out-of-band by the `create-api-key` command and are never
    modified or deleted through the HTTP API.
    """

    __tablename__ = "credentials"

    secret: Mapped[str] = mapped_column(
        Text,
        unique=True,
        nullable=False,
        comment="Value presented as 'Authorization: Bearer <secret>'",
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    bookmarks: Mapped[list["Bookmark"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
