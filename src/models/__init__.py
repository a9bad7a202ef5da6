"""SQLAlchemy models."""
from models.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin
from models.bookmark import Bookmark
from models.credential import Credential

__all__ = ["Base", "Bookmark", "CreatedAtMixin", "Credential", "UUIDPrimaryKeyMixin"]
