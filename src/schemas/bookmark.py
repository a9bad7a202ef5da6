"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from urllib.parse import urlparse
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict, field_validator


def validate_absolute_url(url: str) -> str:
    """
    Validate that a URL is absolute (http or https with a host).

    The URL is returned unchanged so it is stored exactly as submitted;
    (url, owner) uniqueness is on the literal string.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"URL must be an absolute http(s) URL: '{url}'")
    return url


def parse_tag_filter(tag: str | None) -> list[str]:
    """Split a comma-separated tag filter into trimmed, non-empty tokens."""
    if not tag:
        return []
    return [token.strip() for token in tag.split(",") if token.strip()]


class BookmarkCreate(BaseModel):
    """Schema for creating (or re-submitting) a bookmark."""

    url: str
    title: str | None = None
    tags: list[str] = []

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Require an absolute URL."""
        return validate_absolute_url(v)

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v: list[str] | None) -> list[str]:
        """Treat an explicit null the same as an omitted tag list."""
        if v is None:
            return []
        return v


class BookmarkFilter(BaseModel):
    """
    Optional clauses for listing bookmarks.

    All supplied clauses are combined with AND. Empty strings are treated as
    not supplied.
    """

    q: str | None = None
    title: str | None = None
    tag: str | None = None
    start_date: AwareDatetime | None = None
    end_date: AwareDatetime | None = None

    @property
    def tags(self) -> list[str]:
        """Tag tokens that must all be present."""
        return parse_tag_filter(self.tag)


class BookmarkResponse(BaseModel):
    """Schema for bookmark responses (list and sync)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    url: str
    title: str | None
    tags: list[str]
    created_at: datetime
