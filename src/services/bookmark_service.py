"""Service layer for bookmark persistence and per-credential queries."""
import logging
from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from schemas.bookmark import BookmarkFilter

logger = logging.getLogger(__name__)


def escape_ilike(value: str) -> str:
    r"""
    Escape special ILIKE characters for safe use in LIKE/ILIKE patterns.

    PostgreSQL LIKE/ILIKE treats these characters specially:
    - % matches any sequence of characters
    - _ matches any single character
    - \\ is the escape character

    This function escapes them so they match literally.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(value: str) -> str:
    """Build a bound ILIKE pattern matching `value` anywhere in the column."""
    return f"%{escape_ilike(value)}%"


async def upsert_bookmark(
    db: AsyncSession,
    owner_id: UUID,
    url: str,
    title: str | None,
    tags: list[str],
) -> UUID:
    """
    Insert a bookmark, or update title and tags if (url, owner) already exists.

    A single INSERT ... ON CONFLICT statement, so concurrent submissions of the
    same URL never create a second row. id and created_at of an existing row are
    preserved.

    Returns:
        The id of the inserted or updated row.

    Note:
        Does not commit. Caller handles commit.
    """
    stmt = insert(Bookmark).values(
        owner_id=owner_id,
        url=url,
        title=title,
        tags=tags,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Bookmark.url, Bookmark.owner_id],
        set_={"title": stmt.excluded.title, "tags": stmt.excluded.tags},
    ).returning(Bookmark.id)
    result = await db.execute(stmt)
    return result.scalar_one()


async def update_tags(
    db: AsyncSession,
    bookmark_id: UUID,
    tags: list[str],
) -> int:
    """
    Overwrite a bookmark's tags.

    No ownership check: the id was authorized when the work was scheduled.
    A bookmark deleted in the meantime simply matches zero rows.

    Returns:
        Number of rows updated (0 or 1).

    Note:
        Does not commit. Caller handles commit.
    """
    result = await db.execute(
        update(Bookmark).where(Bookmark.id == bookmark_id).values(tags=tags),
    )
    return result.rowcount


async def list_bookmarks(
    db: AsyncSession,
    owner_id: UUID,
    filters: BookmarkFilter | None = None,
) -> list[Bookmark]:
    """
    List an owner's bookmarks, newest first, narrowed by optional filters.

    Supplied clauses are combined with AND:
    - q: case-insensitive substring of url OR title
    - title: case-insensitive substring of title
    - tag: every comma-separated token must be one of the bookmark's tags
    - start_date / end_date: inclusive bounds on created_at

    All user values are bound parameters. Empty values add no clause.

    Args:
        db: Database session.
        owner_id: Credential id that scopes the query.
        filters: Optional filter clauses.

    Returns:
        Bookmarks ordered by created_at descending.
    """
    query = select(Bookmark).where(Bookmark.owner_id == owner_id)

    if filters is not None:
        if filters.q:
            pattern = contains_pattern(filters.q)
            query = query.where(
                or_(
                    Bookmark.url.ilike(pattern),
                    Bookmark.title.ilike(pattern),
                ),
            )

        if filters.title:
            query = query.where(Bookmark.title.ilike(contains_pattern(filters.title)))

        for tag in filters.tags:
            query = query.where(Bookmark.tags.any(tag))

        if filters.start_date is not None:
            query = query.where(Bookmark.created_at >= filters.start_date)

        if filters.end_date is not None:
            query = query.where(Bookmark.created_at <= filters.end_date)

    # id tiebreaker keeps ordering deterministic for rows created in one transaction
    query = query.order_by(
        Bookmark.created_at.desc(),
        Bookmark.id.desc(),
    ).execution_options(populate_existing=True)

    result = await db.execute(query)
    return list(result.scalars().all())


async def sync_bookmarks(
    db: AsyncSession,
    owner_id: UUID,
) -> list[Bookmark]:
    """Return every bookmark of an owner, newest first (list without filters)."""
    return await list_bookmarks(db, owner_id)


async def delete_bookmark_by_url(
    db: AsyncSession,
    owner_id: UUID,
    url: str,
) -> int:
    """
    Delete the owner's bookmark for a URL.

    Returns:
        Number of rows deleted; 0 means the owner has no bookmark for the URL.

    Note:
        Does not commit. Caller handles commit.
    """
    result = await db.execute(
        delete(Bookmark).where(
            Bookmark.url == url,
            Bookmark.owner_id == owner_id,
        ),
    )
    return result.rowcount


async def get_bookmark_url(
    db: AsyncSession,
    owner_id: UUID,
    bookmark_id: UUID,
) -> str | None:
    """Get a bookmark's URL by id, scoped to owner. Returns None if not found or wrong owner."""
    result = await db.execute(
        select(Bookmark.url).where(
            Bookmark.id == bookmark_id,
            Bookmark.owner_id == owner_id,
        ),
    )
    return result.scalar_one_or_none()
