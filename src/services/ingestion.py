"""
Background ingestion: fetch a bookmarked page, excerpt it, tag it, store the tags.

Work is fire-and-forget. Each run is an asyncio task that outlives the request
that scheduled it and shares the process-wide database pool and tag client.
There is no retry and no persistent queue; a failed or lost run leaves the
bookmark's tags as they were, and can be re-driven through the reprocess endpoint.
"""
import asyncio
import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from db.session import get_session_factory
from services import bookmark_service
from services.exceptions import ExcerptFailedError, FetchFailedError, TaggingError
from services.excerpt import excerpt_html
from services.tagger import TagClient, get_tag_client
from services.url_fetcher import fetch_url

logger = logging.getLogger(__name__)

# Background tasks set to prevent garbage collection
_background_tasks: set[asyncio.Task] = set()


async def process_bookmark(
    bookmark_id: UUID,
    url: str,
    *,
    session_factory: async_sessionmaker,
    tag_client: TagClient,
) -> bool:
    """
    Run the ingestion pipeline for one bookmark.

    Steps: fetch -> excerpt -> tag -> update tags. A failure at any step is logged
    with the bookmark id and URL and stops the run; the row is left unchanged.

    Args:
        bookmark_id: Bookmark to update.
        url: Page to fetch.
        session_factory: Factory for the session used by the final update.
        tag_client: Client used to generate tags.

    Returns:
        True if the pipeline completed (including an update that matched no
        row because the bookmark was deleted), False if it was aborted.
    """
    logger.info("Processing background content for bookmark %s: %s", bookmark_id, url)

    try:
        page = await fetch_url(url)
    except FetchFailedError as e:
        logger.error("Fetch failed for bookmark %s (%s): %s", bookmark_id, url, e)
        return False

    try:
        excerpt = excerpt_html(page.content, encoding=page.encoding)
    except ExcerptFailedError as e:
        logger.error("Excerpt failed for bookmark %s (%s): %s", bookmark_id, url, e)
        return False

    try:
        tags = await tag_client.tag(url, excerpt)
    except TaggingError as e:
        logger.error("Tagging failed for bookmark %s (%s): %s", bookmark_id, url, e)
        return False

    try:
        async with session_factory() as session:
            updated = await bookmark_service.update_tags(session, bookmark_id, tags)
            await session.commit()
    except SQLAlchemyError:
        logger.exception("Failed to store tags for bookmark %s (%s)", bookmark_id, url)
        return False

    if not updated:
        # Deleted while the run was in flight
        logger.info("Bookmark %s no longer exists; tags discarded", bookmark_id)
    else:
        logger.info("Successfully updated tags for %s: %s", url, tags)
    return True


async def _run_ingestion(
    bookmark_id: UUID,
    url: str,
    session_factory: async_sessionmaker,
    tag_client: TagClient,
) -> None:
    """Task body: contain anything unexpected so it is logged and not lost."""
    try:
        await process_bookmark(
            bookmark_id,
            url,
            session_factory=session_factory,
            tag_client=tag_client,
        )
    except asyncio.CancelledError:
        logger.warning("Ingestion for bookmark %s cancelled", bookmark_id)
        raise
    except Exception:
        logger.exception("Unexpected error processing bookmark %s (%s)", bookmark_id, url)


def schedule_processing(bookmark_id: UUID, url: str) -> asyncio.Task:
    """
    Start ingestion for a bookmark in the background (fire-and-forget).

    The caller must have committed the bookmark row so the task observes it.

    Returns:
        The scheduled task (held internally until it finishes).
    """
    task = asyncio.create_task(
        _run_ingestion(bookmark_id, url, get_session_factory(), get_tag_client()),
        name=f"ingest-{bookmark_id}",
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


def pending_tasks() -> set[asyncio.Task]:
    """Return the ingestion tasks that have not finished yet."""
    return {task for task in _background_tasks if not task.done()}


async def cancel_pending() -> None:
    """
    Cancel unfinished ingestion tasks (used at shutdown).

    Cancelled bookmarks keep their pre-run tags.
    """
    tasks = pending_tasks()
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
    _background_tasks.clear()
