"""Bookmark endpoints: create, list, sync and delete."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import AwareDatetime, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_credential
from core.request_context import CurrentCredential
from schemas.bookmark import BookmarkCreate, BookmarkFilter, BookmarkResponse
from services import bookmark_service
from services.ingestion import schedule_processing

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


async def parse_create_body(request: Request) -> BookmarkCreate:
    """
    Parse and validate a create request body.

    Read inside the handler rather than declared as a body parameter, so the
    credential dependency rejects anonymous requests before the body is decoded.

    Raises:
        RequestValidationError: If the body is not valid JSON or fails validation.
    """
    try:
        return BookmarkCreate.model_validate_json(await request.body())
    except ValidationError as e:
        errors = [
            {**error, "loc": ("body", *error["loc"])}
            for error in e.errors(include_url=False)
        ]
        raise RequestValidationError(errors) from e


@router.post(
    "",
    status_code=201,
    response_class=Response,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": BookmarkCreate.model_json_schema()}},
        },
    },
)
async def create_bookmark(
    request: Request,
    credential: CurrentCredential = Depends(get_current_credential),
    db: AsyncSession = Depends(get_async_session),
) -> Response:
    """
    Create a bookmark, or update title and tags if the URL is already bookmarked.

    Tags are replaced in the background once the page has been fetched and tagged.
    """
    data = await parse_create_body(request)
    bookmark_id = await bookmark_service.upsert_bookmark(
        db, credential.id, data.url, data.title, data.tags,
    )
    # Commit before scheduling: the ingestion task reads and writes the row
    # through its own connection.
    await db.commit()

    schedule_processing(bookmark_id, data.url)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("", response_model=list[BookmarkResponse])
async def list_bookmarks(
    q: str | None = Query(default=None, description="Case-insensitive match on url or title"),
    title: str | None = Query(default=None, description="Case-insensitive match on title"),
    tag: str | None = Query(default=None, description="Comma-separated tags; all must match"),
    start_date: AwareDatetime | None = Query(
        default=None, alias="startDate", description="Created at or after (RFC 3339)",
    ),
    end_date: AwareDatetime | None = Query(
        default=None, alias="endDate", description="Created at or before (RFC 3339)",
    ),
    credential: CurrentCredential = Depends(get_current_credential),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """
    List the caller's bookmarks, newest first.

    - **q**: substring of url or title
    - **title**: substring of title
    - **tag**: comma-separated tags, bookmark must have ALL of them
    - **startDate** / **endDate**: inclusive created_at range
    """
    filters = BookmarkFilter(
        q=q,
        title=title,
        tag=tag,
        start_date=start_date,
        end_date=end_date,
    )
    bookmarks = await bookmark_service.list_bookmarks(db, credential.id, filters)
    return [BookmarkResponse.model_validate(b) for b in bookmarks]


@router.get("/sync", response_model=list[BookmarkResponse])
async def sync_bookmarks(
    credential: CurrentCredential = Depends(get_current_credential),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """Return all of the caller's bookmarks, newest first."""
    bookmarks = await bookmark_service.sync_bookmarks(db, credential.id)
    return [BookmarkResponse.model_validate(b) for b in bookmarks]


@router.delete("", status_code=204, response_class=Response)
async def delete_bookmark(
    url: str = Query(description="Exact URL of the bookmark to delete"),
    credential: CurrentCredential = Depends(get_current_credential),
    db: AsyncSession = Depends(get_async_session),
) -> Response:
    """Delete the caller's bookmark for a URL."""
    deleted = await bookmark_service.delete_bookmark_by_url(db, credential.id, url)
    if not deleted:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
