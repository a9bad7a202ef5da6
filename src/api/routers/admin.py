"""Administrative endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_credential
from core.request_context import CurrentCredential
from services import bookmark_service
from services.ingestion import schedule_processing

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/bookmarks/{bookmark_id}/reprocess",
    status_code=202,
    response_class=Response,
)
async def reprocess_bookmark(
    bookmark_id: UUID,
    credential: CurrentCredential = Depends(get_current_credential),
    db: AsyncSession = Depends(get_async_session),
) -> Response:
    """
    Re-run ingestion for one of the caller's bookmarks, overwriting its tags.

    Ownership is checked against the caller's own credential; there is no
    cross-credential admin role.
    """
    url = await bookmark_service.get_bookmark_url(db, credential.id, bookmark_id)
    if url is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")

    schedule_processing(bookmark_id, url)
    return Response(status_code=status.HTTP_202_ACCEPTED)
