"""Authentication dependency for bearer API keys."""
import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.request_context import CurrentCredential
from db.session import get_async_session
from services import credential_service

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_bearer_secret(authorization: str | None) -> str | None:
    """
    Extract the secret from an Authorization header value.

    The scheme must be exactly "Bearer " (case-sensitive, single space).

    Returns:
        The secret, or None if the header is missing or malformed.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    secret = authorization[len(BEARER_PREFIX):]
    return secret or None


async def get_current_credential(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
) -> CurrentCredential:
    """
    Dependency that resolves the bearer secret and returns the caller's identity.

    Also stores the identity on `request.state.credential`.

    Raises:
        HTTPException: 401 if the header is missing, malformed or the secret is
            unknown; 500 if the credential store cannot be queried.
    """
    secret = extract_bearer_secret(request.headers.get("Authorization"))
    if secret is None:
        logger.info("Missing or malformed Authorization header")
        raise _unauthorized("Not authenticated")

    try:
        credential = await credential_service.resolve_credential(db, secret)
    except SQLAlchemyError as e:
        logger.exception("Database error during auth")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    if credential is None:
        logger.info("Invalid API key")
        raise _unauthorized("Invalid API key")

    current = CurrentCredential(id=credential.id)
    request.state.credential = current
    return current
