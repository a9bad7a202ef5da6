"""Service layer for credential (API key) operations."""
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.credential import Credential


def generate_secret() -> str:
    """Generate a random secret (a 128-bit UUID in canonical text form)."""
    return str(uuid4())


async def create_credential(
    db: AsyncSession,
    description: str,
    secret: str | None = None,
) -> Credential:
    """
    Create a new credential.

    Args:
        db: Database session.
        description: Human-readable label for the key.
        secret: Explicit secret to use; a random one is generated when omitted.

    Returns:
        The created Credential. Its secret is the value clients send as
        `Authorization: Bearer <secret>`.

    Note:
        Does not commit. Caller handles commit.
    """
    credential = Credential(
        secret=secret if secret is not None else generate_secret(),
        description=description,
    )
    db.add(credential)
    await db.flush()
    await db.refresh(credential)
    return credential


async def resolve_credential(
    db: AsyncSession,
    secret: str,
) -> Credential | None:
    """
    Resolve a presented secret to its credential.

    Args:
        db: Database session.
        secret: The bearer value presented by the client.

    Returns:
        The matching Credential, or None if the secret is unknown.

    Raises:
        SQLAlchemyError: If the store cannot be queried. Callers treat this as a
            server error, distinct from an unknown secret.
    """
    result = await db.execute(
        select(Credential).where(Credential.secret == secret),
    )
    return result.scalar_one_or_none()
