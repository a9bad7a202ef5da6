"""Shared fixtures for API tests."""
from collections.abc import AsyncGenerator, Generator
from contextlib import asynccontextmanager
from unittest.mock import MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from api.main import app
from db.session import get_async_session
from models.credential import Credential


@pytest.fixture(autouse=True)
def mock_schedule() -> Generator[MagicMock]:
    """
    Auto-mock ingestion scheduling for all API tests.

    Avoids real fetch/LLM work; both routers share the same mock so tests can
    assert on what was scheduled.
    """
    mock = MagicMock()
    with (
        patch('api.routers.bookmarks.schedule_processing', mock),
        patch('api.routers.admin.schedule_processing', mock),
    ):
        yield mock


@pytest.fixture
def app_with_db(db_session: AsyncSession) -> Generator[None]:
    """Point the app's session dependency at the test transaction."""

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session
    yield
    app.dependency_overrides.clear()


@asynccontextmanager
async def make_client(secret: str | None = None) -> AsyncGenerator[AsyncClient]:
    """Create an AsyncClient, authenticated with `secret` when given."""
    headers = {'Authorization': f'Bearer {secret}'} if secret is not None else {}
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url='http://test',
        headers=headers,
    ) as test_client:
        yield test_client


@pytest.fixture
async def client(
    app_with_db: None,  # noqa: ARG001
    credential: Credential,
) -> AsyncGenerator[AsyncClient]:
    """Client authenticated as the primary credential."""
    async with make_client(credential.secret) as test_client:
        yield test_client


@pytest.fixture
async def other_client(
    app_with_db: None,  # noqa: ARG001
    other_credential: Credential,
) -> AsyncGenerator[AsyncClient]:
    """Client authenticated as the second credential."""
    async with make_client(other_credential.secret) as test_client:
        yield test_client


@pytest.fixture
async def anon_client(app_with_db: None) -> AsyncGenerator[AsyncClient]:  # noqa: ARG001
    """Client without an Authorization header."""
    async with make_client() as test_client:
        yield test_client
