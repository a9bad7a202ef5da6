"""Tests for bearer authentication on every routed endpoint."""
from unittest.mock import ANY, AsyncMock, MagicMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from models.credential import Credential

# (method, path, kwargs) covering every routed endpoint
ENDPOINTS = [
    ("POST", "/bookmarks", {"json": {"url": "https://example.com"}}),
    ("GET", "/bookmarks", {}),
    ("DELETE", "/bookmarks", {"params": {"url": "https://example.com"}}),
    ("GET", "/bookmarks/sync", {}),
    ("POST", "/admin/bookmarks/00000000-0000-0000-0000-000000000000/reprocess", {}),
]


@pytest.mark.parametrize(("method", "path", "kwargs"), ENDPOINTS)
async def test__endpoint__missing_header_returns_401(
    anon_client: AsyncClient,
    method: str,
    path: str,
    kwargs: dict,
) -> None:
    """Every endpoint rejects requests without an Authorization header."""
    response = await anon_client.request(method, path, **kwargs)
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.parametrize(("method", "path", "kwargs"), ENDPOINTS)
async def test__endpoint__unknown_secret_returns_401(
    anon_client: AsyncClient,
    method: str,
    path: str,
    kwargs: dict,
) -> None:
    """Every endpoint rejects a well-formed header with an unknown secret."""
    response = await anon_client.request(
        method, path, headers={"Authorization": "Bearer not-a-real-key"}, **kwargs,
    )
    assert response.status_code == 401


@pytest.mark.parametrize(
    "header_template",
    [
        "{secret}",  # no scheme
        "Token {secret}",  # wrong scheme
        "bearer {secret}",  # scheme is case-sensitive
        "Bearer",  # no secret
        "Bearer ",  # empty secret
        "Basic {secret}",
    ],
)
async def test__auth__malformed_header_returns_401(
    anon_client: AsyncClient,
    credential: Credential,
    header_template: str,
) -> None:
    """Headers without the exact 'Bearer ' prefix are rejected even with a valid secret."""
    response = await anon_client.get(
        "/bookmarks/sync",
        headers={"Authorization": header_template.format(secret=credential.secret)},
    )
    assert response.status_code == 401


async def test__auth__valid_secret_is_accepted(
    anon_client: AsyncClient,
    credential: Credential,
) -> None:
    """A known secret with the Bearer prefix is accepted."""
    response = await anon_client.get(
        "/bookmarks/sync",
        headers={"Authorization": f"Bearer {credential.secret}"},
    )
    assert response.status_code == 200
    assert response.json() == []


async def test__auth__store_failure_returns_500(
    anon_client: AsyncClient,
    credential: Credential,
) -> None:
    """A database error while resolving the credential is a 500, not a 401."""
    with patch(
        "core.auth.credential_service.resolve_credential",
        new_callable=AsyncMock,
        side_effect=OperationalError("SELECT", {}, Exception("connection lost")),
    ):
        response = await anon_client.get(
            "/bookmarks/sync",
            headers={"Authorization": f"Bearer {credential.secret}"},
        )

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "connection lost" not in response.text


async def test__handler__store_failure_returns_generic_500(client: AsyncClient) -> None:
    """Database errors inside handlers become a generic 500 without internal details."""
    with patch(
        "api.routers.bookmarks.bookmark_service.sync_bookmarks",
        new_callable=AsyncMock,
        side_effect=OperationalError("SELECT", {}, Exception("secret internals")),
    ):
        response = await client.get("/bookmarks/sync")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "secret internals" not in response.text


@pytest.mark.parametrize(
    "headers",
    [
        {"Content-Type": "application/json"},
        {"Content-Type": "application/json", "Authorization": "Bearer not-a-real-key"},
    ],
)
async def test__create__auth_checked_before_body(
    anon_client: AsyncClient,
    mock_schedule: MagicMock,
    headers: dict[str, str],
) -> None:
    """An unauthenticated create is a 401 even when its body is not valid JSON."""
    response = await anon_client.post("/bookmarks", content=b'{"url": ', headers=headers)

    assert response.status_code == 401
    assert response.json() == {"detail": ANY}
    mock_schedule.assert_not_called()
