"""Every route except /health requires a valid bearer token."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from signflow.domain.value_objects import CallerIdentity

PROTECTED = [
    ("GET", "/api/v1/documents/mine"),
    ("GET", "/api/v1/documents/pending"),
    ("GET", "/api/v1/documents/doc-1"),
    ("GET", "/api/v1/documents/doc-1/download"),
    ("POST", "/api/v1/signatures/sign"),
    ("POST", "/api/v1/signatures/reject"),
    ("GET", "/api/v1/groups"),
]


@pytest.mark.parametrize(("method", "path"), PROTECTED)
async def test_missing_token_returns_401(client: AsyncClient, method, path) -> None:
    response = await client.request(method, path)
    assert response.status_code == 401
    assert response.headers.get("www-authenticate") == "Bearer"
    assert response.json()["message"] == "Not authenticated"


async def test_garbage_token_returns_401(client: AsyncClient) -> None:
    response = await client.get(
        "/api/v1/documents/mine", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert response.status_code == 401


async def test_expired_token_returns_401(client: AsyncClient, bearer) -> None:
    headers = bearer(2, "alice@example.com", "Alice", expires=timedelta(minutes=-1))
    response = await client.get("/api/v1/documents/mine", headers=headers)
    assert response.status_code == 401


async def test_non_numeric_subject_returns_401(client: AsyncClient, bearer) -> None:
    response = await client.get("/api/v1/documents/mine", headers=bearer("svc-account"))
    assert response.status_code == 401


async def test_admin_flag_comes_from_allowlist(
    client: AsyncClient, query_svc, user_headers, admin_headers
) -> None:
    """The service sees is_admin only for allowlisted emails."""
    query_svc.list_mine.return_value = []

    await client.get("/api/v1/documents/mine", headers=user_headers)
    await client.get("/api/v1/documents/mine", headers=admin_headers)

    callers: list[CallerIdentity] = [c.args[0] for c in query_svc.list_mine.await_args_list]
    assert [c.is_admin for c in callers] == [False, True]
    assert callers[0].user_id == 2
    assert callers[0].display_name == "Alice Approver"
