"""Signer group routes."""

from httpx import AsyncClient

from signflow.application.dtos.group import GroupMemberResult, GroupSummary
from signflow.domain.exceptions import AuthorizationException

GINA = GroupMemberResult(
    id="m-gina",
    group_email="board@example.com",
    name="Gina Member",
    email="gina@example.com",
    personnel_number="P-100",
    user_id=None,
    position="Treasurer",
    role=None,
    active=True,
)


async def test_list_groups(client: AsyncClient, group_svc, user_headers) -> None:
    group_svc.list_groups.return_value = [
        GroupSummary(group_email="board@example.com", active_members=2)
    ]
    response = await client.get("/api/v1/groups", headers=user_headers)
    assert response.status_code == 200
    assert response.json() == [{"group_email": "board@example.com", "active_members": 2}]


async def test_list_members(client: AsyncClient, group_svc, user_headers) -> None:
    group_svc.list_members.return_value = [GINA]
    response = await client.get(
        "/api/v1/groups/board@example.com/members",
        headers=user_headers,
        params={"include_inactive": "true"},
    )
    assert response.status_code == 200
    assert response.json()[0]["personnel_number"] == "P-100"
    group_svc.list_members.assert_awaited_once_with(
        "board@example.com", include_inactive=True
    )


async def test_add_member(client: AsyncClient, group_svc, admin_headers) -> None:
    group_svc.add_member.return_value = GINA
    response = await client.post(
        "/api/v1/groups/board@example.com/members",
        headers=admin_headers,
        json={"name": "Gina Member", "email": "gina@example.com", "personnel_number": "P-100"},
    )
    assert response.status_code == 201
    assert response.json()["id"] == "m-gina"
    kwargs = group_svc.add_member.await_args.kwargs
    assert kwargs["name"] == "Gina Member"
    assert kwargs["user_id"] is None


async def test_non_admin_member_change_is_403(
    client: AsyncClient, group_svc, user_headers
) -> None:
    group_svc.deactivate_member.side_effect = AuthorizationException()
    response = await client.delete("/api/v1/groups/members/m-gina", headers=user_headers)
    assert response.status_code == 403


async def test_update_member_partial(client: AsyncClient, group_svc, admin_headers) -> None:
    group_svc.update_member.return_value = GINA
    response = await client.patch(
        "/api/v1/groups/members/m-gina", headers=admin_headers, json={"position": "Chair"}
    )
    assert response.status_code == 200
    update = group_svc.update_member.await_args.args[2]
    assert update.position == "Chair"
    assert update.active is None
