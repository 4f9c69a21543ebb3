"""Signer group API: list configured groups and manage their members."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from signflow.api.v1.dependencies import (
    get_current_caller,
    get_group_admin_service,
    get_group_admin_service_for_write,
)
from signflow.application.dtos.group import GroupMemberUpdate
from signflow.application.use_cases.groups import GroupAdminService
from signflow.domain.value_objects import CallerIdentity
from signflow.schemas.group import (
    GroupMemberCreateRequest,
    GroupMemberResponse,
    GroupMemberUpdateRequest,
    GroupSummaryResponse,
)

router = APIRouter()

Caller = Annotated[CallerIdentity, Depends(get_current_caller)]


@router.get("", response_model=list[GroupSummaryResponse])
async def list_groups(
    _: Caller,
    svc: Annotated[GroupAdminService, Depends(get_group_admin_service)],
):
    return [GroupSummaryResponse.model_validate(g) for g in await svc.list_groups()]


@router.get("/{group_email}/members", response_model=list[GroupMemberResponse])
async def list_members(
    group_email: str,
    _: Caller,
    svc: Annotated[GroupAdminService, Depends(get_group_admin_service)],
    include_inactive: bool = Query(False),
):
    """Members a group signer can choose from when signing a group slot."""
    members = await svc.list_members(group_email, include_inactive=include_inactive)
    return [GroupMemberResponse.model_validate(m) for m in members]


@router.post(
    "/{group_email}/members", response_model=GroupMemberResponse, status_code=201
)
async def add_member(
    group_email: str,
    body: GroupMemberCreateRequest,
    caller: Caller,
    svc: Annotated[GroupAdminService, Depends(get_group_admin_service_for_write)],
):
    """Add a member (admin only)."""
    member = await svc.add_member(caller, group_email, **body.model_dump())
    return GroupMemberResponse.model_validate(member)


@router.patch("/members/{member_id}", response_model=GroupMemberResponse)
async def update_member(
    member_id: str,
    body: GroupMemberUpdateRequest,
    caller: Caller,
    svc: Annotated[GroupAdminService, Depends(get_group_admin_service_for_write)],
):
    member = await svc.update_member(
        caller, member_id, GroupMemberUpdate(**body.model_dump(exclude_unset=True))
    )
    return GroupMemberResponse.model_validate(member)


@router.delete("/members/{member_id}", response_model=GroupMemberResponse)
async def deactivate_member(
    member_id: str,
    caller: Caller,
    svc: Annotated[GroupAdminService, Depends(get_group_admin_service_for_write)],
):
    """Deactivate (soft delete) a member (admin only)."""
    return GroupMemberResponse.model_validate(await svc.deactivate_member(caller, member_id))
