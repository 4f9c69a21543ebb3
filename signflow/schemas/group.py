"""Signer group API schemas."""

from pydantic import BaseModel, ConfigDict, Field


class GroupSummaryResponse(BaseModel):
    """Configured signer group alias."""

    model_config = ConfigDict(from_attributes=True)

    group_email: str
    active_members: int


class GroupMemberCreateRequest(BaseModel):
    """Request body for POST /groups/{group_email}/members."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    personnel_number: str | None = Field(default=None, max_length=64)
    user_id: int | None = Field(default=None, gt=0)
    position: str | None = Field(default=None, max_length=255)
    role: str | None = Field(default=None, max_length=64)


class GroupMemberUpdateRequest(BaseModel):
    """Request body for PATCH /groups/members/{id} (partial)."""

    name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    personnel_number: str | None = Field(default=None, max_length=64)
    user_id: int | None = Field(default=None, gt=0)
    position: str | None = Field(default=None, max_length=255)
    role: str | None = Field(default=None, max_length=64)
    active: bool | None = None


class GroupMemberResponse(BaseModel):
    """Signer group member."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    group_email: str
    name: str
    email: str | None = None
    personnel_number: str | None = None
    user_id: int | None = None
    position: str | None = None
    role: str | None = None
    active: bool
