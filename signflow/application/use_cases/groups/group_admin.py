"""Administer members of the configured signer groups.

Group aliases themselves are configuration, not data: only members are
created, edited and deactivated here. Deactivation is a soft delete so
historical signatures keep pointing at a real member.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from signflow.application.dtos.group import (
    GroupMemberCreate,
    GroupMemberResult,
    GroupMemberUpdate,
    GroupSummary,
)
from signflow.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from signflow.domain.value_objects import CallerIdentity
from signflow.shared.telemetry.logging import get_logger
from signflow.shared.utils.generators import generate_cuid, normalize_email

if TYPE_CHECKING:
    from signflow.application.interfaces.repositories import ISignerGroupRepository

logger = get_logger(__name__)


class GroupAdminService:
    """List groups and manage their members (admin only for writes)."""

    def __init__(
        self, group_repo: ISignerGroupRepository, signer_groups: frozenset[str]
    ) -> None:
        self._groups = group_repo
        self._signer_groups = signer_groups

    def _require_group(self, group_email: str) -> str:
        normalized = normalize_email(group_email)
        if normalized not in self._signer_groups:
            raise ValidationException(f"Unknown signer group: {group_email}", field="group_email")
        return normalized

    @staticmethod
    def _require_admin(caller: CallerIdentity) -> None:
        if not caller.is_admin:
            raise AuthorizationException()

    async def _ensure_unique_email(
        self, group_email: str, email: str | None, member_id: str | None = None
    ) -> None:
        if not email:
            return
        existing = await self._groups.find_active_by_email(group_email, email)
        if existing is not None and existing.id != member_id:
            raise ConflictException(
                f"An active member with email {email} already exists in {group_email}"
            )

    async def list_groups(self) -> list[GroupSummary]:
        groups = sorted(self._signer_groups)
        counts = await self._groups.count_active(groups)
        return [GroupSummary(group_email=g, active_members=counts.get(g, 0)) for g in groups]

    async def list_members(
        self, group_email: str, *, include_inactive: bool = False
    ) -> list[GroupMemberResult]:
        group = self._require_group(group_email)
        return await self._groups.list_members(group, include_inactive=include_inactive)

    async def add_member(
        self,
        caller: CallerIdentity,
        group_email: str,
        *,
        name: str,
        email: str | None = None,
        personnel_number: str | None = None,
        user_id: int | None = None,
        position: str | None = None,
        role: str | None = None,
    ) -> GroupMemberResult:
        self._require_admin(caller)
        group = self._require_group(group_email)
        if not name or not name.strip():
            raise ValidationException("Member name is required", field="name")
        email = normalize_email(email) or None
        if not (email or (personnel_number or "").strip() or user_id):
            raise ValidationException(
                "A member needs an email, a personnel number or a user id", field="email"
            )
        await self._ensure_unique_email(group, email)
        member = await self._groups.create_member(
            GroupMemberCreate(
                id=generate_cuid(),
                group_email=group,
                name=name.strip(),
                email=email,
                personnel_number=(personnel_number or "").strip() or None,
                user_id=user_id,
                position=position,
                role=role,
            )
        )
        logger.info("Group member added: group=%s member=%s", group, member.id)
        return member

    async def update_member(
        self, caller: CallerIdentity, member_id: str, data: GroupMemberUpdate
    ) -> GroupMemberResult:
        self._require_admin(caller)
        current = await self._groups.get_member(member_id)
        if current is None:
            raise ResourceNotFoundException("group member", member_id)
        if data.name is not None and not data.name.strip():
            raise ValidationException("Member name cannot be empty", field="name")
        email = normalize_email(data.email) or None if data.email is not None else current.email
        will_be_active = current.active if data.active is None else data.active
        if will_be_active:
            await self._ensure_unique_email(current.group_email, email, member_id)
        if data.email is not None:
            data = GroupMemberUpdate(
                name=data.name,
                email=email or "",
                personnel_number=data.personnel_number,
                user_id=data.user_id,
                position=data.position,
                role=data.role,
                active=data.active,
            )
        updated = await self._groups.update_member(member_id, data)
        if updated is None:
            raise ResourceNotFoundException("group member", member_id)
        return updated

    async def deactivate_member(
        self, caller: CallerIdentity, member_id: str
    ) -> GroupMemberResult:
        """Soft delete: the member stays for history but can no longer sign."""
        updated = await self.update_member(
            caller, member_id, GroupMemberUpdate(active=False)
        )
        logger.info("Group member deactivated: %s", member_id)
        return updated
