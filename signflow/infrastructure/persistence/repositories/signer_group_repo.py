"""Signer group member repository."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from signflow.application.dtos.group import (
    GroupMemberCreate,
    GroupMemberResult,
    GroupMemberUpdate,
)
from signflow.domain.exceptions import ConflictException
from signflow.infrastructure.persistence.models.signer_group_member import (
    SignerGroupMember,
)
from signflow.infrastructure.persistence.repositories.base import BaseRepository
from signflow.shared.utils.generators import normalize_email

DUPLICATE_ACTIVE_EMAIL = "An active member with this email already exists in the group"


def _orm_to_result(row: SignerGroupMember) -> GroupMemberResult:
    return GroupMemberResult(
        id=row.id,
        group_email=row.group_email,
        name=row.name,
        email=row.email,
        personnel_number=row.personnel_number,
        user_id=row.user_id,
        position=row.position,
        role=row.role,
        active=row.active,
    )


class SignerGroupRepository(BaseRepository[SignerGroupMember]):
    """Members of signer group aliases. Group emails are stored normalized."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, SignerGroupMember)

    async def list_members(
        self, group_email: str, *, include_inactive: bool = False
    ) -> list[GroupMemberResult]:
        stmt = select(SignerGroupMember).where(
            SignerGroupMember.group_email == normalize_email(group_email)
        )
        if not include_inactive:
            stmt = stmt.where(SignerGroupMember.active.is_(True))
        result = await self.db.execute(stmt.order_by(SignerGroupMember.name.asc()))
        return [_orm_to_result(r) for r in result.scalars().all()]

    async def list_active_in(self, group_emails: list[str]) -> list[GroupMemberResult]:
        if not group_emails:
            return []
        result = await self.db.execute(
            select(SignerGroupMember)
            .where(
                SignerGroupMember.group_email.in_(
                    [normalize_email(g) for g in group_emails]
                ),
                SignerGroupMember.active.is_(True),
            )
            .order_by(SignerGroupMember.group_email, SignerGroupMember.name)
        )
        return [_orm_to_result(r) for r in result.scalars().all()]

    async def count_active(self, group_emails: list[str]) -> dict[str, int]:
        if not group_emails:
            return {}
        result = await self.db.execute(
            select(SignerGroupMember.group_email, func.count(SignerGroupMember.id))
            .where(
                SignerGroupMember.group_email.in_(group_emails),
                SignerGroupMember.active.is_(True),
            )
            .group_by(SignerGroupMember.group_email)
        )
        return {group: int(count) for group, count in result.all()}

    async def get_member(self, member_id: str) -> GroupMemberResult | None:
        row = await self._get_orm(member_id)
        return _orm_to_result(row) if row else None

    async def find_active_by_email(
        self, group_email: str, email: str
    ) -> GroupMemberResult | None:
        result = await self.db.execute(
            select(SignerGroupMember)
            .where(
                SignerGroupMember.group_email == normalize_email(group_email),
                func.lower(SignerGroupMember.email) == normalize_email(email),
                SignerGroupMember.active.is_(True),
            )
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _orm_to_result(row) if row else None

    async def _flush_unique(self) -> None:
        """Flush under a savepoint; the active-email index turns races into conflicts."""
        try:
            async with self.db.begin_nested():
                await self.db.flush()
        except IntegrityError as e:
            raise ConflictException(DUPLICATE_ACTIVE_EMAIL) from e

    async def create_member(self, data: GroupMemberCreate) -> GroupMemberResult:
        row = SignerGroupMember(
            id=data.id,
            group_email=normalize_email(data.group_email),
            name=data.name,
            email=data.email,
            personnel_number=data.personnel_number,
            user_id=data.user_id,
            position=data.position,
            role=data.role,
            active=True,
        )
        self.db.add(row)
        await self._flush_unique()
        await self.db.refresh(row)
        return _orm_to_result(row)

    async def update_member(
        self, member_id: str, data: GroupMemberUpdate
    ) -> GroupMemberResult | None:
        row = await self._get_orm(member_id)
        if row is None:
            return None
        if data.name is not None:
            row.name = data.name.strip()
        if data.email is not None:
            row.email = data.email or None
        if data.personnel_number is not None:
            row.personnel_number = data.personnel_number or None
        if data.user_id is not None:
            row.user_id = data.user_id
        if data.position is not None:
            row.position = data.position
        if data.role is not None:
            row.role = data.role
        if data.active is not None:
            row.active = data.active
        await self._flush_unique()
        await self.db.refresh(row)
        return _orm_to_result(row)
