"""Approver slot repository. Returns application DTOs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from signflow.application.dtos.document import SlotCreate, SlotResult
from signflow.domain.enums import SlotState
from signflow.domain.value_objects import GroupPlaceholder, Identity, Individual, StampBox
from signflow.infrastructure.persistence.models.approver_slot import ApproverSlot
from signflow.infrastructure.persistence.repositories.base import BaseRepository


def _identity_of(row: ApproverSlot) -> Identity:
    if row.group_email is not None:
        return GroupPlaceholder(row.group_email)
    return Individual(int(row.user_id))


def _slot_to_result(row: ApproverSlot) -> SlotResult:
    """Map ORM ApproverSlot to application SlotResult."""
    return SlotResult(
        id=row.id,
        document_id=row.document_id,
        ordinal=row.ordinal,
        identity=_identity_of(row),
        display_name=row.display_name,
        email=row.email,
        role=row.role,
        token=row.token,
        state=SlotState(row.state),
        box=StampBox(
            page=row.page, x=row.x, y=row.y, width=row.width, height=row.height
        ),
        resolved_signer_name=row.resolved_signer_name,
        resolved_member_id=row.resolved_member_id,
        rejection_reason=row.rejection_reason,
        acted_at=row.acted_at,
    )


def _create_to_slot(s: SlotCreate) -> ApproverSlot:
    identity = s.identity
    return ApproverSlot(
        id=s.id,
        document_id=s.document_id,
        ordinal=s.ordinal,
        user_id=identity.user_id if isinstance(identity, Individual) else None,
        group_email=identity.group_email if isinstance(identity, GroupPlaceholder) else None,
        display_name=s.display_name,
        email=s.email,
        role=s.role,
        token=s.token,
        state=SlotState.PENDING.value,
        page=s.box.page,
        x=s.box.x,
        y=s.box.y,
        width=s.box.width,
        height=s.box.height,
    )


class ApproverSlotRepository(BaseRepository[ApproverSlot]):
    """Approver slot repository. State changes are conditional on the current state."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ApproverSlot)

    async def create_many(self, slots: list[SlotCreate]) -> list[SlotResult]:
        rows = [_create_to_slot(s) for s in slots]
        self.db.add_all(rows)
        await self.db.flush()
        for row in rows:
            await self.db.refresh(row)
        return [_slot_to_result(r) for r in rows]

    async def get_by_token(self, token: str) -> SlotResult | None:
        result = await self.db.execute(
            select(ApproverSlot)
            .where(ApproverSlot.token == token)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _slot_to_result(row) if row else None

    async def list_by_document(self, document_id: str) -> list[SlotResult]:
        result = await self.db.execute(
            select(ApproverSlot)
            .where(ApproverSlot.document_id == document_id)
            .order_by(ApproverSlot.ordinal.asc())
            .execution_options(populate_existing=True)
        )
        return [_slot_to_result(r) for r in result.scalars().all()]

    async def list_pending_for_user(self, user_id: int) -> list[SlotResult]:
        result = await self.db.execute(
            select(ApproverSlot).where(
                ApproverSlot.user_id == user_id,
                ApproverSlot.state == SlotState.PENDING.value,
            )
        )
        return [_slot_to_result(r) for r in result.scalars().all()]

    async def list_pending_for_groups(self, group_emails: list[str]) -> list[SlotResult]:
        if not group_emails:
            return []
        result = await self.db.execute(
            select(ApproverSlot).where(
                ApproverSlot.group_email.in_(group_emails),
                ApproverSlot.state == SlotState.PENDING.value,
            )
        )
        return [_slot_to_result(r) for r in result.scalars().all()]

    async def mark_approved(
        self,
        slot_id: str,
        signer_name: str,
        member_id: str | None,
        acted_at: datetime,
    ) -> bool:
        result = await self.db.execute(
            update(ApproverSlot)
            .where(
                ApproverSlot.id == slot_id,
                ApproverSlot.state == SlotState.PENDING.value,
            )
            .values(
                state=SlotState.APPROVED.value,
                resolved_signer_name=signer_name,
                resolved_member_id=member_id,
                acted_at=acted_at,
            )
        )
        return result.rowcount == 1

    async def mark_rejected(self, slot_id: str, reason: str, acted_at: datetime) -> bool:
        result = await self.db.execute(
            update(ApproverSlot)
            .where(
                ApproverSlot.id == slot_id,
                ApproverSlot.state == SlotState.PENDING.value,
            )
            .values(
                state=SlotState.REJECTED.value,
                rejection_reason=reason,
                acted_at=acted_at,
            )
        )
        return result.rowcount == 1

    async def reject_pending(
        self, document_id: str, reason: str, acted_at: datetime
    ) -> int:
        result = await self.db.execute(
            update(ApproverSlot)
            .where(
                ApproverSlot.document_id == document_id,
                ApproverSlot.state == SlotState.PENDING.value,
            )
            .values(
                state=SlotState.REJECTED.value,
                rejection_reason=reason,
                acted_at=acted_at,
            )
        )
        return result.rowcount or 0

    async def expire_pending(self, document_id: str) -> int:
        result = await self.db.execute(
            update(ApproverSlot)
            .where(
                ApproverSlot.document_id == document_id,
                ApproverSlot.state == SlotState.PENDING.value,
            )
            .values(state=SlotState.EXPIRED.value)
        )
        return result.rowcount or 0

    async def reopen(self, document_id: str) -> int:
        """Approved slots keep their signature; pending and expired start over."""
        result = await self.db.execute(
            update(ApproverSlot)
            .where(
                ApproverSlot.document_id == document_id,
                ApproverSlot.state.in_([s.value for s in SlotState if s.is_open]),
            )
            .values(state=SlotState.PENDING.value, acted_at=None)
        )
        return result.rowcount or 0

    async def update_box(self, slot_id: str, box: StampBox) -> None:
        await self.db.execute(
            update(ApproverSlot)
            .where(ApproverSlot.id == slot_id)
            .values(
                page=box.page, x=box.x, y=box.y, width=box.width, height=box.height
            )
        )
