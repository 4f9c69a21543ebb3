"""Document repository. Returns application DTOs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Interval,
    case,
    delete,
    exists,
    func,
    literal_column,
    or_,
    select,
    update,
)
from sqlalchemy.ext.asyncio import AsyncSession

from signflow.application.dtos.document import (
    DocumentCreate,
    DocumentResult,
    DocumentSummary,
    DocumentUpdate,
)
from signflow.domain.enums import DocumentState, SlotState
from signflow.infrastructure.persistence.models.approver_slot import ApproverSlot
from signflow.infrastructure.persistence.models.document import Document
from signflow.infrastructure.persistence.repositories.base import BaseRepository


def _create_to_document(d: DocumentCreate) -> Document:
    """Map DocumentCreate (write-model) to ORM Document for persistence."""
    return Document(
        id=d.id,
        display_name=d.display_name,
        document_type=d.document_type,
        description=d.description,
        storage_ref=d.storage_ref,
        version=d.version,
        parent_id=d.parent_id,
        root_id=d.root_id,
        creator_id=d.creator_id,
        creator_name=d.creator_name,
        creator_email=d.creator_email,
        access_token=d.access_token,
        state=d.state.value,
        limit_hours=d.limit_hours,
        deadline_at=d.deadline_at,
        reminder_interval_minutes=d.reminder_interval_minutes,
    )


def _document_to_result(d: Document) -> DocumentResult:
    """Map ORM Document to application DocumentResult."""
    return DocumentResult(
        id=d.id,
        display_name=d.display_name,
        document_type=d.document_type,
        description=d.description,
        storage_ref=d.storage_ref,
        version=d.version,
        parent_id=d.parent_id,
        root_id=d.root_id,
        creator_id=d.creator_id,
        creator_name=d.creator_name,
        creator_email=d.creator_email,
        access_token=d.access_token,
        state=DocumentState(d.state),
        limit_hours=d.limit_hours,
        deadline_at=d.deadline_at,
        reminder_interval_minutes=d.reminder_interval_minutes,
        last_reminder_at=d.last_reminder_at,
        finalized_at=d.finalized_at,
        created_at=d.created_at,
        updated_at=d.updated_at,
    )


def _progress_subquery():
    """Per-document slot totals, for list views."""
    return (
        select(
            ApproverSlot.document_id.label("document_id"),
            func.count(ApproverSlot.id).label("total"),
            func.sum(
                case((ApproverSlot.state == SlotState.APPROVED.value, 1), else_=0)
            ).label("approved"),
        )
        .group_by(ApproverSlot.document_id)
        .subquery()
    )


class DocumentRepository(BaseRepository[Document]):
    """Document repository. create() accepts DocumentCreate (write-model); returns DocumentResult (read-model)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Document)

    async def create(self, data: DocumentCreate) -> DocumentResult:
        created = await self._add(_create_to_document(data))
        return _document_to_result(created)

    async def get_by_id(self, document_id: str) -> DocumentResult | None:
        row = await self._get_orm(document_id)
        return _document_to_result(row) if row else None

    async def get_for_update(self, document_id: str) -> DocumentResult | None:
        """SELECT ... FOR UPDATE; the lock is held until the transaction ends."""
        row = await self._get_orm(document_id, for_update=True)
        if row is None:
            return None
        # Another transaction may have changed the row while we waited on the lock.
        await self.db.refresh(row)
        return _document_to_result(row)

    async def has_successor(self, document_id: str) -> bool:
        result = await self.db.execute(
            select(exists().where(Document.parent_id == document_id))
        )
        return bool(result.scalar())

    async def _summaries(self, *conditions, newest_first: bool) -> list[DocumentSummary]:
        progress = _progress_subquery()
        order = Document.created_at.desc() if newest_first else Document.version.asc()
        stmt = (
            select(Document, progress.c.total, progress.c.approved)
            .outerjoin(progress, progress.c.document_id == Document.id)
            .where(*conditions)
            .order_by(order)
        )
        result = await self.db.execute(stmt)
        return [
            DocumentSummary(
                document=_document_to_result(row),
                total_slots=int(total or 0),
                approved_slots=int(approved or 0),
            )
            for row, total, approved in result.all()
        ]

    async def list_by_creator(self, creator_id: int) -> list[DocumentSummary]:
        return await self._summaries(Document.creator_id == creator_id, newest_first=True)

    async def list_lineage(self, root_id: str) -> list[DocumentSummary]:
        return await self._summaries(Document.root_id == root_id, newest_first=False)

    async def get_summaries(self, document_ids: list[str]) -> list[DocumentSummary]:
        if not document_ids:
            return []
        return await self._summaries(Document.id.in_(document_ids), newest_first=True)

    async def update_details(
        self,
        document_id: str,
        data: DocumentUpdate,
        deadline_at: datetime | None,
        recompute_deadline: bool,
    ) -> DocumentResult | None:
        row = await self._get_orm(document_id)
        if row is None:
            return None
        if data.display_name is not None:
            row.display_name = data.display_name
        if data.description is not None:
            row.description = data.description
        if data.document_type is not None:
            row.document_type = data.document_type
        if data.limit_hours is not None:
            row.limit_hours = data.limit_hours
        if data.reminder_interval_minutes is not None:
            row.reminder_interval_minutes = data.reminder_interval_minutes
        if recompute_deadline:
            row.deadline_at = deadline_at
        await self.db.flush()
        await self.db.refresh(row)
        return _document_to_result(row)

    async def transition(
        self,
        document_id: str,
        expected: DocumentState,
        target: DocumentState,
        *,
        finalized_at: datetime | None = None,
    ) -> bool:
        """Conditional state change; True only if exactly one row moved."""
        values: dict[str, object] = {"state": target.value}
        if finalized_at is not None:
            values["finalized_at"] = finalized_at
        result = await self.db.execute(
            update(Document)
            .where(Document.id == document_id, Document.state == expected.value)
            .values(**values)
        )
        return result.rowcount == 1

    async def reopen_expired(self, document_id: str, deadline_at: datetime | None) -> bool:
        result = await self.db.execute(
            update(Document)
            .where(
                Document.id == document_id,
                Document.state == DocumentState.EXPIRED.value,
            )
            .values(
                state=DocumentState.PENDING.value,
                deadline_at=deadline_at,
                last_reminder_at=None,
            )
        )
        return result.rowcount == 1

    async def touch_reminder(self, document_id: str, sent_at: datetime) -> bool:
        result = await self.db.execute(
            update(Document)
            .where(
                Document.id == document_id,
                Document.state == DocumentState.PENDING.value,
            )
            .values(last_reminder_at=sent_at)
        )
        return result.rowcount == 1

    async def expire_if_overdue(self, document_id: str, now: datetime) -> bool:
        """pending -> expired; a deadline extended since selection keeps it pending."""
        result = await self.db.execute(
            update(Document)
            .where(
                Document.id == document_id,
                Document.state == DocumentState.PENDING.value,
                Document.deadline_at.is_not(None),
                Document.deadline_at <= now,
            )
            .values(state=DocumentState.EXPIRED.value)
        )
        return result.rowcount == 1

    async def list_reminders_due(self, now: datetime, limit: int) -> list[DocumentResult]:
        """Due filter runs in SQL so documents that are not due never fill the batch."""
        one_minute = literal_column("INTERVAL '1 minute'", type_=Interval)
        next_due = Document.last_reminder_at + one_minute * Document.reminder_interval_minutes
        result = await self.db.execute(
            select(Document)
            .where(
                Document.state == DocumentState.PENDING.value,
                Document.reminder_interval_minutes.is_not(None),
                Document.reminder_interval_minutes > 0,
                or_(Document.last_reminder_at.is_(None), next_due <= now),
            )
            .order_by(Document.last_reminder_at.asc().nulls_first())
            .limit(limit)
        )
        return [_document_to_result(d) for d in result.scalars().all()]

    async def list_past_deadline(self, now: datetime, limit: int) -> list[DocumentResult]:
        result = await self.db.execute(
            select(Document)
            .where(
                Document.state == DocumentState.PENDING.value,
                Document.deadline_at.is_not(None),
                Document.deadline_at <= now,
            )
            .order_by(Document.deadline_at.asc())
            .limit(limit)
        )
        return [_document_to_result(d) for d in result.scalars().all()]

    async def delete(self, document_id: str) -> bool:
        """Hard delete; slots, signatures and receipts go with it (ON DELETE CASCADE)."""
        result = await self.db.execute(delete(Document).where(Document.id == document_id))
        return result.rowcount == 1
