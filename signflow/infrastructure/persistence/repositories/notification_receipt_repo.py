"""Notification receipt repository backing the dedup gate."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from signflow.infrastructure.persistence.models.notification_receipt import (
    NotificationReceipt,
)
from signflow.shared.enums import NotificationKind
from signflow.shared.utils.generators import generate_cuid


def _key(recipient: str, document_id: str, kind: NotificationKind, token: str | None):
    return (
        NotificationReceipt.recipient == recipient,
        NotificationReceipt.document_id == document_id,
        NotificationReceipt.kind == kind.value,
        NotificationReceipt.token == (token or ""),
    )


class NotificationReceiptRepository:
    """Receipts keyed by (recipient, document, kind, token)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def exists_since(
        self,
        recipient: str,
        document_id: str,
        kind: NotificationKind,
        token: str | None,
        since: datetime,
    ) -> bool:
        result = await self.db.execute(
            select(
                exists().where(
                    *_key(recipient, document_id, kind, token),
                    NotificationReceipt.created_at >= since,
                )
            )
        )
        return bool(result.scalar())

    async def delete_before(
        self,
        recipient: str,
        document_id: str,
        kind: NotificationKind,
        token: str | None,
        before: datetime,
    ) -> int:
        result = await self.db.execute(
            delete(NotificationReceipt).where(
                *_key(recipient, document_id, kind, token),
                NotificationReceipt.created_at < before,
            )
        )
        return result.rowcount or 0

    async def try_insert(
        self,
        recipient: str,
        document_id: str,
        kind: NotificationKind,
        token: str | None,
        created_at: datetime,
    ) -> bool:
        """Insert under a savepoint; a unique-key collision means another sender won."""
        row = NotificationReceipt(
            id=generate_cuid(),
            recipient=recipient,
            document_id=document_id,
            kind=kind.value,
            token=token or "",
            created_at=created_at,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(row)
                await self.db.flush()
        except IntegrityError:
            return False
        return True
