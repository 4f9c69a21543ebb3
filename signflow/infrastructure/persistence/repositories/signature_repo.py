"""Signature repository. Append-only."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from signflow.application.dtos.document import SignatureCreate, SignatureResult
from signflow.infrastructure.persistence.models.signature import Signature
from signflow.infrastructure.persistence.repositories.base import BaseRepository


def _orm_to_result(row: Signature) -> SignatureResult:
    return SignatureResult(
        id=row.id,
        document_id=row.document_id,
        slot_id=row.slot_id,
        signer_user_id=row.signer_user_id,
        signer_name=row.signer_name,
        signed_at=row.signed_at,
        ip_address=row.ip_address,
    )


class SignatureRepository(BaseRepository[Signature]):
    """Signature repository. No update or delete (rows go only with their document)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Signature)

    async def create(self, data: SignatureCreate) -> SignatureResult:
        row = await self._add(
            Signature(
                id=data.id,
                document_id=data.document_id,
                slot_id=data.slot_id,
                signer_user_id=data.signer_user_id,
                signer_name=data.signer_name,
                signed_at=data.signed_at,
                ip_address=data.ip_address,
            )
        )
        return _orm_to_result(row)

    async def list_by_document(self, document_id: str) -> list[SignatureResult]:
        result = await self.db.execute(
            select(Signature)
            .where(Signature.document_id == document_id)
            .order_by(Signature.signed_at.asc())
        )
        return [_orm_to_result(r) for r in result.scalars().all()]
