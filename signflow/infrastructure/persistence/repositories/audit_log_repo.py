"""Audit log repository. Append-only; implements IAuditTrail."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from signflow.infrastructure.persistence.models.audit_log import AuditLog
from signflow.shared.enums import AuditAction
from signflow.shared.utils.generators import generate_cuid

if TYPE_CHECKING:
    from signflow.domain.value_objects import CallerIdentity


class AuditLogRepository:
    """Append-only audit log repository. No update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def record(
        self,
        document_id: str | None,
        action: AuditAction,
        description: str,
        *,
        actor: CallerIdentity | None = None,
        actor_name: str | None = None,
        actor_email: str | None = None,
        ip_address: str | None = None,
    ) -> None:
        """Append one audit log entry."""
        row = AuditLog(
            id=generate_cuid(),
            document_id=document_id,
            user_id=actor.user_id if actor else None,
            actor_name=actor_name or (actor.display_name if actor else None),
            actor_email=actor_email or (actor.email if actor else None),
            action=action.value,
            description=description,
            ip_address=ip_address,
        )
        self.db.add(row)
        await self.db.flush()
