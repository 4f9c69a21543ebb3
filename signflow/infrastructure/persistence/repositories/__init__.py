"""Persistence repositories. Re-exports for dependency injection."""

from signflow.infrastructure.persistence.repositories.approver_slot_repo import (
    ApproverSlotRepository,
)
from signflow.infrastructure.persistence.repositories.audit_log_repo import (
    AuditLogRepository,
)
from signflow.infrastructure.persistence.repositories.base import BaseRepository
from signflow.infrastructure.persistence.repositories.document_repo import (
    DocumentRepository,
)
from signflow.infrastructure.persistence.repositories.notification_receipt_repo import (
    NotificationReceiptRepository,
)
from signflow.infrastructure.persistence.repositories.signature_repo import (
    SignatureRepository,
)
from signflow.infrastructure.persistence.repositories.signer_group_repo import (
    SignerGroupRepository,
)

__all__ = [
    "ApproverSlotRepository",
    "AuditLogRepository",
    "BaseRepository",
    "DocumentRepository",
    "NotificationReceiptRepository",
    "SignatureRepository",
    "SignerGroupRepository",
]
