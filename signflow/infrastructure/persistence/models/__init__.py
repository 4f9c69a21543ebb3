"""ORM models. Importing this package registers every table on Base.metadata."""

from signflow.infrastructure.persistence.models.approver_slot import ApproverSlot
from signflow.infrastructure.persistence.models.audit_log import AuditLog
from signflow.infrastructure.persistence.models.document import Document
from signflow.infrastructure.persistence.models.notification_receipt import (
    NotificationReceipt,
)
from signflow.infrastructure.persistence.models.signature import Signature
from signflow.infrastructure.persistence.models.signer_group_member import (
    SignerGroupMember,
)

__all__ = [
    "ApproverSlot",
    "AuditLog",
    "Document",
    "NotificationReceipt",
    "Signature",
    "SignerGroupMember",
]
