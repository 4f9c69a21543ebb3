"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain values only; no infrastructure imports.
Conditional mutators return whether a row actually changed so callers can
detect a concurrent writer instead of overwriting it.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from signflow.domain.enums import DocumentState
from signflow.shared.enums import AuditAction, NotificationKind

if TYPE_CHECKING:
    from signflow.application.dtos.document import (
        DocumentCreate,
        DocumentResult,
        DocumentSummary,
        DocumentUpdate,
        SignatureCreate,
        SignatureResult,
        SlotCreate,
        SlotResult,
    )
    from signflow.application.dtos.group import (
        GroupMemberCreate,
        GroupMemberResult,
        GroupMemberUpdate,
    )
    from signflow.domain.value_objects import CallerIdentity, StampBox


# Document repository interface
class IDocumentRepository(Protocol):
    """Protocol for document repository (DIP)."""

    async def create(self, data: DocumentCreate) -> DocumentResult:
        """Persist a new document and return it."""

    async def get_by_id(self, document_id: str) -> DocumentResult | None:
        """Return a document by id, or None."""

    async def get_for_update(self, document_id: str) -> DocumentResult | None:
        """Return a document and hold a row lock until the transaction ends."""

    async def has_successor(self, document_id: str) -> bool:
        """Return True if a newer version was already created from this document."""

    async def list_by_creator(self, creator_id: int) -> list[DocumentSummary]:
        """Return the creator's documents with slot progress, newest first."""

    async def list_lineage(self, root_id: str) -> list[DocumentSummary]:
        """Return every version sharing root_id, oldest first."""

    async def get_summaries(self, document_ids: list[str]) -> list[DocumentSummary]:
        """Return summaries for the given ids (unknown ids are skipped)."""

    async def update_details(
        self,
        document_id: str,
        data: DocumentUpdate,
        deadline_at: datetime | None,
        recompute_deadline: bool,
    ) -> DocumentResult | None:
        """Apply edits; set deadline_at only when recompute_deadline is True."""

    async def transition(
        self,
        document_id: str,
        expected: DocumentState,
        target: DocumentState,
        *,
        finalized_at: datetime | None = None,
    ) -> bool:
        """Move expected -> target; False if the document was not in expected."""

    async def reopen_expired(self, document_id: str, deadline_at: datetime | None) -> bool:
        """expired -> pending with a fresh deadline and no reminder history."""

    async def touch_reminder(self, document_id: str, sent_at: datetime) -> bool:
        """Set last_reminder_at only while the document is still pending."""

    async def expire_if_overdue(self, document_id: str, now: datetime) -> bool:
        """pending -> expired, only while the deadline is still at or before now."""

    async def list_reminders_due(self, now: datetime, limit: int) -> list[DocumentResult]:
        """Pending documents whose reminder interval has elapsed (or never ran)."""

    async def list_past_deadline(self, now: datetime, limit: int) -> list[DocumentResult]:
        """Pending documents whose deadline is at or before now."""

    async def delete(self, document_id: str) -> bool:
        """Hard delete; slots, signatures and receipts cascade."""


# Approver slot repository interface
class IApproverSlotRepository(Protocol):
    """Protocol for approver slot repository (DIP)."""

    async def create_many(self, slots: list[SlotCreate]) -> list[SlotResult]:
        """Persist slots in the given order."""

    async def get_by_token(self, token: str) -> SlotResult | None:
        """Return the slot owning token, or None."""

    async def list_by_document(self, document_id: str) -> list[SlotResult]:
        """Return slots ordered by ordinal."""

    async def list_pending_for_user(self, user_id: int) -> list[SlotResult]:
        """Pending individual slots bound to user_id."""

    async def list_pending_for_groups(self, group_emails: list[str]) -> list[SlotResult]:
        """Pending group slots bound to any of group_emails."""

    async def mark_approved(
        self,
        slot_id: str,
        signer_name: str,
        member_id: str | None,
        acted_at: datetime,
    ) -> bool:
        """pending -> approved, recording the resolved signer."""

    async def mark_rejected(self, slot_id: str, reason: str, acted_at: datetime) -> bool:
        """pending -> rejected with reason."""

    async def reject_pending(
        self, document_id: str, reason: str, acted_at: datetime
    ) -> int:
        """Reject every still-pending slot of a document; return count."""

    async def expire_pending(self, document_id: str) -> int:
        """pending -> expired for every slot of a document; return count."""

    async def reopen(self, document_id: str) -> int:
        """pending|expired -> pending for a document; return count reset."""

    async def update_box(self, slot_id: str, box: StampBox) -> None:
        """Persist new stamp geometry."""


# Signature repository interface
class ISignatureRepository(Protocol):
    """Protocol for signature repository (append-only)."""

    async def create(self, data: SignatureCreate) -> SignatureResult:
        """Append a signature record."""

    async def list_by_document(self, document_id: str) -> list[SignatureResult]:
        """Return signatures oldest first."""


# Signer group repository interface
class ISignerGroupRepository(Protocol):
    """Protocol for signer group members."""

    async def list_members(
        self, group_email: str, *, include_inactive: bool = False
    ) -> list[GroupMemberResult]:
        """Members of one group ordered by name."""

    async def list_active_in(self, group_emails: list[str]) -> list[GroupMemberResult]:
        """Active members of any of the given groups."""

    async def count_active(self, group_emails: list[str]) -> dict[str, int]:
        """Active member count per group (missing groups are omitted)."""

    async def get_member(self, member_id: str) -> GroupMemberResult | None:
        """Return a member by id, or None."""

    async def find_active_by_email(
        self, group_email: str, email: str
    ) -> GroupMemberResult | None:
        """Active member of group_email whose email matches (normalized)."""

    async def create_member(self, data: GroupMemberCreate) -> GroupMemberResult:
        """Persist a new member."""

    async def update_member(
        self, member_id: str, data: GroupMemberUpdate
    ) -> GroupMemberResult | None:
        """Apply member edits."""


# Notification receipt repository interface
class INotificationReceiptRepository(Protocol):
    """Protocol for notification receipts backing the dedup gate."""

    async def exists_since(
        self,
        recipient: str,
        document_id: str,
        kind: NotificationKind,
        token: str | None,
        since: datetime,
    ) -> bool:
        """True if a receipt for the key was created at or after since."""

    async def delete_before(
        self,
        recipient: str,
        document_id: str,
        kind: NotificationKind,
        token: str | None,
        before: datetime,
    ) -> int:
        """Drop receipts for the key created before the window opened."""

    async def try_insert(
        self,
        recipient: str,
        document_id: str,
        kind: NotificationKind,
        token: str | None,
        created_at: datetime,
    ) -> bool:
        """Insert a receipt; False when the unique key already exists."""


# Audit trail interface
class IAuditTrail(Protocol):
    """Protocol for the document audit trail (write contract only)."""

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
        """Append an audit entry. actor_name/actor_email override actor for system entries."""
