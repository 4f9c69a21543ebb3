"""DTOs for documents, approver slots and signatures (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import datetime

from signflow.domain.enums import DocumentState, SlotState
from signflow.domain.value_objects import GroupPlaceholder, Identity, StampBox


@dataclass(frozen=True)
class ApproverSpec:
    """One approver as supplied at upload or new-version time."""

    identity: Identity
    display_name: str
    email: str | None = None
    role: str = "approver"
    box: StampBox | None = None


@dataclass(frozen=True)
class DocumentCreate:
    """Input for creating a document record (write-model). Use case builds this; repo persists and returns DocumentResult."""

    id: str
    display_name: str
    document_type: str | None
    description: str | None
    storage_ref: str
    version: int
    parent_id: str | None
    root_id: str
    creator_id: int
    creator_name: str
    creator_email: str | None
    access_token: str
    limit_hours: int | None
    deadline_at: datetime | None
    reminder_interval_minutes: int | None
    state: DocumentState = DocumentState.PENDING


@dataclass(frozen=True)
class DocumentResult:
    """Document read-model."""

    id: str
    display_name: str
    document_type: str | None
    description: str | None
    storage_ref: str
    version: int
    parent_id: str | None
    root_id: str
    creator_id: int
    creator_name: str
    creator_email: str | None
    access_token: str
    state: DocumentState
    limit_hours: int | None
    deadline_at: datetime | None
    reminder_interval_minutes: int | None
    last_reminder_at: datetime | None
    finalized_at: datetime | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class DocumentUpdate:
    """Editable document fields; None means "leave unchanged"."""

    display_name: str | None = None
    description: str | None = None
    document_type: str | None = None
    limit_hours: int | None = None
    reminder_interval_minutes: int | None = None


@dataclass(frozen=True)
class SlotCreate:
    """Input for creating an approver slot."""

    id: str
    document_id: str
    ordinal: int
    identity: Identity
    display_name: str
    email: str | None
    role: str
    token: str
    box: StampBox


@dataclass(frozen=True)
class SlotResult:
    """Approver slot read-model."""

    id: str
    document_id: str
    ordinal: int
    identity: Identity
    display_name: str
    email: str | None
    role: str
    token: str
    state: SlotState
    box: StampBox
    resolved_signer_name: str | None = None
    resolved_member_id: str | None = None
    rejection_reason: str | None = None
    acted_at: datetime | None = None

    @property
    def recipient(self) -> str | None:
        """Address notifications for this slot go to (group alias for group slots)."""
        if isinstance(self.identity, GroupPlaceholder):
            return self.identity.group_email
        return self.email


@dataclass(frozen=True)
class SignatureCreate:
    """Input for appending a signature record."""

    id: str
    document_id: str
    slot_id: str
    signer_user_id: int
    signer_name: str
    signed_at: datetime
    ip_address: str | None = None


@dataclass(frozen=True)
class SignatureResult:
    """Signature read-model (append-only evidence)."""

    id: str
    document_id: str
    slot_id: str
    signer_user_id: int
    signer_name: str
    signed_at: datetime
    ip_address: str | None = None


@dataclass(frozen=True)
class DocumentSummary:
    """Document plus approval progress, for list views."""

    document: DocumentResult
    total_slots: int
    approved_slots: int


@dataclass(frozen=True)
class PendingItem:
    """A document awaiting the caller, with the slot the caller can act on."""

    document: DocumentResult
    slot: SlotResult


@dataclass(frozen=True)
class TokenView:
    """Everything an approver needs to review a slot opened by its token."""

    document: DocumentResult
    slot: SlotResult
    slots: list[SlotResult] = field(default_factory=list)


@dataclass(frozen=True)
class VersionHistory:
    """All versions of a lineage, oldest first."""

    root_id: str
    versions: list[DocumentSummary] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentDetail:
    """A document with its slots."""

    document: DocumentResult
    slots: list[SlotResult] = field(default_factory=list)


@dataclass(frozen=True)
class SignOutcome:
    """Result of a successful sign."""

    document_id: str
    slot_id: str
    document_state: DocumentState
    completed: bool


@dataclass(frozen=True)
class RejectOutcome:
    """Result of a successful reject."""

    document_id: str
    slot_id: str
    rejected_slots: int
    notified: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DownloadResult:
    """Working PDF bytes for download."""

    filename: str
    content: bytes
