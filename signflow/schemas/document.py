"""Document, slot and signature API schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from signflow.application.dtos.document import (
    ApproverSpec,
    DocumentDetail,
    DocumentResult,
    DocumentSummary,
    PendingItem,
    SignatureResult,
    SlotResult,
    TokenView,
    VersionHistory,
)
from signflow.domain.value_objects import (
    LAST_PAGE,
    GroupPlaceholder,
    Individual,
    StampBox,
)


class StampBoxIn(BaseModel):
    """Stamp geometry in PDF points (origin bottom-left). page -1 = last page."""

    page: int = Field(default=LAST_PAGE, description="1-based page, or -1 for the last page")
    x: float = Field(..., ge=0)
    y: float = Field(..., ge=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)

    @model_validator(mode="after")
    def _check_page(self) -> "StampBoxIn":
        if self.page != LAST_PAGE and self.page < 1:
            raise ValueError("page must be >= 1 or -1 (last page)")
        return self

    def to_box(self) -> StampBox:
        return StampBox(
            page=self.page, x=self.x, y=self.y, width=self.width, height=self.height
        )

    @classmethod
    def from_box(cls, box: StampBox) -> "StampBoxIn":
        return cls(page=box.page, x=box.x, y=box.y, width=box.width, height=box.height)


class ApproverIn(BaseModel):
    """One approver: exactly one of user_id or group_email."""

    model_config = ConfigDict(extra="forbid")

    user_id: int | None = Field(default=None, gt=0)
    group_email: str | None = Field(default=None, max_length=320)
    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    role: str = Field(default="approver", max_length=64)
    position: StampBoxIn | None = None

    @model_validator(mode="after")
    def _one_binding(self) -> "ApproverIn":
        if (self.user_id is None) == (not (self.group_email or "").strip()):
            raise ValueError("Provide exactly one of user_id or group_email")
        return self

    def to_spec(self) -> ApproverSpec:
        identity = (
            Individual(self.user_id)
            if self.user_id is not None
            else GroupPlaceholder(self.group_email or "")
        )
        return ApproverSpec(
            identity=identity,
            display_name=self.name.strip(),
            email=(self.email or "").strip() or None,
            role=self.role,
            box=self.position.to_box() if self.position else None,
        )


class DocumentResponse(BaseModel):
    """Document read model."""

    id: str
    display_name: str
    document_type: str | None = None
    description: str | None = None
    version: int
    parent_id: str | None = None
    root_id: str
    creator_id: int
    creator_name: str
    creator_email: str | None = None
    state: str
    limit_hours: int | None = None
    deadline_at: datetime | None = None
    reminder_interval_minutes: int | None = None
    last_reminder_at: datetime | None = None
    finalized_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_result(cls, d: DocumentResult) -> "DocumentResponse":
        return cls(
            id=d.id,
            display_name=d.display_name,
            document_type=d.document_type,
            description=d.description,
            version=d.version,
            parent_id=d.parent_id,
            root_id=d.root_id,
            creator_id=d.creator_id,
            creator_name=d.creator_name,
            creator_email=d.creator_email,
            state=d.state.value,
            limit_hours=d.limit_hours,
            deadline_at=d.deadline_at,
            reminder_interval_minutes=d.reminder_interval_minutes,
            last_reminder_at=d.last_reminder_at,
            finalized_at=d.finalized_at,
            created_at=d.created_at,
            updated_at=d.updated_at,
        )


class SlotResponse(BaseModel):
    """Approver slot. The signing token is never listed here."""

    id: str
    ordinal: int
    user_id: int | None = None
    group_email: str | None = None
    display_name: str
    email: str | None = None
    role: str
    state: str
    position: StampBoxIn
    resolved_signer_name: str | None = None
    resolved_member_id: str | None = None
    rejection_reason: str | None = None
    acted_at: datetime | None = None

    @classmethod
    def from_result(cls, s: SlotResult) -> "SlotResponse":
        identity = s.identity
        return cls(
            id=s.id,
            ordinal=s.ordinal,
            user_id=identity.user_id if isinstance(identity, Individual) else None,
            group_email=(
                identity.group_email if isinstance(identity, GroupPlaceholder) else None
            ),
            display_name=s.display_name,
            email=s.email,
            role=s.role,
            state=s.state.value,
            position=StampBoxIn.from_box(s.box),
            resolved_signer_name=s.resolved_signer_name,
            resolved_member_id=s.resolved_member_id,
            rejection_reason=s.rejection_reason,
            acted_at=s.acted_at,
        )


class DocumentDetailResponse(BaseModel):
    """Document with its approver slots."""

    document: DocumentResponse
    slots: list[SlotResponse]

    @classmethod
    def from_result(cls, d: DocumentDetail) -> "DocumentDetailResponse":
        return cls(
            document=DocumentResponse.from_result(d.document),
            slots=[SlotResponse.from_result(s) for s in d.slots],
        )


class DocumentSummaryResponse(BaseModel):
    """Document list item with approval progress."""

    document: DocumentResponse
    total_slots: int
    approved_slots: int

    @classmethod
    def from_result(cls, s: DocumentSummary) -> "DocumentSummaryResponse":
        return cls(
            document=DocumentResponse.from_result(s.document),
            total_slots=s.total_slots,
            approved_slots=s.approved_slots,
        )


class PendingItemResponse(BaseModel):
    """Document awaiting the caller, with the token to act on it."""

    document: DocumentResponse
    slot: SlotResponse
    token: str

    @classmethod
    def from_result(cls, item: PendingItem) -> "PendingItemResponse":
        return cls(
            document=DocumentResponse.from_result(item.document),
            slot=SlotResponse.from_result(item.slot),
            token=item.slot.token,
        )


class TokenViewResponse(BaseModel):
    """Slot opened by its token, with the document and all slots."""

    document: DocumentResponse
    slot: SlotResponse
    slots: list[SlotResponse]

    @classmethod
    def from_result(cls, view: TokenView) -> "TokenViewResponse":
        return cls(
            document=DocumentResponse.from_result(view.document),
            slot=SlotResponse.from_result(view.slot),
            slots=[SlotResponse.from_result(s) for s in view.slots],
        )


class VersionHistoryResponse(BaseModel):
    """All versions of a lineage, oldest first."""

    root_id: str
    versions: list[DocumentSummaryResponse]

    @classmethod
    def from_result(cls, h: VersionHistory) -> "VersionHistoryResponse":
        return cls(
            root_id=h.root_id,
            versions=[DocumentSummaryResponse.from_result(v) for v in h.versions],
        )


class SignatureResponse(BaseModel):
    """Signature evidence record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    slot_id: str
    signer_user_id: int
    signer_name: str
    signed_at: datetime
    ip_address: str | None = None

    @classmethod
    def from_result(cls, s: SignatureResult) -> "SignatureResponse":
        return cls.model_validate(s)


class DocumentPatch(BaseModel):
    """Request body for PATCH /documents/{id} (partial)."""

    display_name: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=4000)
    document_type: str | None = Field(default=None, max_length=128)
    limit_hours: int | None = Field(default=None, gt=0)
    reminder_interval_minutes: int | None = Field(default=None, gt=0)


class PositionsRequest(BaseModel):
    """Request body for PUT /documents/{id}/positions: slot id -> new box."""

    positions: dict[str, StampBoxIn] = Field(..., min_length=1)


class SignRequest(BaseModel):
    """Request body for POST /signatures/sign."""

    token: str = Field(..., min_length=1, max_length=128)
    member_id: str | None = Field(
        default=None, description="Group member signing on behalf of a group slot"
    )


class SignResponse(BaseModel):
    """Result of a sign action."""

    document_id: str
    slot_id: str
    document_state: str
    completed: bool


class RejectRequest(BaseModel):
    """Request body for POST /signatures/reject."""

    token: str = Field(..., min_length=1, max_length=128)
    reason: str = Field(..., min_length=1, max_length=4000)


class RejectResponse(BaseModel):
    """Result of a reject action."""

    document_id: str
    slot_id: str
    rejected_slots: int
    notified: list[str]
