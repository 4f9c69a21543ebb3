"""Sign, reject, and reposition-and-reapply.

Each operation locks the document row first so concurrent signers of the
same document serialize: the completion check and the working-file
overwrite then always see every committed stamp.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from signflow.application.dtos.document import (
    DocumentResult,
    RejectOutcome,
    SignatureCreate,
    SignOutcome,
    SlotResult,
)
from signflow.application.services.delegation_resolver import is_group_alias
from signflow.application.services.document_files import original_ref_for
from signflow.application.services.stamp_layout import StampRequest
from signflow.domain.enums import DocumentState, SlotState
from signflow.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from signflow.domain.value_objects import CallerIdentity, GroupPlaceholder, StampBox
from signflow.shared.enums import AuditAction, NotificationKind
from signflow.shared.telemetry.logging import get_logger
from signflow.shared.utils.datetime import utc_now
from signflow.shared.utils.generators import generate_cuid, normalize_email

if TYPE_CHECKING:
    from signflow.application.interfaces.repositories import (
        IApproverSlotRepository,
        IAuditTrail,
        IDocumentRepository,
        ISignatureRepository,
        ISignerGroupRepository,
    )
    from signflow.application.interfaces.services import IDocumentStorage, IPdfStamper
    from signflow.application.services.delegation_resolver import DelegationResolver
    from signflow.application.services.notifier import WorkflowNotifier

logger = get_logger(__name__)


class SigningService:
    """Approver actions on a slot, plus the administrative reapply path."""

    def __init__(
        self,
        document_repo: IDocumentRepository,
        slot_repo: IApproverSlotRepository,
        signature_repo: ISignatureRepository,
        group_repo: ISignerGroupRepository,
        resolver: DelegationResolver,
        storage: IDocumentStorage,
        stamper: IPdfStamper,
        notifier: WorkflowNotifier,
        audit: IAuditTrail,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._documents = document_repo
        self._slots = slot_repo
        self._signatures = signature_repo
        self._groups = group_repo
        self._resolver = resolver
        self._storage = storage
        self._stamper = stamper
        self._notifier = notifier
        self._audit = audit
        self._clock = clock

    async def _load_for_action(
        self, token: str, caller: CallerIdentity
    ) -> tuple[DocumentResult, SlotResult]:
        """Resolve token, lock its document, re-read the slot and authorize."""
        if not token or not token.strip():
            raise ValidationException("Token is required", field="token")
        slot = await self._slots.get_by_token(token.strip())
        if slot is None:
            raise ResourceNotFoundException("slot")
        document = await self._documents.get_for_update(slot.document_id)
        if document is None:
            raise ResourceNotFoundException("slot")
        slot = await self._slots.get_by_token(token.strip())
        if slot is None:
            raise ResourceNotFoundException("slot")
        if not await self._resolver.can_act(slot, caller):
            logger.info(
                "Denied slot action: slot=%s user=%s", slot.id, caller.user_id
            )
            raise AuthorizationException()
        return document, slot

    @staticmethod
    def _require_open(document: DocumentResult, slot: SlotResult) -> None:
        if slot.state == SlotState.APPROVED:
            raise ConflictException(
                "This slot has already been signed", current_state=slot.state.value
            )
        if slot.state != SlotState.PENDING:
            raise ConflictException(
                "This slot is no longer pending", current_state=slot.state.value
            )
        if document.state != DocumentState.PENDING:
            raise ConflictException(
                "The document is no longer pending", current_state=document.state.value
            )

    async def _resolve_signer(
        self,
        slot: SlotResult,
        caller: CallerIdentity,
        member_id: str | None,
    ) -> tuple[str, str | None]:
        """Return (signer name, member id) for the slot being signed."""
        identity = slot.identity
        if not isinstance(identity, GroupPlaceholder):
            return (slot.display_name or caller.display_name), None
        if not member_id:
            raise ValidationException(
                "Select the group member you are signing as", field="member_id"
            )
        member = await self._groups.get_member(member_id)
        if (
            member is None
            or not member.active
            or normalize_email(member.group_email) != identity.group_email
        ):
            raise ValidationException(
                "Selected member is not an active member of this group",
                field="member_id",
            )
        if not is_group_alias(identity, caller):
            matched = await self._resolver.resolve_member(identity, caller)
            if matched is None or matched.id != member.id:
                raise AuthorizationException()
        return member.name, member.id

    async def _render(self, source_ref: str, target_ref: str, requests: list[StampRequest]) -> None:
        pdf = await self._storage.read(source_ref)
        stamped = await asyncio.to_thread(self._stamper.stamp, pdf, requests)
        await self._storage.write(target_ref, stamped)

    async def sign(
        self,
        token: str,
        caller: CallerIdentity,
        *,
        member_id: str | None = None,
        ip_address: str | None = None,
    ) -> SignOutcome:
        """Approve a slot, stamp the signer's name, and complete the document if last.

        Slot flip, signature insert and stamp render share one transaction; a
        render or write failure raises and rolls all of it back.
        """
        document, slot = await self._load_for_action(token, caller)
        self._require_open(document, slot)
        signer_name, resolved_member = await self._resolve_signer(slot, caller, member_id)

        now = self._clock()
        if not await self._slots.mark_approved(slot.id, signer_name, resolved_member, now):
            raise ConflictException(
                "This slot was updated concurrently", current_state=slot.state.value
            )
        await self._signatures.create(
            SignatureCreate(
                id=generate_cuid(),
                document_id=document.id,
                slot_id=slot.id,
                signer_user_id=caller.user_id,
                signer_name=signer_name,
                signed_at=now,
                ip_address=ip_address,
            )
        )
        await self._render(
            document.storage_ref,
            document.storage_ref,
            [StampRequest(name=signer_name, box=slot.box)],
        )
        await self._audit.record(
            document.id,
            AuditAction.SIGN,
            f"Signed by {signer_name}",
            actor=caller,
            ip_address=ip_address,
        )

        slots = await self._slots.list_by_document(document.id)
        completed = bool(slots) and all(s.state == SlotState.APPROVED for s in slots)
        state = DocumentState.PENDING
        if completed:
            if await self._documents.transition(
                document.id,
                DocumentState.PENDING,
                DocumentState.APPROVED,
                finalized_at=now,
            ):
                state = DocumentState.APPROVED
                logger.info("Document approved by all signers: id=%s", document.id)
                await self._notifier.notify(
                    NotificationKind.APPROVAL_COMPLETE,
                    document.creator_email,
                    document.creator_name,
                    document,
                )
            else:
                completed = False
        logger.info(
            "Slot signed: document=%s slot=%s signer=%r", document.id, slot.id, signer_name
        )
        return SignOutcome(
            document_id=document.id,
            slot_id=slot.id,
            document_state=state,
            completed=completed,
        )

    async def reject(
        self,
        token: str,
        caller: CallerIdentity,
        reason: str,
        *,
        ip_address: str | None = None,
    ) -> RejectOutcome:
        """Reject a slot; every other pending slot and the document follow.

        Notifies each distinct participant once (approvers and creator) and
        always the oversight address.
        """
        reason = (reason or "").strip()
        if not reason:
            raise ValidationException("A rejection reason is required", field="reason")
        document, slot = await self._load_for_action(token, caller)
        self._require_open(document, slot)
        rejector = caller.display_name or slot.display_name

        now = self._clock()
        if not await self._slots.mark_rejected(slot.id, reason, now):
            raise ConflictException(
                "This slot was updated concurrently", current_state=slot.state.value
            )
        others = await self._slots.reject_pending(
            document.id, f"Rejected together with the rejection by {rejector}", now
        )
        if not await self._documents.transition(
            document.id, DocumentState.PENDING, DocumentState.REJECTED
        ):
            raise ConflictException(
                "The document is no longer pending", current_state=document.state.value
            )
        await self._audit.record(
            document.id,
            AuditAction.REJECT,
            f"Rejected by {rejector}. Reason: {reason}",
            actor=caller,
            ip_address=ip_address,
        )

        slots = await self._slots.list_by_document(document.id)
        participants: dict[str, str] = {}
        for s in slots:
            if s.recipient:
                participants.setdefault(normalize_email(s.recipient), s.display_name)
        if document.creator_email:
            participants.setdefault(
                normalize_email(document.creator_email), document.creator_name
            )
        extra = {"rejector_name": rejector, "reason": reason}
        notified: list[str] = []
        for recipient, name in participants.items():
            if await self._notifier.notify(
                NotificationKind.REJECTION, recipient, name, document, extra=extra
            ):
                notified.append(recipient)
        await self._notifier.notify_oversight(
            NotificationKind.REJECTION, document, extra=extra
        )
        logger.info(
            "Document rejected: id=%s slot=%s cascaded=%d", document.id, slot.id, others
        )
        return RejectOutcome(
            document_id=document.id,
            slot_id=slot.id,
            rejected_slots=1 + others,
            notified=notified,
        )

    async def reposition_and_reapply(
        self,
        document_id: str,
        caller: CallerIdentity,
        boxes: dict[str, StampBox],
        *,
        ip_address: str | None = None,
    ) -> list[SlotResult]:
        """Move stamp boxes, then re-render every existing signature from the original.

        Admin only. The working file is rebuilt from the pristine "-original"
        copy so old stamps at the previous positions disappear. Slots without
        a signature are not stamped.
        """
        if not caller.is_admin:
            raise AuthorizationException()
        if not boxes:
            raise ValidationException("No positions supplied", field="positions")
        document = await self._documents.get_for_update(document_id)
        if document is None:
            raise ResourceNotFoundException("document", document_id)
        slots = {s.id: s for s in await self._slots.list_by_document(document.id)}
        unknown = sorted(set(boxes) - set(slots))
        if unknown:
            raise ValidationException(
                f"Unknown slot ids for this document: {', '.join(unknown)}",
                field="positions",
            )
        original_ref = original_ref_for(document.storage_ref)
        original = await self._storage.read(original_ref)
        page_count = await asyncio.to_thread(self._stamper.page_count, original)
        for box in boxes.values():
            try:
                box.page_index(page_count)
            except IndexError as e:
                raise ValidationException(str(e), field="positions") from e

        for slot_id, box in boxes.items():
            await self._slots.update_box(slot_id, box)
        updated = await self._slots.list_by_document(document.id)
        box_by_slot = {s.id: s.box for s in updated}

        signatures = await self._signatures.list_by_document(document.id)
        requests = [
            StampRequest(name=sig.signer_name, box=box_by_slot[sig.slot_id])
            for sig in signatures
            if sig.slot_id in box_by_slot
        ]
        if requests:
            await self._render(original_ref, document.storage_ref, requests)
        await self._audit.record(
            document.id,
            AuditAction.REPOSITION,
            f"Stamp positions updated for {len(boxes)} slot(s); "
            f"{len(requests)} signature(s) reapplied",
            actor=caller,
            ip_address=ip_address,
        )
        logger.info(
            "Reposition: document=%s slots=%d reapplied=%d",
            document.id,
            len(boxes),
            len(requests),
        )
        return updated
