"""Document lifecycle: create, new version, resend, edit, delete.

All methods run inside the caller's transaction (one per request). Input is
validated before anything is written; a storage failure after rows were
flushed propagates and rolls the transaction back.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from signflow.application.dtos.document import (
    ApproverSpec,
    DocumentCreate,
    DocumentDetail,
    DocumentResult,
    DocumentUpdate,
    SlotCreate,
)
from signflow.application.services.document_files import (
    build_storage_ref,
    original_ref_for,
    validate_pdf_upload,
)
from signflow.application.use_cases.workflow._common import (
    check_boxes_fit,
    count_pages,
    deadline_from,
    ensure_can_upload,
    ensure_owner_or_admin,
    notify_slots,
    validate_positive,
)
from signflow.domain.enums import DocumentState, SlotState
from signflow.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from signflow.domain.value_objects import (
    CallerIdentity,
    GroupPlaceholder,
    Identity,
    StampBox,
)
from signflow.shared.enums import AuditAction, NotificationKind
from signflow.shared.telemetry.logging import get_logger
from signflow.shared.utils.datetime import utc_now
from signflow.shared.utils.generators import generate_cuid, generate_token

if TYPE_CHECKING:
    from signflow.application.interfaces.repositories import (
        IApproverSlotRepository,
        IAuditTrail,
        IDocumentRepository,
    )
    from signflow.application.interfaces.services import IDocumentStorage, IPdfStamper
    from signflow.application.services.notifier import WorkflowNotifier

logger = get_logger(__name__)


class DocumentWorkflowService:
    """Creates documents and versions and manages their lifecycle."""

    def __init__(
        self,
        document_repo: IDocumentRepository,
        slot_repo: IApproverSlotRepository,
        storage: IDocumentStorage,
        stamper: IPdfStamper,
        notifier: WorkflowNotifier,
        audit: IAuditTrail,
        *,
        default_box: StampBox,
        signer_groups: frozenset[str],
        max_upload_size: int,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._documents = document_repo
        self._slots = slot_repo
        self._storage = storage
        self._stamper = stamper
        self._notifier = notifier
        self._audit = audit
        self._default_box = default_box
        self._signer_groups = signer_groups
        self._max_upload_size = max_upload_size
        self._clock = clock

    def _validate_approvers(self, approvers: list[ApproverSpec]) -> None:
        if not approvers:
            raise ValidationException("At least one approver is required", field="approvers")
        seen: set[Identity] = set()
        for approver in approvers:
            if not approver.display_name.strip():
                raise ValidationException("Approver name is required", field="approvers")
            if approver.identity in seen:
                raise ValidationException(
                    "The same approver appears more than once", field="approvers"
                )
            seen.add(approver.identity)
            if isinstance(approver.identity, GroupPlaceholder):
                if approver.identity.group_email not in self._signer_groups:
                    raise ValidationException(
                        f"Unknown signer group: {approver.identity.group_email}",
                        field="approvers",
                    )
            elif not (approver.email or "").strip():
                raise ValidationException(
                    "Individual approvers need an email address", field="approvers"
                )

    def _slot_creates(
        self, document_id: str, approvers: list[ApproverSpec]
    ) -> list[SlotCreate]:
        return [
            SlotCreate(
                id=generate_cuid(),
                document_id=document_id,
                ordinal=position,
                identity=approver.identity,
                display_name=approver.display_name.strip(),
                email=(approver.email or "").strip() or None,
                role=approver.role or "approver",
                token=generate_token(),
                box=approver.box or self._default_box,
            )
            for position, approver in enumerate(approvers, start=1)
        ]

    async def _store_files(self, storage_ref: str, content: bytes) -> None:
        await self._storage.write(original_ref_for(storage_ref), content)
        await self._storage.write(storage_ref, content)

    async def _load_managed(
        self, document_id: str, caller: CallerIdentity
    ) -> DocumentResult:
        document = await self._documents.get_for_update(document_id)
        if document is None:
            raise ResourceNotFoundException("document", document_id)
        ensure_owner_or_admin(document, caller)
        return document

    async def create_document(
        self,
        caller: CallerIdentity,
        *,
        content: bytes | None,
        filename: str,
        approvers: list[ApproverSpec],
        display_name: str | None = None,
        document_type: str | None = None,
        description: str | None = None,
        limit_hours: int | None = None,
        reminder_interval_minutes: int | None = None,
        ip_address: str | None = None,
    ) -> DocumentDetail:
        """Upload a PDF, create its slots and ask every approver to sign."""
        ensure_can_upload(caller)
        content = validate_pdf_upload(content, self._max_upload_size)
        self._validate_approvers(approvers)
        validate_positive(limit_hours, "limit_hours")
        validate_positive(reminder_interval_minutes, "reminder_interval_minutes")
        document_id = generate_cuid()
        storage_ref = build_storage_ref(document_id, 1, filename)
        slot_creates = self._slot_creates(document_id, approvers)
        page_count = await count_pages(self._stamper, content)
        check_boxes_fit((s.box for s in slot_creates), page_count)

        now = self._clock()
        document = await self._documents.create(
            DocumentCreate(
                id=document_id,
                display_name=(display_name or "").strip() or filename,
                document_type=document_type,
                description=description,
                storage_ref=storage_ref,
                version=1,
                parent_id=None,
                root_id=document_id,
                creator_id=caller.user_id,
                creator_name=caller.display_name,
                creator_email=caller.email,
                access_token=generate_token(),
                limit_hours=limit_hours,
                deadline_at=deadline_from(limit_hours, now),
                reminder_interval_minutes=reminder_interval_minutes,
            )
        )
        slots = await self._slots.create_many(slot_creates)
        await self._store_files(storage_ref, content)
        await self._audit.record(
            document.id,
            AuditAction.UPLOAD,
            f'Document "{document.display_name}" uploaded',
            actor=caller,
            ip_address=ip_address,
        )
        logger.info(
            "Document created: id=%s approvers=%d by user=%s",
            document.id,
            len(slots),
            caller.user_id,
        )
        await notify_slots(
            self._notifier,
            NotificationKind.APPROVAL_REQUEST,
            document,
            slots,
            {"sender_name": caller.display_name},
        )
        return DocumentDetail(document=document, slots=slots)

    async def new_version(
        self,
        document_id: str,
        caller: CallerIdentity,
        *,
        content: bytes | None,
        filename: str,
        keep_previous_set: bool,
        approvers: list[ApproverSpec] | None = None,
        ip_address: str | None = None,
    ) -> DocumentDetail:
        """Supersede a rejected document with a new version in the same lineage.

        Only the original creator may do this. Approvers who had already
        approved the previous version keep their slot but are not notified
        again.
        """
        ensure_can_upload(caller)
        content = validate_pdf_upload(content, self._max_upload_size)
        if not keep_previous_set:
            self._validate_approvers(approvers or [])
        previous = await self._documents.get_for_update(document_id)
        if previous is None:
            raise ResourceNotFoundException("document", document_id)
        if previous.creator_id != caller.user_id:
            raise AuthorizationException()
        if previous.state != DocumentState.REJECTED:
            raise ConflictException(
                "Only rejected documents can receive a new version",
                current_state=previous.state.value,
            )
        if await self._documents.has_successor(previous.id):
            raise ConflictException(
                "A newer version of this document already exists",
                current_state=previous.state.value,
            )

        previous_slots = await self._slots.list_by_document(previous.id)
        if keep_previous_set:
            specs = [
                ApproverSpec(
                    identity=s.identity,
                    display_name=s.display_name,
                    email=s.email,
                    role=s.role,
                    box=s.box,
                )
                for s in previous_slots
            ]
        else:
            specs = list(approvers or [])

        new_id = generate_cuid()
        version = previous.version + 1
        storage_ref = build_storage_ref(new_id, version, filename)
        slot_creates = self._slot_creates(new_id, specs)
        page_count = await count_pages(self._stamper, content)
        check_boxes_fit((s.box for s in slot_creates), page_count)

        now = self._clock()
        document = await self._documents.create(
            DocumentCreate(
                id=new_id,
                display_name=previous.display_name,
                document_type=previous.document_type,
                description=previous.description,
                storage_ref=storage_ref,
                version=version,
                parent_id=previous.id,
                root_id=previous.root_id,
                creator_id=caller.user_id,
                creator_name=caller.display_name,
                creator_email=caller.email,
                access_token=generate_token(),
                limit_hours=previous.limit_hours,
                deadline_at=deadline_from(previous.limit_hours, now),
                reminder_interval_minutes=previous.reminder_interval_minutes,
            )
        )
        slots = await self._slots.create_many(slot_creates)
        await self._store_files(storage_ref, content)
        await self._audit.record(
            document.id,
            AuditAction.NEW_VERSION,
            f'Version {version} of "{document.display_name}" uploaded',
            actor=caller,
            ip_address=ip_address,
        )
        already_approved = {
            s.identity for s in previous_slots if s.state == SlotState.APPROVED
        }
        to_notify = [s for s in slots if s.identity not in already_approved]
        await notify_slots(
            self._notifier,
            NotificationKind.NEW_VERSION,
            document,
            to_notify,
        )
        logger.info(
            "New version created: id=%s version=%d root=%s",
            document.id,
            version,
            document.root_id,
        )
        return DocumentDetail(document=document, slots=slots)

    async def resend(
        self,
        document_id: str,
        caller: CallerIdentity,
        *,
        ip_address: str | None = None,
    ) -> DocumentDetail:
        """Reopen an expired document with a fresh deadline and re-notify approvers."""
        document = await self._load_managed(document_id, caller)
        if document.state != DocumentState.EXPIRED:
            raise ConflictException(
                "Only expired documents can be resent",
                current_state=document.state.value,
            )
        deadline = deadline_from(document.limit_hours, self._clock())
        if not await self._documents.reopen_expired(document.id, deadline):
            current = await self._documents.get_by_id(document.id)
            raise ConflictException(
                "Document changed state while resending",
                current_state=current.state.value if current else None,
            )
        reset = await self._slots.reopen(document.id)
        await self._audit.record(
            document.id,
            AuditAction.RESEND,
            f"Document resent; {reset} approver(s) reopened",
            actor=caller,
            ip_address=ip_address,
        )
        refreshed = await self._documents.get_by_id(document.id) or document
        slots = await self._slots.list_by_document(document.id)
        pending = [s for s in slots if s.state == SlotState.PENDING]
        await notify_slots(
            self._notifier,
            NotificationKind.APPROVAL_REQUEST,
            refreshed,
            pending,
            {"sender_name": refreshed.creator_name},
        )
        logger.info("Document resent: id=%s pending=%d", document.id, len(pending))
        return DocumentDetail(document=refreshed, slots=slots)

    async def edit(
        self,
        document_id: str,
        caller: CallerIdentity,
        data: DocumentUpdate,
        *,
        ip_address: str | None = None,
    ) -> DocumentResult:
        """Edit descriptive fields and timing; a new limit restarts the deadline."""
        validate_positive(data.limit_hours, "limit_hours")
        validate_positive(data.reminder_interval_minutes, "reminder_interval_minutes")
        if data.display_name is not None and not data.display_name.strip():
            raise ValidationException("Display name cannot be empty", field="display_name")
        document = await self._load_managed(document_id, caller)
        recompute = (
            data.limit_hours is not None and document.state == DocumentState.PENDING
        )
        deadline = deadline_from(data.limit_hours, self._clock()) if recompute else None
        updated = await self._documents.update_details(
            document.id, data, deadline, recompute
        )
        if updated is None:
            raise ResourceNotFoundException("document", document_id)
        await self._audit.record(
            document.id,
            AuditAction.EDIT,
            "Document details edited",
            actor=caller,
            ip_address=ip_address,
        )
        return updated

    async def delete(
        self,
        document_id: str,
        caller: CallerIdentity,
        *,
        ip_address: str | None = None,
    ) -> None:
        """Hard delete a document, its slots and signatures, and its files."""
        document = await self._load_managed(document_id, caller)
        await self._documents.delete(document.id)
        for ref in (document.storage_ref, original_ref_for(document.storage_ref)):
            if not await self._storage.delete(ref):
                logger.warning("Delete: file already missing: %s", ref)
        await self._audit.record(
            document.id,
            AuditAction.DELETE,
            f'Document "{document.display_name}" v{document.version} deleted',
            actor=caller,
            ip_address=ip_address,
        )
        logger.info("Document deleted: id=%s by user=%s", document.id, caller.user_id)
