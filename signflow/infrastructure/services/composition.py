"""Session-scoped builders for the workflow services.

Shared by the API dependencies (one session per request) and the sweeper
runner (one session per pass), so both wire repositories, the dedup gate
and the mail transport the same way. Mail is queued on a per-session
outbox and delivered only after the session's transaction commits.
"""

from __future__ import annotations

from functools import lru_cache, partial
from typing import TYPE_CHECKING

from signflow.application.services.delegation_resolver import DelegationResolver
from signflow.application.services.notification_gate import NotificationGate
from signflow.application.services.notifier import MailOutbox, WorkflowNotifier
from signflow.application.use_cases.groups import GroupAdminService
from signflow.application.use_cases.workflow import (
    DocumentQueryService,
    DocumentWorkflowService,
    ExpirationSweeper,
    ReminderSweeper,
    SigningService,
)
from signflow.domain.value_objects import StampBox
from signflow.infrastructure.external.pdf import PdfStamper
from signflow.infrastructure.external.storage import StorageFactory
from signflow.infrastructure.persistence.database import (
    add_after_commit,
    add_after_rollback,
    unit_of_work,
)
from signflow.infrastructure.persistence.repositories import (
    ApproverSlotRepository,
    AuditLogRepository,
    DocumentRepository,
    NotificationReceiptRepository,
    SignatureRepository,
    SignerGroupRepository,
)
from signflow.infrastructure.services.mail_sender import create_mail_sender
from signflow.infrastructure.services.notification_templates import (
    NotificationTemplateRenderer,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from signflow.core.config import Settings

OUTBOX_KEY = "mail_outbox"


@lru_cache
def get_stamper() -> PdfStamper:
    return PdfStamper()


@lru_cache
def get_renderer() -> NotificationTemplateRenderer:
    return NotificationTemplateRenderer()


def default_stamp_box(settings: Settings) -> StampBox:
    return StampBox(
        page=settings.default_stamp_page,
        x=settings.default_stamp_x,
        y=settings.default_stamp_y,
        width=settings.default_stamp_width,
        height=settings.default_stamp_height,
    )


def session_outbox(db: AsyncSession, settings: Settings) -> MailOutbox:
    """The session's outbox: delivered after each commit, emptied on rollback."""
    outbox = db.info.get(OUTBOX_KEY)
    if outbox is None:
        outbox = MailOutbox(create_mail_sender(settings))
        db.info[OUTBOX_KEY] = outbox
        add_after_commit(db, outbox.deliver)
        add_after_rollback(db, outbox.discard)
    return outbox


def build_notifier(db: AsyncSession, settings: Settings) -> WorkflowNotifier:
    outbox = session_outbox(db, settings)
    return WorkflowNotifier(
        NotificationGate(NotificationReceiptRepository(db)),
        create_mail_sender(settings),
        get_renderer(),
        AuditLogRepository(db),
        frontend_url=settings.frontend_url,
        oversight_email=settings.oversight_email or None,
        outbox=outbox,
    )


def build_workflow_service(db: AsyncSession, settings: Settings) -> DocumentWorkflowService:
    return DocumentWorkflowService(
        DocumentRepository(db),
        ApproverSlotRepository(db),
        StorageFactory.create_storage_service(settings),
        get_stamper(),
        build_notifier(db, settings),
        AuditLogRepository(db),
        default_box=default_stamp_box(settings),
        signer_groups=settings.signer_group_set,
        max_upload_size=settings.max_upload_size,
    )


def build_signing_service(db: AsyncSession, settings: Settings) -> SigningService:
    groups = SignerGroupRepository(db)
    return SigningService(
        DocumentRepository(db),
        ApproverSlotRepository(db),
        SignatureRepository(db),
        groups,
        DelegationResolver(groups),
        StorageFactory.create_storage_service(settings),
        get_stamper(),
        build_notifier(db, settings),
        AuditLogRepository(db),
    )


def build_query_service(db: AsyncSession, settings: Settings) -> DocumentQueryService:
    return DocumentQueryService(
        DocumentRepository(db),
        ApproverSlotRepository(db),
        SignatureRepository(db),
        DelegationResolver(SignerGroupRepository(db)),
        StorageFactory.create_storage_service(settings),
        AuditLogRepository(db),
        signer_groups=settings.signer_group_set,
    )


def build_group_admin_service(db: AsyncSession, settings: Settings) -> GroupAdminService:
    return GroupAdminService(SignerGroupRepository(db), settings.signer_group_set)


def build_sweepers(
    db: AsyncSession, settings: Settings
) -> tuple[ReminderSweeper, ExpirationSweeper]:
    """Both sweepers over one session; each document commits on its own."""
    notifier = build_notifier(db, settings)
    documents = DocumentRepository(db)
    slots = ApproverSlotRepository(db)
    audit = AuditLogRepository(db)
    per_document = partial(unit_of_work, db)
    return (
        ReminderSweeper(documents, slots, notifier, audit, transaction=per_document),
        ExpirationSweeper(documents, slots, notifier, audit, transaction=per_document),
    )
