"""Workflow notifier: dedup gate, template rendering and mail dispatch.

Sending is best effort. A transport failure is logged and reported as
False; it never propagates into the workflow transaction that asked for it.

With a MailOutbox the notifier only reserves, renders and audits inside the
transaction; the mail itself goes out once the transaction has committed,
so no row lock is held across SMTP and a rolled-back change sends nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from signflow.shared.enums import AuditAction, NotificationKind
from signflow.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from signflow.application.dtos.document import DocumentResult
    from signflow.application.interfaces.repositories import IAuditTrail
    from signflow.application.interfaces.services import (
        IMailSender,
        INotificationRenderer,
    )
    from signflow.application.services.notification_gate import NotificationGate

logger = get_logger(__name__)

SYSTEM_ACTOR_NAME = "system"


@dataclass(frozen=True)
class OutgoingMail:
    """A rendered notification waiting for its transaction to commit."""

    kind: NotificationKind
    document_id: str
    recipient: str
    subject: str
    body: str


async def send_mail(sender: IMailSender, mail: OutgoingMail) -> bool:
    """Send one mail; transport errors are logged and reported as False."""
    try:
        sent = await sender.send(mail.recipient, mail.subject, mail.body)
    except Exception:
        logger.exception(
            "Notification send failed: kind=%s document=%s recipient=%s",
            mail.kind.value,
            mail.document_id,
            mail.recipient,
        )
        return False
    if not sent:
        logger.warning(
            "Notification not delivered: kind=%s document=%s recipient=%s",
            mail.kind.value,
            mail.document_id,
            mail.recipient,
        )
    return sent


class MailOutbox:
    """Mail held back until the owning transaction commits."""

    def __init__(self, sender: IMailSender) -> None:
        self._sender = sender
        self._pending: list[OutgoingMail] = []

    def __len__(self) -> int:
        return len(self._pending)

    def add(self, mail: OutgoingMail) -> None:
        self._pending.append(mail)

    def discard(self) -> int:
        """Drop queued mail after a rollback; returns how many were dropped."""
        dropped = len(self._pending)
        self._pending = []
        return dropped

    async def deliver(self) -> int:
        """Send everything queued so far; returns how many were accepted."""
        pending, self._pending = self._pending, []
        delivered = 0
        for mail in pending:
            if await send_mail(self._sender, mail):
                delivered += 1
        return delivered


class WorkflowNotifier:
    """Sends workflow notifications at most once per dedup key and window."""

    def __init__(
        self,
        gate: NotificationGate,
        sender: IMailSender,
        renderer: INotificationRenderer,
        audit: IAuditTrail,
        *,
        frontend_url: str,
        oversight_email: str | None = None,
        outbox: MailOutbox | None = None,
    ) -> None:
        self._gate = gate
        self._sender = sender
        self._renderer = renderer
        self._audit = audit
        self._frontend_url = frontend_url.rstrip("/")
        self._oversight_email = (oversight_email or "").strip() or None
        self._outbox = outbox

    def approval_link(self, token: str) -> str:
        return f"{self._frontend_url}/approve/{token}"

    def document_link(self, document_id: str) -> str:
        return f"{self._frontend_url}/documents/{document_id}"

    async def notify(
        self,
        kind: NotificationKind,
        recipient: str | None,
        recipient_name: str,
        document: DocumentResult,
        *,
        token: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> bool:
        """Reserve through the gate, render, then send or queue. False when skipped."""
        if not recipient:
            logger.warning(
                "Notification skipped, no recipient address: kind=%s document=%s",
                kind.value,
                document.id,
            )
            return False
        reservation = await self._gate.try_reserve(recipient, document.id, kind, token)
        if reservation.already:
            return False
        return await self._dispatch(kind, recipient, recipient_name, document, token, extra)

    async def notify_oversight(
        self,
        kind: NotificationKind,
        document: DocumentResult,
        *,
        extra: dict[str, Any] | None = None,
    ) -> bool:
        """Send to the fixed oversight address; not subject to the dedup window."""
        if self._oversight_email is None:
            logger.debug("No oversight address configured; skipping %s", kind.value)
            return False
        return await self._dispatch(
            kind, self._oversight_email, "Oversight", document, None, extra
        )

    async def _dispatch(
        self,
        kind: NotificationKind,
        recipient: str,
        recipient_name: str,
        document: DocumentResult,
        token: str | None,
        extra: dict[str, Any] | None,
    ) -> bool:
        context: dict[str, Any] = {
            "recipient_name": recipient_name,
            "document_name": document.display_name,
            "document_id": document.id,
            "version": document.version,
            "creator_name": document.creator_name,
            "document_link": self.document_link(document.id),
            "approval_link": self.approval_link(token) if token else None,
        }
        context.update(extra or {})
        subject, body = self._renderer.render(kind, context)
        mail = OutgoingMail(kind, document.id, recipient, subject, body)
        if self._outbox is not None:
            self._outbox.add(mail)
            await self._audit.record(
                document.id,
                AuditAction.NOTIFICATION,
                f"{kind.value} notification queued for {recipient_name} <{recipient}>",
                actor_name=SYSTEM_ACTOR_NAME,
            )
            return True
        if not await send_mail(self._sender, mail):
            return False
        await self._audit.record(
            document.id,
            AuditAction.NOTIFICATION,
            f"{kind.value} notification sent to {recipient_name} <{recipient}>",
            actor_name=SYSTEM_ACTOR_NAME,
        )
        return True
