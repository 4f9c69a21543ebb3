"""Reminder and expiration sweepers: one pass each.

A pass may race with request handlers, so every document is re-checked
before acting and every state change is a conditional update. Each
document runs in its own transaction (when the runner provides one): its
row locks are released and its queued mail goes out as soon as that
document is done, and one bad document does not undo the rest of the pass.
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, AsyncContextManager

from signflow.application.dtos.document import DocumentResult
from signflow.application.dtos.notification import SweepResult
from signflow.domain.enums import DocumentState, SlotState
from signflow.shared.enums import AuditAction, NotificationKind
from signflow.shared.telemetry.logging import get_logger
from signflow.shared.utils.datetime import ensure_utc, format_utc, utc_now

if TYPE_CHECKING:
    from signflow.application.interfaces.repositories import (
        IApproverSlotRepository,
        IAuditTrail,
        IDocumentRepository,
    )
    from signflow.application.services.notifier import WorkflowNotifier

logger = get_logger(__name__)

SWEEP_BATCH_SIZE = 500
SYSTEM_ACTOR = "system"

Transaction = Callable[[], AsyncContextManager[object]]


def _no_transaction() -> AsyncContextManager[object]:
    return contextlib.nullcontext()


def is_reminder_due(document: DocumentResult, now: datetime) -> bool:
    """True when no reminder was ever sent or the interval has elapsed."""
    interval = document.reminder_interval_minutes
    if not interval or interval <= 0:
        return False
    last = ensure_utc(document.last_reminder_at)
    return last is None or now >= last + timedelta(minutes=interval)


class ReminderSweeper:
    """Re-notify pending approvers of documents whose reminder interval elapsed."""

    def __init__(
        self,
        document_repo: IDocumentRepository,
        slot_repo: IApproverSlotRepository,
        notifier: WorkflowNotifier,
        audit: IAuditTrail,
        *,
        transaction: Transaction = _no_transaction,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._documents = document_repo
        self._slots = slot_repo
        self._notifier = notifier
        self._audit = audit
        self._transaction = transaction
        self._clock = clock

    async def run(self) -> SweepResult:
        now = self._clock()
        candidates = await self._documents.list_reminders_due(now, SWEEP_BATCH_SIZE)
        processed: list[str] = []
        skipped = failed = sent = 0
        for candidate in candidates:
            try:
                async with self._transaction():
                    count = await self._remind(candidate.id, now)
            except Exception:
                failed += 1
                logger.exception("Reminder sweep failed for document %s", candidate.id)
                continue
            if count is None:
                skipped += 1
                continue
            processed.append(candidate.id)
            sent += count
        if processed or failed:
            logger.info(
                "Reminder sweep: %d document(s) reminded, %d notification(s), %d failed",
                len(processed),
                sent,
                failed,
            )
        return SweepResult(
            examined=len(candidates),
            processed=processed,
            skipped=skipped,
            failed=failed,
            notifications_sent=sent,
        )

    async def _remind(self, document_id: str, now: datetime) -> int | None:
        """Send reminders for one document; None when it no longer qualifies."""
        document = await self._documents.get_by_id(document_id)
        if (
            document is None
            or document.state != DocumentState.PENDING
            or not is_reminder_due(document, now)
        ):
            return None
        slots = await self._slots.list_by_document(document.id)
        pending = [s for s in slots if s.state == SlotState.PENDING]
        if not pending:
            return None
        sent = 0
        seen: set[str] = set()
        for slot in pending:
            recipient = (slot.recipient or "").strip().lower()
            if not recipient or recipient in seen:
                continue
            seen.add(recipient)
            if await self._notifier.notify(
                NotificationKind.REMINDER,
                recipient,
                slot.display_name,
                document,
                token=slot.token,
                extra={"sender_name": document.creator_name},
            ):
                sent += 1
                await self._audit.record(
                    document.id,
                    AuditAction.REMINDER,
                    f"Automatic reminder sent to {slot.display_name}",
                    actor_name=SYSTEM_ACTOR,
                    actor_email=recipient,
                )
        if not await self._documents.touch_reminder(document.id, now):
            logger.info(
                "Reminder timestamp not updated, document %s changed state", document.id
            )
        return sent


class ExpirationSweeper:
    """Expire pending documents whose deadline has passed."""

    def __init__(
        self,
        document_repo: IDocumentRepository,
        slot_repo: IApproverSlotRepository,
        notifier: WorkflowNotifier,
        audit: IAuditTrail,
        *,
        transaction: Transaction = _no_transaction,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._documents = document_repo
        self._slots = slot_repo
        self._notifier = notifier
        self._audit = audit
        self._transaction = transaction
        self._clock = clock

    async def run(self) -> SweepResult:
        now = self._clock()
        candidates = await self._documents.list_past_deadline(now, SWEEP_BATCH_SIZE)
        processed: list[str] = []
        skipped = failed = sent = 0
        for candidate in candidates:
            try:
                async with self._transaction():
                    count = await self._expire(candidate, now)
            except Exception:
                failed += 1
                logger.exception("Expiration sweep failed for document %s", candidate.id)
                continue
            if count is None:
                skipped += 1
                continue
            processed.append(candidate.id)
            sent += count
        if processed or failed:
            logger.info(
                "Expiration sweep: %d document(s) expired, %d failed",
                len(processed),
                failed,
            )
        return SweepResult(
            examined=len(candidates),
            processed=processed,
            skipped=skipped,
            failed=failed,
            notifications_sent=sent,
        )

    async def _expire(self, candidate: DocumentResult, now: datetime) -> int | None:
        """Flip one document and its pending slots.

        None when the document moved on or its deadline was extended after
        it was selected.
        """
        slots = await self._slots.list_by_document(candidate.id)
        pending_names = [s.display_name for s in slots if s.state == SlotState.PENDING]
        if not await self._documents.expire_if_overdue(candidate.id, now):
            return None
        expired = await self._slots.expire_pending(candidate.id)
        deadline_text = format_utc(candidate.deadline_at)
        await self._audit.record(
            candidate.id,
            AuditAction.EXPIRATION,
            f"Document expired automatically ({expired} pending approver(s)). "
            f"Deadline: {deadline_text}",
            actor_name=SYSTEM_ACTOR,
        )
        logger.info("Document expired: id=%s pending=%d", candidate.id, expired)
        extra = {
            "pending_names": pending_names,
            "deadline": deadline_text,
        }
        sent = 0
        if await self._notifier.notify(
            NotificationKind.EXPIRATION,
            candidate.creator_email,
            candidate.creator_name,
            candidate,
            extra=extra,
        ):
            sent += 1
        if await self._notifier.notify_oversight(
            NotificationKind.EXPIRATION, candidate, extra=extra
        ):
            sent += 1
        return sent
