"""Notification deduplication gate.

Reserve-before-send: a receipt is written before any dispatch, keyed by
(normalized recipient, document, kind, token). A receipt younger than the
kind's window suppresses the send; losing the insert race counts as
already reserved.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from signflow.application.dtos.notification import ReserveResult
from signflow.domain.exceptions import ValidationException
from signflow.shared.enums import NotificationKind
from signflow.shared.telemetry.logging import get_logger
from signflow.shared.utils.datetime import utc_now
from signflow.shared.utils.generators import normalize_email

if TYPE_CHECKING:
    from signflow.application.interfaces.repositories import (
        INotificationReceiptRepository,
    )

logger = get_logger(__name__)

REMINDER_WINDOW = timedelta(minutes=1)
DEFAULT_WINDOW = timedelta(minutes=5)


def dedup_window(kind: NotificationKind) -> timedelta:
    """Suppression window for a notification kind."""
    return REMINDER_WINDOW if kind == NotificationKind.REMINDER else DEFAULT_WINDOW


class NotificationGate:
    """try_reserve(recipient, document_id, kind, token) -> ReserveResult."""

    def __init__(
        self,
        receipts: INotificationReceiptRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._receipts = receipts
        self._clock = clock

    async def try_reserve(
        self,
        recipient: str,
        document_id: str,
        kind: NotificationKind,
        token: str | None = None,
    ) -> ReserveResult:
        normalized = normalize_email(recipient)
        if not normalized:
            raise ValidationException("Notification recipient is required", field="recipient")
        now = self._clock()
        window_start = now - dedup_window(kind)
        if await self._receipts.exists_since(
            normalized, document_id, kind, token, window_start
        ):
            logger.info(
                "Notification suppressed (within window): kind=%s document=%s recipient=%s",
                kind.value,
                document_id,
                normalized,
            )
            return ReserveResult(already=True)
        await self._receipts.delete_before(
            normalized, document_id, kind, token, window_start
        )
        if not await self._receipts.try_insert(normalized, document_id, kind, token, now):
            logger.info(
                "Notification suppressed (concurrent reservation): kind=%s document=%s recipient=%s",
                kind.value,
                document_id,
                normalized,
            )
            return ReserveResult(already=True)
        return ReserveResult(already=False)
