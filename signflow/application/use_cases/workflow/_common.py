"""Helpers shared by the workflow use cases."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from signflow.domain.exceptions import (
    AuthorizationException,
    ExternalDependencyException,
    ValidationException,
)
from signflow.shared.enums import NotificationKind

if TYPE_CHECKING:
    from signflow.application.dtos.document import DocumentResult, SlotResult
    from signflow.application.interfaces.services import IPdfStamper
    from signflow.application.services.notifier import WorkflowNotifier
    from signflow.domain.value_objects import CallerIdentity, StampBox


def deadline_from(limit_hours: int | None, now: datetime) -> datetime | None:
    """now + limit_hours, or None when no limit is configured."""
    if limit_hours is None:
        return None
    return now + timedelta(hours=limit_hours)


def validate_positive(value: int | None, field: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationException(f"{field} must be a positive integer", field=field)
    return value


def ensure_can_upload(caller: CallerIdentity) -> None:
    if not caller.can_upload:
        raise AuthorizationException("You do not have permission to upload documents")


def ensure_owner_or_admin(document: DocumentResult, caller: CallerIdentity) -> None:
    """Only the creator or an admin may manage a document."""
    if caller.is_admin or document.creator_id == caller.user_id:
        return
    raise AuthorizationException()


async def count_pages(stamper: IPdfStamper, content: bytes) -> int:
    """Page count of an uploaded PDF; unreadable bytes are a validation error."""
    try:
        return await asyncio.to_thread(stamper.page_count, content)
    except ExternalDependencyException as e:
        raise ValidationException("The uploaded file is not a readable PDF", field="file") from e


def check_boxes_fit(boxes: Iterable[StampBox], page_count: int) -> None:
    """Every stamp page must exist in the document."""
    for box in boxes:
        try:
            box.page_index(page_count)
        except IndexError as e:
            raise ValidationException(
                f"Stamp page {box.page} does not exist (document has {page_count} pages)",
                field="approvers",
            ) from e


async def notify_slots(
    notifier: WorkflowNotifier,
    kind: NotificationKind,
    document: DocumentResult,
    slots: Iterable[SlotResult],
    extra: dict[str, Any] | None = None,
) -> list[str]:
    """One notification per distinct recipient, carrying that recipient's first slot token."""
    seen: set[str] = set()
    sent: list[str] = []
    for slot in slots:
        recipient = (slot.recipient or "").strip().lower()
        if not recipient or recipient in seen:
            continue
        seen.add(recipient)
        if await notifier.notify(
            kind,
            recipient,
            slot.display_name,
            document,
            token=slot.token,
            extra=extra,
        ):
            sent.append(recipient)
    return sent
