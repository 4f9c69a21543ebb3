"""Notification dedup gate: reserve-before-send within a per-kind window."""

import pytest

from signflow.application.services.notification_gate import (
    DEFAULT_WINDOW,
    REMINDER_WINDOW,
    NotificationGate,
    dedup_window,
)
from signflow.domain.exceptions import ValidationException
from signflow.shared.enums import NotificationKind
from workbench import FakeClock, FakeReceiptRepository


@pytest.fixture
def gate_parts():
    clock = FakeClock()
    receipts = FakeReceiptRepository()
    return NotificationGate(receipts, clock), receipts, clock


def test_windows_per_kind() -> None:
    assert dedup_window(NotificationKind.REMINDER) == REMINDER_WINDOW
    for kind in NotificationKind:
        if kind != NotificationKind.REMINDER:
            assert dedup_window(kind) == DEFAULT_WINDOW


async def test_first_reservation_succeeds_then_suppresses(gate_parts) -> None:
    gate, receipts, _ = gate_parts
    first = await gate.try_reserve("a@example.com", "d1", NotificationKind.APPROVAL_REQUEST, "tok")
    second = await gate.try_reserve("a@example.com", "d1", NotificationKind.APPROVAL_REQUEST, "tok")

    assert first.already is False
    assert second.already is True
    assert len(receipts.rows) == 1


async def test_recipient_is_normalized(gate_parts) -> None:
    gate, _, _ = gate_parts
    await gate.try_reserve("A@Example.com ", "d1", NotificationKind.REJECTION)
    again = await gate.try_reserve("a@example.com", "d1", NotificationKind.REJECTION)
    assert again.already is True


async def test_key_includes_document_kind_and_token(gate_parts) -> None:
    gate, _, _ = gate_parts
    kind = NotificationKind.APPROVAL_REQUEST
    assert not (await gate.try_reserve("a@example.com", "d1", kind, "t1")).already
    assert not (await gate.try_reserve("a@example.com", "d1", kind, "t2")).already
    assert not (await gate.try_reserve("a@example.com", "d2", kind, "t1")).already
    assert not (
        await gate.try_reserve("a@example.com", "d1", NotificationKind.NEW_VERSION, "t1")
    ).already


async def test_window_expiry_allows_resend_and_replaces_receipt(gate_parts) -> None:
    gate, receipts, clock = gate_parts
    kind = NotificationKind.APPROVAL_COMPLETE
    await gate.try_reserve("a@example.com", "d1", kind)

    clock.advance(minutes=4, seconds=59)
    assert (await gate.try_reserve("a@example.com", "d1", kind)).already is True

    clock.advance(seconds=2)
    assert (await gate.try_reserve("a@example.com", "d1", kind)).already is False
    assert len(receipts.rows) == 1
    assert receipts.rows[0][1] == clock.now


async def test_reminder_window_is_one_minute(gate_parts) -> None:
    gate, _, clock = gate_parts
    kind = NotificationKind.REMINDER
    await gate.try_reserve("a@example.com", "d1", kind, "tok")
    clock.advance(seconds=30)
    assert (await gate.try_reserve("a@example.com", "d1", kind, "tok")).already is True
    clock.advance(seconds=31)
    assert (await gate.try_reserve("a@example.com", "d1", kind, "tok")).already is False


async def test_lost_insert_race_counts_as_reserved(gate_parts) -> None:
    gate, receipts, _ = gate_parts
    receipts.fail_inserts = True
    result = await gate.try_reserve("a@example.com", "d1", NotificationKind.EXPIRATION)
    assert result.already is True


async def test_empty_recipient_rejected(gate_parts) -> None:
    gate, _, _ = gate_parts
    with pytest.raises(ValidationException):
        await gate.try_reserve("  ", "d1", NotificationKind.REMINDER)
