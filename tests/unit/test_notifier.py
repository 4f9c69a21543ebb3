"""WorkflowNotifier: gate first, then render and send; failures stay local."""

from unittest.mock import AsyncMock

from signflow.shared.enums import AuditAction, NotificationKind
from workbench import ALICE, BOB, CREATOR, OVERSIGHT, build_workbench, individual


async def test_duplicate_trigger_sends_once(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    bench.mail.sent.clear()

    first = await bench.notifier.notify(
        NotificationKind.REMINDER, ALICE.email, "Alice", detail.document, token="t"
    )
    second = await bench.notifier.notify(
        NotificationKind.REMINDER, ALICE.email.upper(), "Alice", detail.document, token="t"
    )

    assert (first, second) == (True, False)
    assert len(bench.mail.sent) == 1


async def test_missing_recipient_is_skipped(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    assert await bench.notifier.notify(
        NotificationKind.REJECTION, None, "Nobody", detail.document
    ) is False


async def test_oversight_bypasses_gate(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    for _ in range(2):
        assert await bench.notifier.notify_oversight(
            NotificationKind.REJECTION, detail.document, extra={"reason": "x", "rejector_name": "A"}
        )
    assert bench.mail.recipients().count(OVERSIGHT) == 2


async def test_transport_exception_is_contained(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    bench.mail.send = AsyncMock(side_effect=ConnectionError("down"))
    before = bench.audit.actions().count(AuditAction.NOTIFICATION)

    sent = await bench.notifier.notify(
        NotificationKind.APPROVAL_COMPLETE, "creator@example.com", "Carla", detail.document
    )

    assert sent is False
    assert bench.audit.actions().count(AuditAction.NOTIFICATION) == before


async def test_successful_send_is_audited(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    notes = [
        e for e in bench.audit.entries
        if e.action == AuditAction.NOTIFICATION and e.document_id == detail.document.id
    ]
    assert len(notes) == 1
    assert ALICE.email in notes[0].description


async def test_outbox_holds_mail_until_delivered() -> None:
    bench = build_workbench(deferred_mail=True)
    detail = await bench.create([individual(ALICE), individual(BOB)])

    assert bench.mail.sent == []
    assert len(bench.outbox) == 2
    notes = [
        e.description for e in bench.audit.entries
        if e.action == AuditAction.NOTIFICATION and e.document_id == detail.document.id
    ]
    assert len(notes) == 2
    assert all("queued for" in note for note in notes)

    assert await bench.outbox.deliver() == 2
    assert sorted(bench.mail.recipients()) == sorted([ALICE.email, BOB.email])
    assert len(bench.outbox) == 0


async def test_discarded_outbox_sends_nothing() -> None:
    bench = build_workbench(deferred_mail=True)
    await bench.create([individual(ALICE)])

    assert bench.outbox.discard() == 1
    assert await bench.outbox.deliver() == 0
    assert bench.mail.sent == []


async def test_outbox_delivery_failure_is_contained() -> None:
    bench = build_workbench(deferred_mail=True)
    await bench.create([individual(ALICE), individual(BOB)])
    bench.mail.fail_for.add(ALICE.email)

    assert await bench.outbox.deliver() == 1
    assert bench.mail.recipients() == [BOB.email]


async def test_last_signature_mail_waits_for_commit() -> None:
    bench = build_workbench(deferred_mail=True)
    detail = await bench.create([individual(ALICE)])
    bench.outbox.discard()

    await bench.signing.sign(detail.slots[0].token, ALICE)

    assert bench.mail.sent == []
    await bench.outbox.deliver()
    assert CREATOR.email in bench.mail.recipients()
