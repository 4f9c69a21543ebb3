"""Document lifecycle: create, new version, resend, edit, delete (in-memory fakes)."""

from dataclasses import replace
from datetime import timedelta

import pytest

from signflow.application.dtos.document import ApproverSpec, DocumentUpdate
from signflow.application.services.document_files import original_ref_for
from signflow.domain.enums import DocumentState, SlotState
from signflow.domain.exceptions import (
    AuthorizationException,
    ConflictException,
    ExternalDependencyException,
    ResourceNotFoundException,
    ValidationException,
)
from signflow.domain.value_objects import GroupPlaceholder, Individual, StampBox
from signflow.shared.enums import AuditAction
from workbench import (
    ADMIN,
    ALICE,
    BOARD,
    BOB,
    CREATOR,
    DEFAULT_BOX,
    PDF,
    STRANGER,
    group,
    individual,
)


async def _reject(bench, detail, caller=ALICE, reason="Wrong totals"):
    slot = bench.slot_for(detail, Individual(caller.user_id))
    return await bench.signing.reject(slot.token, caller, reason)


async def test_create_document_persists_slots_files_and_notifies(bench) -> None:
    detail = await bench.create([individual(ALICE), group()], limit_hours=48)
    document = detail.document

    assert document.state == DocumentState.PENDING
    assert document.version == 1
    assert document.parent_id is None
    assert document.root_id == document.id
    assert document.creator_id == CREATOR.user_id
    assert document.deadline_at == bench.clock.now + timedelta(hours=48)
    assert [s.ordinal for s in detail.slots] == [1, 2]
    assert all(s.state == SlotState.PENDING for s in detail.slots)
    assert all(s.box == DEFAULT_BOX for s in detail.slots)
    assert len({s.token for s in detail.slots}) == 2
    assert bench.storage.files[document.storage_ref] == PDF
    assert bench.storage.files[original_ref_for(document.storage_ref)] == PDF
    assert sorted(bench.mail.recipients()) == sorted([ALICE.email, BOARD])
    assert AuditAction.UPLOAD in bench.audit.actions(document.id)


async def test_create_document_links_each_approver_to_own_token(bench) -> None:
    detail = await bench.create([individual(ALICE), individual(BOB)])
    for slot in detail.slots:
        (_, _, body) = bench.mail.to(slot.email)[0]
        assert f"/approve/{slot.token}" in body


async def test_create_document_defaults_display_name_to_filename(bench) -> None:
    detail = await bench.create([individual(ALICE)], display_name="  ")
    assert detail.document.display_name == "purchase-order.pdf"


async def test_create_document_keeps_explicit_box(bench) -> None:
    box = StampBox(page=1, x=300, y=40, width=120, height=50)
    detail = await bench.create([individual(ALICE, box=box)])
    assert detail.slots[0].box == box


@pytest.mark.parametrize(
    "approvers, field",
    [
        ([], "approvers"),
        ([individual(ALICE), individual(ALICE)], "approvers"),
        ([group("unknown@example.com")], "approvers"),
        (
            [ApproverSpec(identity=Individual(2), display_name="No Mail", email=None)],
            "approvers",
        ),
        ([ApproverSpec(identity=Individual(2), display_name=" ", email="a@x.org")], "approvers"),
        ([individual(ALICE, box=StampBox(page=5, x=0, y=0, width=10, height=10))], "approvers"),
    ],
)
async def test_create_document_rejects_bad_approvers(bench, approvers, field) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await bench.create(approvers)
    assert exc_info.value.details.get("field") == field
    assert bench.documents.rows == {}
    assert bench.mail.sent == []


@pytest.mark.parametrize("content", [None, b"", b"GIF89a not a pdf"])
async def test_create_document_rejects_bad_upload(bench, content) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await bench.workflow.create_document(
            CREATOR, content=content, filename="x.pdf", approvers=[individual(ALICE)]
        )
    assert exc_info.value.details == {"field": "file"}
    assert bench.storage.files == {}


async def test_create_document_rejects_unreadable_pdf(bench) -> None:
    def broken(_content):
        raise ExternalDependencyException("bad xref", "STAMP_RENDER_ERROR")

    bench.stamper.page_count = broken
    with pytest.raises(ValidationException):
        await bench.create([individual(ALICE)])


async def test_create_document_rejects_non_positive_limit(bench) -> None:
    with pytest.raises(ValidationException):
        await bench.create([individual(ALICE)], limit_hours=0)
    with pytest.raises(ValidationException):
        await bench.create([individual(ALICE)], reminder_interval_minutes=-5)


async def test_create_document_requires_upload_permission(bench) -> None:
    with pytest.raises(AuthorizationException):
        await bench.create([individual(ALICE)], caller=replace(CREATOR, can_upload=False))

    assert bench.storage.files == {}
    assert bench.mail.sent == []


async def test_new_version_requires_upload_permission(bench) -> None:
    first = await bench.create([individual(ALICE)])
    await _reject(bench, first)
    bench.mail.sent.clear()

    with pytest.raises(AuthorizationException):
        await bench.workflow.new_version(
            first.document.id,
            replace(CREATOR, can_upload=False),
            content=PDF,
            filename="v2.pdf",
            keep_previous_set=True,
        )
    assert bench.mail.sent == []


async def test_new_version_extends_lineage(bench) -> None:
    first = await bench.create([individual(ALICE), individual(BOB)], limit_hours=24)
    await _reject(bench, first)

    bench.clock.advance(hours=1)
    second = await bench.workflow.new_version(
        first.document.id,
        CREATOR,
        content=PDF,
        filename="purchase-order-v2.pdf",
        keep_previous_set=True,
    )
    doc = second.document

    assert doc.version == 2
    assert doc.parent_id == first.document.id
    assert doc.root_id == first.document.root_id
    assert doc.state == DocumentState.PENDING
    assert doc.deadline_at == bench.clock.now + timedelta(hours=24)
    assert [s.identity for s in second.slots] == [s.identity for s in first.slots]
    assert all(s.state == SlotState.PENDING for s in second.slots)
    assert not {s.token for s in second.slots} & {s.token for s in first.slots}
    assert AuditAction.NEW_VERSION in bench.audit.actions(doc.id)

    history = await bench.queries.get_history(doc.id, CREATOR)
    assert [v.document.version for v in history.versions] == [1, 2]


async def test_new_version_skips_approvers_who_already_approved(bench) -> None:
    first = await bench.create([individual(ALICE), individual(BOB)])
    alice_slot = bench.slot_for(first, Individual(ALICE.user_id))
    await bench.signing.sign(alice_slot.token, ALICE)
    await _reject(bench, first, caller=BOB)
    bench.mail.sent.clear()

    await bench.workflow.new_version(
        first.document.id, CREATOR, content=PDF, filename="v2.pdf", keep_previous_set=True
    )

    assert bench.mail.recipients() == [BOB.email]
    (_, subject, _) = bench.mail.sent[0]
    assert "v2" in subject


async def test_new_version_with_new_approver_set(bench) -> None:
    first = await bench.create([individual(ALICE)])
    await _reject(bench, first)

    second = await bench.workflow.new_version(
        first.document.id,
        CREATOR,
        content=PDF,
        filename="v2.pdf",
        keep_previous_set=False,
        approvers=[individual(BOB), group()],
    )
    assert [s.identity for s in second.slots] == [Individual(BOB.user_id), GroupPlaceholder(BOARD)]


async def test_new_version_requires_rejected_state(bench) -> None:
    first = await bench.create([individual(ALICE)])
    with pytest.raises(ConflictException) as exc_info:
        await bench.workflow.new_version(
            first.document.id, CREATOR, content=PDF, filename="v2.pdf", keep_previous_set=True
        )
    assert exc_info.value.details == {"current_state": "pending"}


async def test_new_version_only_once_per_parent(bench) -> None:
    first = await bench.create([individual(ALICE)])
    await _reject(bench, first)
    await bench.workflow.new_version(
        first.document.id, CREATOR, content=PDF, filename="v2.pdf", keep_previous_set=True
    )
    with pytest.raises(ConflictException):
        await bench.workflow.new_version(
            first.document.id, CREATOR, content=PDF, filename="v2.pdf", keep_previous_set=True
        )


@pytest.mark.parametrize("caller", [ALICE, ADMIN])
async def test_new_version_only_by_creator(bench, caller) -> None:
    first = await bench.create([individual(ALICE)])
    await _reject(bench, first)
    with pytest.raises(AuthorizationException):
        await bench.workflow.new_version(
            first.document.id, caller, content=PDF, filename="v2.pdf", keep_previous_set=True
        )


async def test_new_version_unknown_document(bench) -> None:
    with pytest.raises(ResourceNotFoundException):
        await bench.workflow.new_version(
            "missing", CREATOR, content=PDF, filename="v2.pdf", keep_previous_set=True
        )


async def test_resend_reopens_expired_document(bench) -> None:
    detail = await bench.create([individual(ALICE), individual(BOB)], limit_hours=2)
    alice_slot = bench.slot_for(detail, Individual(ALICE.user_id))
    await bench.signing.sign(alice_slot.token, ALICE)
    bench.clock.advance(hours=3)
    await bench.expirations.run()
    bench.clock.advance(minutes=10)
    bench.mail.sent.clear()

    resent = await bench.workflow.resend(detail.document.id, CREATOR)

    assert resent.document.state == DocumentState.PENDING
    assert resent.document.deadline_at == bench.clock.now + timedelta(hours=2)
    assert resent.document.last_reminder_at is None
    states = {s.identity: s.state for s in resent.slots}
    assert states[Individual(ALICE.user_id)] == SlotState.APPROVED
    assert states[Individual(BOB.user_id)] == SlotState.PENDING
    assert bench.mail.recipients() == [BOB.email]
    assert AuditAction.RESEND in bench.audit.actions(detail.document.id)


async def test_resend_requires_expired(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    with pytest.raises(ConflictException):
        await bench.workflow.resend(detail.document.id, CREATOR)


async def test_resend_by_stranger_forbidden(bench) -> None:
    detail = await bench.create([individual(ALICE)], limit_hours=1)
    bench.clock.advance(hours=2)
    await bench.expirations.run()
    with pytest.raises(AuthorizationException):
        await bench.workflow.resend(detail.document.id, STRANGER)


async def test_edit_updates_fields_and_restarts_deadline(bench) -> None:
    detail = await bench.create([individual(ALICE)], limit_hours=24)
    bench.clock.advance(hours=5)

    updated = await bench.workflow.edit(
        detail.document.id,
        ADMIN,
        DocumentUpdate(display_name="PO 2025-17", limit_hours=72),
    )

    assert updated.display_name == "PO 2025-17"
    assert updated.limit_hours == 72
    assert updated.deadline_at == bench.clock.now + timedelta(hours=72)
    assert AuditAction.EDIT in bench.audit.actions(detail.document.id)


async def test_edit_without_limit_keeps_deadline(bench) -> None:
    detail = await bench.create([individual(ALICE)], limit_hours=24)
    updated = await bench.workflow.edit(
        detail.document.id, CREATOR, DocumentUpdate(description="Q1 order")
    )
    assert updated.deadline_at == detail.document.deadline_at
    assert updated.description == "Q1 order"


async def test_edit_rejects_blank_name_and_strangers(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    with pytest.raises(ValidationException):
        await bench.workflow.edit(detail.document.id, CREATOR, DocumentUpdate(display_name=" "))
    with pytest.raises(AuthorizationException):
        await bench.workflow.edit(detail.document.id, ALICE, DocumentUpdate(description="x"))


async def test_delete_removes_rows_files_and_audits(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    slot = detail.slots[0]
    await bench.signing.sign(slot.token, ALICE)
    doc_id = detail.document.id

    await bench.workflow.delete(doc_id, CREATOR)

    assert doc_id not in bench.documents.rows
    assert await bench.slots.list_by_document(doc_id) == []
    assert await bench.signatures.list_by_document(doc_id) == []
    assert bench.storage.files == {}
    assert bench.audit.actions(doc_id)[-1] == AuditAction.DELETE


async def test_delete_by_non_owner_forbidden(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    with pytest.raises(AuthorizationException):
        await bench.workflow.delete(detail.document.id, ALICE)
    assert detail.document.id in bench.documents.rows
