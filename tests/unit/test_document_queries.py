"""Read side: my documents, pending for me, token view, visibility, download."""

import pytest

from signflow.domain.exceptions import AuthorizationException, ResourceNotFoundException
from signflow.domain.value_objects import Individual
from signflow.shared.enums import AuditAction
from workbench import (
    ADMIN,
    ALICE,
    BOARD_LOGIN,
    BOB,
    CREATOR,
    GINA,
    PDF,
    STRANGER,
    group,
    individual,
)


async def test_list_mine_newest_first_with_progress(bench) -> None:
    older = await bench.create([individual(ALICE), individual(BOB)], display_name="Older")
    newer = await bench.create([individual(ALICE)], display_name="Newer")
    await bench.signing.sign(bench.slot_for(older, Individual(ALICE.user_id)).token, ALICE)

    summaries = await bench.queries.list_mine(CREATOR)

    assert [s.document.id for s in summaries] == [newer.document.id, older.document.id]
    assert (summaries[1].total_slots, summaries[1].approved_slots) == (2, 1)
    assert await bench.queries.list_mine(ALICE) == []


async def test_pending_for_caller_includes_group_slots(bench) -> None:
    direct = await bench.create([individual(GINA)])
    via_group = await bench.create([group()])
    other = await bench.create([individual(BOB)])

    items = await bench.queries.list_pending_for_caller(GINA)

    assert {i.document.id for i in items} == {direct.document.id, via_group.document.id}
    assert other.document.id not in {i.document.id for i in items}
    assert items[0].document.id == via_group.document.id
    assert all(i.slot.token for i in items)


async def test_pending_for_caller_excludes_closed_documents(bench) -> None:
    detail = await bench.create([individual(ALICE), individual(BOB)])
    await bench.signing.reject(bench.slot_for(detail, Individual(BOB.user_id)).token, BOB, "No")
    assert await bench.queries.list_pending_for_caller(ALICE) == []


async def test_pending_for_alias_login(bench) -> None:
    detail = await bench.create([group()])
    items = await bench.queries.list_pending_for_caller(BOARD_LOGIN)
    assert [i.slot.id for i in items] == [detail.slots[0].id]


async def test_token_view(bench) -> None:
    detail = await bench.create([individual(ALICE), individual(BOB)])
    token = bench.slot_for(detail, Individual(ALICE.user_id)).token

    view = await bench.queries.get_by_token(token, ALICE)

    assert view.slot.token == token
    assert view.document.id == detail.document.id
    assert len(view.slots) == 2
    with pytest.raises(AuthorizationException):
        await bench.queries.get_by_token(token, BOB)
    with pytest.raises(ResourceNotFoundException):
        await bench.queries.get_by_token("nope", ALICE)


@pytest.mark.parametrize("caller", [CREATOR, ADMIN, ALICE])
async def test_document_visible_to_participants(bench, caller) -> None:
    detail = await bench.create([individual(ALICE)])
    got = await bench.queries.get_document(detail.document.id, caller)
    assert got.document.id == detail.document.id


async def test_document_hidden_from_strangers(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    with pytest.raises(AuthorizationException):
        await bench.queries.get_document(detail.document.id, STRANGER)
    with pytest.raises(ResourceNotFoundException):
        await bench.queries.get_document("missing", CREATOR)


async def test_list_signatures(bench) -> None:
    detail = await bench.create([individual(ALICE), individual(BOB)])
    await bench.signing.sign(bench.slot_for(detail, Individual(BOB.user_id)).token, BOB)
    (signature,) = await bench.queries.list_signatures(detail.document.id, CREATOR)
    assert signature.signer_name == BOB.display_name


async def test_download_returns_working_copy_and_audits(bench) -> None:
    detail = await bench.create([individual(ALICE)])
    await bench.signing.sign(detail.slots[0].token, ALICE)

    result = await bench.queries.download(detail.document.id, CREATOR, ip_address="10.1.1.1")

    assert result.filename == "purchase-order.pdf"
    assert result.content == PDF + b"|ALICE APPROVER@2"
    assert bench.audit.actions(detail.document.id)[-1] == AuditAction.DOWNLOAD
