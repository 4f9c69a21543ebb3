"""Sign and reject routes."""

from httpx import AsyncClient

from signflow.application.dtos.document import RejectOutcome, SignOutcome
from signflow.domain.enums import DocumentState
from signflow.domain.exceptions import ConflictException, ResourceNotFoundException


async def test_sign_returns_outcome(client: AsyncClient, signing_svc, bearer) -> None:
    signing_svc.sign.return_value = SignOutcome(
        document_id="doc-1",
        slot_id="slot-2",
        document_state=DocumentState.APPROVED,
        completed=True,
    )
    response = await client.post(
        "/api/v1/signatures/sign",
        headers=bearer(4, "gina@example.com", "Gina Member"),
        json={"token": "tok-board", "member_id": "m-gina"},
    )
    assert response.status_code == 200
    assert response.json() == {
        "document_id": "doc-1",
        "slot_id": "slot-2",
        "document_state": "approved",
        "completed": True,
    }
    call = signing_svc.sign.await_args
    assert call.args[0] == "tok-board"
    assert call.args[1].user_id == 4
    assert call.kwargs["member_id"] == "m-gina"


async def test_sign_already_signed_is_conflict(
    client: AsyncClient, signing_svc, user_headers
) -> None:
    signing_svc.sign.side_effect = ConflictException(
        "This slot has already been signed", current_state="approved"
    )
    response = await client.post(
        "/api/v1/signatures/sign", headers=user_headers, json={"token": "tok-alice"}
    )
    assert response.status_code == 409
    assert response.json()["error"] == "CONFLICT"


async def test_sign_unknown_token_is_404(
    client: AsyncClient, signing_svc, user_headers
) -> None:
    signing_svc.sign.side_effect = ResourceNotFoundException("slot")
    response = await client.post(
        "/api/v1/signatures/sign", headers=user_headers, json={"token": "nope"}
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Slot not found"


async def test_reject_requires_reason(
    client: AsyncClient, signing_svc, user_headers
) -> None:
    response = await client.post(
        "/api/v1/signatures/reject", headers=user_headers, json={"token": "tok-alice"}
    )
    assert response.status_code == 422
    signing_svc.reject.assert_not_awaited()


async def test_reject_returns_outcome(
    client: AsyncClient, signing_svc, user_headers
) -> None:
    signing_svc.reject.return_value = RejectOutcome(
        document_id="doc-1",
        slot_id="slot-1",
        rejected_slots=2,
        notified=["alice@example.com", "creator@example.com"],
    )
    response = await client.post(
        "/api/v1/signatures/reject",
        headers=user_headers,
        json={"token": "tok-alice", "reason": "Wrong amount"},
    )
    assert response.status_code == 200
    assert response.json()["rejected_slots"] == 2
    assert signing_svc.reject.await_args.args[2] == "Wrong amount"
