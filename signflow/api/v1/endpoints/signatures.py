"""Signing API: approve or reject a slot by its token."""

from typing import Annotated

from fastapi import APIRouter, Depends

from signflow.api.v1.dependencies import (
    get_client_ip,
    get_current_caller,
    get_signing_service,
)
from signflow.application.use_cases.workflow import SigningService
from signflow.domain.value_objects import CallerIdentity
from signflow.schemas.document import (
    RejectRequest,
    RejectResponse,
    SignRequest,
    SignResponse,
)

router = APIRouter()


@router.post("/sign", response_model=SignResponse)
async def sign(
    body: SignRequest,
    caller: Annotated[CallerIdentity, Depends(get_current_caller)],
    ip: Annotated[str | None, Depends(get_client_ip)],
    svc: Annotated[SigningService, Depends(get_signing_service)],
):
    """Approve the slot; group slots need member_id."""
    outcome = await svc.sign(
        body.token, caller, member_id=body.member_id, ip_address=ip
    )
    return SignResponse(
        document_id=outcome.document_id,
        slot_id=outcome.slot_id,
        document_state=outcome.document_state.value,
        completed=outcome.completed,
    )


@router.post("/reject", response_model=RejectResponse)
async def reject(
    body: RejectRequest,
    caller: Annotated[CallerIdentity, Depends(get_current_caller)],
    ip: Annotated[str | None, Depends(get_client_ip)],
    svc: Annotated[SigningService, Depends(get_signing_service)],
):
    """Reject the slot; the whole document is rejected with it."""
    outcome = await svc.reject(body.token, caller, body.reason, ip_address=ip)
    return RejectResponse(
        document_id=outcome.document_id,
        slot_id=outcome.slot_id,
        rejected_slots=outcome.rejected_slots,
        notified=outcome.notified,
    )
