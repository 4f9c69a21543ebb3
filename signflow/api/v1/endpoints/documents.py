"""Document API: thin routes delegating to the workflow, signing and query services."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from pydantic import TypeAdapter, ValidationError

from signflow.api.v1.dependencies import (
    get_client_ip,
    get_current_caller,
    get_query_service,
    get_query_service_for_write,
    get_signing_service,
    get_workflow_service,
)
from signflow.application.dtos.document import ApproverSpec, DocumentUpdate
from signflow.application.use_cases.workflow import (
    DocumentQueryService,
    DocumentWorkflowService,
    SigningService,
)
from signflow.domain.exceptions import ValidationException
from signflow.domain.value_objects import CallerIdentity
from signflow.schemas.document import (
    ApproverIn,
    DocumentDetailResponse,
    DocumentPatch,
    DocumentResponse,
    DocumentSummaryResponse,
    PendingItemResponse,
    PositionsRequest,
    SignatureResponse,
    SlotResponse,
    TokenViewResponse,
    VersionHistoryResponse,
)

router = APIRouter()

_approvers_adapter = TypeAdapter(list[ApproverIn])

Caller = Annotated[CallerIdentity, Depends(get_current_caller)]
ClientIp = Annotated[str | None, Depends(get_client_ip)]


def _parse_approvers(raw: str | None) -> list[ApproverSpec]:
    """Approvers arrive as a JSON array in a multipart form field."""
    if raw is None or not raw.strip():
        return []
    try:
        approvers = _approvers_adapter.validate_json(raw)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        raise ValidationException(
            f"Invalid approvers: {first.get('msg', 'malformed JSON')}", field="approvers"
        ) from e
    try:
        return [a.to_spec() for a in approvers]
    except ValueError as e:
        raise ValidationException(f"Invalid approvers: {e}", field="approvers") from e


async def _read_upload(file: UploadFile | None) -> tuple[bytes | None, str]:
    if file is None:
        return None, ""
    return await file.read(), file.filename or "document.pdf"


@router.post("", response_model=DocumentDetailResponse, status_code=201)
async def create_document(
    caller: Caller,
    ip: ClientIp,
    svc: Annotated[DocumentWorkflowService, Depends(get_workflow_service)],
    file: UploadFile | None = File(None),
    approvers: str = Form(..., description="JSON array of approvers"),
    display_name: str | None = Form(None),
    document_type: str | None = Form(None),
    description: str | None = Form(None),
    limit_hours: int | None = Form(None),
    reminder_interval_minutes: int | None = Form(None),
):
    """Upload a PDF with its approvers; every approver is notified."""
    content, filename = await _read_upload(file)
    detail = await svc.create_document(
        caller,
        content=content,
        filename=filename,
        approvers=_parse_approvers(approvers),
        display_name=display_name,
        document_type=document_type,
        description=description,
        limit_hours=limit_hours,
        reminder_interval_minutes=reminder_interval_minutes,
        ip_address=ip,
    )
    return DocumentDetailResponse.from_result(detail)


@router.get("/mine", response_model=list[DocumentSummaryResponse])
async def list_my_documents(
    caller: Caller,
    svc: Annotated[DocumentQueryService, Depends(get_query_service)],
):
    """Documents the caller created, newest first, with approval progress."""
    return [DocumentSummaryResponse.from_result(s) for s in await svc.list_mine(caller)]


@router.get("/pending", response_model=list[PendingItemResponse])
async def list_pending_for_me(
    caller: Caller,
    svc: Annotated[DocumentQueryService, Depends(get_query_service)],
):
    """Pending slots the caller can act on, directly or through a signer group."""
    items = await svc.list_pending_for_caller(caller)
    return [PendingItemResponse.from_result(i) for i in items]


@router.get("/token/{token}", response_model=TokenViewResponse)
async def get_by_token(
    token: str,
    caller: Caller,
    svc: Annotated[DocumentQueryService, Depends(get_query_service)],
):
    """Open a slot by its signing token."""
    return TokenViewResponse.from_result(await svc.get_by_token(token, caller))


@router.get("/{document_id}", response_model=DocumentDetailResponse)
async def get_document(
    document_id: str,
    caller: Caller,
    svc: Annotated[DocumentQueryService, Depends(get_query_service)],
):
    return DocumentDetailResponse.from_result(await svc.get_document(document_id, caller))


@router.patch("/{document_id}", response_model=DocumentResponse)
async def edit_document(
    document_id: str,
    body: DocumentPatch,
    caller: Caller,
    ip: ClientIp,
    svc: Annotated[DocumentWorkflowService, Depends(get_workflow_service)],
):
    """Edit descriptive fields (creator or admin)."""
    updated = await svc.edit(
        document_id,
        caller,
        DocumentUpdate(**body.model_dump(exclude_unset=True)),
        ip_address=ip,
    )
    return DocumentResponse.from_result(updated)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    caller: Caller,
    ip: ClientIp,
    svc: Annotated[DocumentWorkflowService, Depends(get_workflow_service)],
) -> Response:
    """Delete a document with its slots, signatures and files (creator or admin)."""
    await svc.delete(document_id, caller, ip_address=ip)
    return Response(status_code=204)


@router.get("/{document_id}/history", response_model=VersionHistoryResponse)
async def get_history(
    document_id: str,
    caller: Caller,
    svc: Annotated[DocumentQueryService, Depends(get_query_service)],
):
    """Every version in the document's lineage, oldest first."""
    return VersionHistoryResponse.from_result(await svc.get_history(document_id, caller))


@router.get("/{document_id}/slots", response_model=list[SlotResponse])
async def list_slots(
    document_id: str,
    caller: Caller,
    svc: Annotated[DocumentQueryService, Depends(get_query_service)],
):
    detail = await svc.get_document(document_id, caller)
    return [SlotResponse.from_result(s) for s in detail.slots]


@router.get("/{document_id}/signatures", response_model=list[SignatureResponse])
async def list_signatures(
    document_id: str,
    caller: Caller,
    svc: Annotated[DocumentQueryService, Depends(get_query_service)],
):
    sigs = await svc.list_signatures(document_id, caller)
    return [SignatureResponse.from_result(s) for s in sigs]


@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    caller: Caller,
    ip: ClientIp,
    svc: Annotated[DocumentQueryService, Depends(get_query_service_for_write)],
) -> Response:
    """Working PDF with every stamp applied so far."""
    result = await svc.download(document_id, caller, ip_address=ip)
    return Response(
        content=result.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.post(
    "/{document_id}/versions", response_model=DocumentDetailResponse, status_code=201
)
async def upload_new_version(
    document_id: str,
    caller: Caller,
    ip: ClientIp,
    svc: Annotated[DocumentWorkflowService, Depends(get_workflow_service)],
    file: UploadFile | None = File(None),
    keep_previous_set: bool = Form(True),
    approvers: str | None = Form(None, description="JSON array; required when keep_previous_set is false"),
):
    """Upload a corrected version of a rejected document."""
    content, filename = await _read_upload(file)
    detail = await svc.new_version(
        document_id,
        caller,
        content=content,
        filename=filename,
        keep_previous_set=keep_previous_set,
        approvers=None if keep_previous_set else _parse_approvers(approvers),
        ip_address=ip,
    )
    return DocumentDetailResponse.from_result(detail)


@router.put("/{document_id}/positions", response_model=list[SlotResponse])
async def reposition_stamps(
    document_id: str,
    body: PositionsRequest,
    caller: Caller,
    ip: ClientIp,
    svc: Annotated[SigningService, Depends(get_signing_service)],
):
    """Move stamp boxes and re-render existing signatures (admin only)."""
    slots = await svc.reposition_and_reapply(
        document_id,
        caller,
        {slot_id: box.to_box() for slot_id, box in body.positions.items()},
        ip_address=ip,
    )
    return [SlotResponse.from_result(s) for s in slots]


@router.post("/{document_id}/resend", response_model=DocumentDetailResponse)
async def resend_document(
    document_id: str,
    caller: Caller,
    ip: ClientIp,
    svc: Annotated[DocumentWorkflowService, Depends(get_workflow_service)],
):
    """Reopen an expired document and notify pending approvers again."""
    detail = await svc.resend(document_id, caller, ip_address=ip)
    return DocumentDetailResponse.from_result(detail)
