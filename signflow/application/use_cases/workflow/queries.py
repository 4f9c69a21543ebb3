"""Read side of the workflow: lists, token view, history, download."""

from __future__ import annotations

from typing import TYPE_CHECKING

from signflow.application.dtos.document import (
    DocumentDetail,
    DocumentResult,
    DocumentSummary,
    DownloadResult,
    PendingItem,
    SignatureResult,
    SlotResult,
    TokenView,
    VersionHistory,
)
from signflow.domain.enums import DocumentState
from signflow.domain.exceptions import AuthorizationException, ResourceNotFoundException
from signflow.domain.value_objects import CallerIdentity
from signflow.shared.enums import AuditAction

if TYPE_CHECKING:
    from signflow.application.interfaces.repositories import (
        IApproverSlotRepository,
        IAuditTrail,
        IDocumentRepository,
        ISignatureRepository,
    )
    from signflow.application.interfaces.services import IDocumentStorage
    from signflow.application.services.delegation_resolver import DelegationResolver


class DocumentQueryService:
    """Query documents the caller created, must act on, or participates in."""

    def __init__(
        self,
        document_repo: IDocumentRepository,
        slot_repo: IApproverSlotRepository,
        signature_repo: ISignatureRepository,
        resolver: DelegationResolver,
        storage: IDocumentStorage,
        audit: IAuditTrail,
        *,
        signer_groups: frozenset[str],
    ) -> None:
        self._documents = document_repo
        self._slots = slot_repo
        self._signatures = signature_repo
        self._resolver = resolver
        self._storage = storage
        self._audit = audit
        self._signer_groups = signer_groups

    async def _visible(
        self, document_id: str, caller: CallerIdentity
    ) -> tuple[DocumentResult, list[SlotResult]]:
        """Load a document the caller may see (creator, admin, or any slot they can act on)."""
        document = await self._documents.get_by_id(document_id)
        if document is None:
            raise ResourceNotFoundException("document", document_id)
        slots = await self._slots.list_by_document(document.id)
        if caller.is_admin or document.creator_id == caller.user_id:
            return document, slots
        for slot in slots:
            if await self._resolver.can_act(slot, caller):
                return document, slots
        raise AuthorizationException()

    async def list_mine(self, caller: CallerIdentity) -> list[DocumentSummary]:
        return await self._documents.list_by_creator(caller.user_id)

    async def list_pending_for_caller(self, caller: CallerIdentity) -> list[PendingItem]:
        """Pending slots on pending documents the caller can sign, newest document first."""
        slots = await self._slots.list_pending_for_user(caller.user_id)
        groups = await self._resolver.groups_for(caller, sorted(self._signer_groups))
        if groups:
            slots += await self._slots.list_pending_for_groups(groups)
        items: list[PendingItem] = []
        documents: dict[str, DocumentResult | None] = {}
        for slot in slots:
            if slot.document_id not in documents:
                documents[slot.document_id] = await self._documents.get_by_id(
                    slot.document_id
                )
            document = documents[slot.document_id]
            if document is None or document.state != DocumentState.PENDING:
                continue
            items.append(PendingItem(document=document, slot=slot))
        items.sort(
            key=lambda i: (i.document.created_at is not None, i.document.created_at),
            reverse=True,
        )
        return items

    async def get_by_token(self, token: str, caller: CallerIdentity) -> TokenView:
        """Open a slot by its token; only someone who can act on it may view it."""
        slot = await self._slots.get_by_token(token)
        if slot is None:
            raise ResourceNotFoundException("slot")
        if not await self._resolver.can_act(slot, caller):
            raise AuthorizationException()
        document = await self._documents.get_by_id(slot.document_id)
        if document is None:
            raise ResourceNotFoundException("slot")
        slots = await self._slots.list_by_document(document.id)
        return TokenView(document=document, slot=slot, slots=slots)

    async def get_document(self, document_id: str, caller: CallerIdentity) -> DocumentDetail:
        document, slots = await self._visible(document_id, caller)
        return DocumentDetail(document=document, slots=slots)

    async def get_history(self, document_id: str, caller: CallerIdentity) -> VersionHistory:
        """All versions in the document's lineage, oldest first."""
        document, _ = await self._visible(document_id, caller)
        versions = await self._documents.list_lineage(document.root_id)
        return VersionHistory(root_id=document.root_id, versions=versions)

    async def list_signatures(
        self, document_id: str, caller: CallerIdentity
    ) -> list[SignatureResult]:
        document, _ = await self._visible(document_id, caller)
        return await self._signatures.list_by_document(document.id)

    async def download(
        self,
        document_id: str,
        caller: CallerIdentity,
        *,
        ip_address: str | None = None,
    ) -> DownloadResult:
        """Working PDF (with all stamps applied so far)."""
        document, _ = await self._visible(document_id, caller)
        content = await self._storage.read(document.storage_ref)
        await self._audit.record(
            document.id,
            AuditAction.DOWNLOAD,
            f"Downloaded by {caller.display_name or caller.user_id}",
            actor=caller,
            ip_address=ip_address,
        )
        filename = document.storage_ref.rsplit("/", 1)[-1]
        return DownloadResult(filename=filename, content=content)
