"""Service interfaces (ports) for collaborators outside the datastore."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from signflow.shared.enums import NotificationKind

if TYPE_CHECKING:
    from signflow.application.services.stamp_layout import StampRequest


class IMailSender(Protocol):
    """Outbound mail transport. Returns False on failure; must not block the workflow."""

    async def send(self, recipient: str, subject: str, html_body: str) -> bool:
        """Send one HTML message to one recipient."""


class INotificationRenderer(Protocol):
    """Renders subject and HTML body for a notification kind."""

    def render(self, kind: NotificationKind, context: dict[str, Any]) -> tuple[str, str]:
        """Return (subject, html_body). Raises KeyError for an unknown kind."""


class IDocumentStorage(Protocol):
    """Blob storage for PDF bytes addressed by storage ref."""

    async def read(self, storage_ref: str) -> bytes:
        """Return the full content at storage_ref."""

    async def write(self, storage_ref: str, data: bytes) -> None:
        """Atomically create or replace the content at storage_ref."""

    async def delete(self, storage_ref: str) -> bool:
        """Delete; False if nothing was there."""

    async def exists(self, storage_ref: str) -> bool:
        """True if content exists at storage_ref."""


class IPdfStamper(Protocol):
    """Draws name stamps onto PDF pages."""

    def page_count(self, pdf_bytes: bytes) -> int:
        """Number of pages; raises if the bytes are not a readable PDF."""

    def stamp(self, pdf_bytes: bytes, requests: list[StampRequest]) -> bytes:
        """Return a copy of the PDF with every request rendered."""
