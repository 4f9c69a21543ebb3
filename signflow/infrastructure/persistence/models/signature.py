"""Signature ORM model. Append-only evidence of an approval."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from signflow.infrastructure.persistence.database import Base
from signflow.shared.utils.generators import generate_cuid


class Signature(Base):
    """Signature entity. Table: signature. One per approved slot."""

    __tablename__ = "signature"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_cuid)
    document_id: Mapped[str] = mapped_column(
        String, ForeignKey("document.id", ondelete="CASCADE"), nullable=False, index=True
    )
    slot_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("approver_slot.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    signer_user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    signer_name: Mapped[str] = mapped_column(String, nullable=False)
    signed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)
