"""Approver slot ORM model. Bound to a user id or a group alias, never both."""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from signflow.infrastructure.persistence.database import Base
from signflow.infrastructure.persistence.models.mixins import BaseModel


class ApproverSlot(BaseModel, Base):
    """Approver slot entity. Table: approver_slot."""

    __tablename__ = "approver_slot"

    document_id: Mapped[str] = mapped_column(
        String, ForeignKey("document.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ordinal: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True, index=True)
    group_email: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    display_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'approver'")
    )
    resolved_signer_name: Mapped[str | None] = mapped_column(String, nullable=True)
    resolved_member_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("signer_group_member.id", ondelete="SET NULL"),
        nullable=True,
    )
    token: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    state: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'pending'")
    )
    page: Mapped[int] = mapped_column(Integer, nullable=False)
    x: Mapped[float] = mapped_column(Float, nullable=False)
    y: Mapped[float] = mapped_column(Float, nullable=False)
    width: Mapped[float] = mapped_column(Float, nullable=False)
    height: Mapped[float] = mapped_column(Float, nullable=False)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    acted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (group_email IS NULL)",
            name="ck_approver_slot_one_binding",
        ),
        Index("ux_approver_slot_document_ordinal", "document_id", "ordinal", unique=True),
    )
