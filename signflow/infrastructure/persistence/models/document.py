"""Document ORM model. One row per version; lineage via parent_id and root_id."""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
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


class Document(BaseModel, Base):
    """Document entity. Table: document."""

    __tablename__ = "document"

    display_name: Mapped[str] = mapped_column(String, nullable=False)
    document_type: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    storage_ref: Mapped[str] = mapped_column(String, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    parent_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("document.id", ondelete="SET NULL"), nullable=True
    )
    root_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    creator_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    creator_name: Mapped[str] = mapped_column(String, nullable=False)
    creator_email: Mapped[str | None] = mapped_column(String, nullable=True)
    access_token: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    state: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'pending'"), index=True
    )
    limit_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deadline_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reminder_interval_minutes: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    last_reminder_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    finalized_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ux_document_root_version", "root_id", "version", unique=True),
        # At most one successor per version.
        Index(
            "ux_document_parent",
            "parent_id",
            unique=True,
            postgresql_where=text("parent_id IS NOT NULL"),
            sqlite_where=text("parent_id IS NOT NULL"),
        ),
        Index(
            "ix_document_pending_deadline",
            "deadline_at",
            postgresql_where=text("state = 'pending'"),
        ),
    )
