"""Notification receipt ORM model. Backs the notification dedup gate."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from signflow.infrastructure.persistence.database import Base
from signflow.shared.utils.generators import generate_cuid


class NotificationReceipt(Base):
    """Record that a notification was sent. Table: notification_receipt.

    token is '' when the notification carries no token so the unique key
    also covers tokenless kinds.
    """

    __tablename__ = "notification_receipt"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_cuid)
    recipient: Mapped[str] = mapped_column(String, nullable=False)
    document_id: Mapped[str] = mapped_column(
        String, ForeignKey("document.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(String, nullable=False)
    token: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("''"), default=""
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "recipient",
            "document_id",
            "kind",
            "token",
            name="ux_notification_receipt_key",
        ),
    )
