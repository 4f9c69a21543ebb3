"""Signer group member ORM model."""

from sqlalchemy import BigInteger, Boolean, Index, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from signflow.infrastructure.persistence.database import Base
from signflow.infrastructure.persistence.models.mixins import BaseModel


class SignerGroupMember(BaseModel, Base):
    """Member of a signer group alias. Table: signer_group_member."""

    __tablename__ = "signer_group_member"

    group_email: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    personnel_number: Mapped[str | None] = mapped_column(String, nullable=True)
    user_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    position: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str | None] = mapped_column(String, nullable=True)
    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true"), default=True
    )


# One active member per email within a group.
Index(
    "ux_signer_group_member_active_email",
    SignerGroupMember.group_email,
    func.lower(SignerGroupMember.email),
    unique=True,
    postgresql_where=text("active AND email IS NOT NULL"),
)
