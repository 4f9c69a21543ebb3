"""create signflow schema

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-19

Documents (one row per version), approver slots, signatures, signer group
members, notification receipts (dedup gate) and the append-only audit log.
"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

revision: str = "a1c2e3f4b5d6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "document",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("document_type", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("storage_ref", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.String(), nullable=True),
        sa.Column("root_id", sa.String(), nullable=False),
        sa.Column("creator_id", sa.BigInteger(), nullable=False),
        sa.Column("creator_name", sa.String(), nullable=False),
        sa.Column("creator_email", sa.String(), nullable=True),
        sa.Column("access_token", sa.String(), nullable=False),
        sa.Column(
            "state", sa.String(), server_default=sa.text("'pending'"), nullable=False
        ),
        sa.Column("limit_hours", sa.Integer(), nullable=True),
        sa.Column("deadline_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reminder_interval_minutes", sa.Integer(), nullable=True),
        sa.Column("last_reminder_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finalized_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["parent_id"], ["document.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("access_token", name="uq_document_access_token"),
        sa.CheckConstraint(
            "state IN ('pending', 'approved', 'rejected', 'expired')",
            name="ck_document_state",
        ),
    )
    op.create_index("ix_document_root_id", "document", ["root_id"], unique=False)
    op.create_index("ix_document_creator_id", "document", ["creator_id"], unique=False)
    op.create_index("ix_document_state", "document", ["state"], unique=False)
    op.create_index(
        "ux_document_root_version", "document", ["root_id", "version"], unique=True
    )
    op.create_index(
        "ux_document_parent",
        "document",
        ["parent_id"],
        unique=True,
        postgresql_where=sa.text("parent_id IS NOT NULL"),
    )
    op.create_index(
        "ix_document_pending_deadline",
        "document",
        ["deadline_at"],
        unique=False,
        postgresql_where=sa.text("state = 'pending'"),
    )

    op.create_table(
        "signer_group_member",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("group_email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("personnel_number", sa.String(), nullable=True),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        sa.Column("position", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column(
            "active", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_signer_group_member_group_email",
        "signer_group_member",
        ["group_email"],
        unique=False,
    )
    op.create_index(
        "ux_signer_group_member_active_email",
        "signer_group_member",
        ["group_email", sa.text("lower(email)")],
        unique=True,
        postgresql_where=sa.text("active AND email IS NOT NULL"),
    )

    op.create_table(
        "approver_slot",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("document_id", sa.String(), nullable=False),
        sa.Column("ordinal", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        sa.Column("group_email", sa.String(), nullable=True),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column(
            "role", sa.String(), server_default=sa.text("'approver'"), nullable=False
        ),
        sa.Column("resolved_signer_name", sa.String(), nullable=True),
        sa.Column("resolved_member_id", sa.String(), nullable=True),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column(
            "state", sa.String(), server_default=sa.text("'pending'"), nullable=False
        ),
        sa.Column("page", sa.Integer(), nullable=False),
        sa.Column("x", sa.Float(), nullable=False),
        sa.Column("y", sa.Float(), nullable=False),
        sa.Column("width", sa.Float(), nullable=False),
        sa.Column("height", sa.Float(), nullable=False),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("acted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["document_id"], ["document.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["resolved_member_id"], ["signer_group_member.id"], ondelete="SET NULL"
        ),
        sa.UniqueConstraint("token", name="uq_approver_slot_token"),
        sa.CheckConstraint(
            "(user_id IS NULL) <> (group_email IS NULL)",
            name="ck_approver_slot_one_binding",
        ),
        sa.CheckConstraint(
            "state IN ('pending', 'approved', 'rejected', 'expired')",
            name="ck_approver_slot_state",
        ),
    )
    op.create_index(
        "ix_approver_slot_document_id", "approver_slot", ["document_id"], unique=False
    )
    op.create_index("ix_approver_slot_user_id", "approver_slot", ["user_id"], unique=False)
    op.create_index(
        "ix_approver_slot_group_email", "approver_slot", ["group_email"], unique=False
    )
    op.create_index(
        "ux_approver_slot_document_ordinal",
        "approver_slot",
        ["document_id", "ordinal"],
        unique=True,
    )

    op.create_table(
        "signature",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("document_id", sa.String(), nullable=False),
        sa.Column("slot_id", sa.String(), nullable=False),
        sa.Column("signer_user_id", sa.BigInteger(), nullable=False),
        sa.Column("signer_name", sa.String(), nullable=False),
        sa.Column("signed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["document_id"], ["document.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["slot_id"], ["approver_slot.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("slot_id", name="uq_signature_slot_id"),
    )
    op.create_index(
        "ix_signature_document_id", "signature", ["document_id"], unique=False
    )

    op.create_table(
        "notification_receipt",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("recipient", sa.String(), nullable=False),
        sa.Column("document_id", sa.String(), nullable=False),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("token", sa.String(), server_default=sa.text("''"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["document_id"], ["document.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "recipient",
            "document_id",
            "kind",
            "token",
            name="ux_notification_receipt_key",
        ),
    )
    op.create_index(
        "ix_notification_receipt_document_id",
        "notification_receipt",
        ["document_id"],
        unique=False,
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("document_id", sa.String(), nullable=True),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        sa.Column("actor_name", sa.String(), nullable=True),
        sa.Column("actor_email", sa.String(), nullable=True),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_document_id", "audit_log", ["document_id"], unique=False)
    op.create_index("ix_audit_log_user_id", "audit_log", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("notification_receipt")
    op.drop_table("signature")
    op.drop_table("approver_slot")
    op.drop_table("signer_group_member")
    op.drop_table("document")
