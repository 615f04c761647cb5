"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "account",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("contact_address", sa.String(length=255), nullable=False),
        sa.Column("login_code", sa.String(length=7), nullable=False),
        sa.Column("credential_digest", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.CheckConstraint("role IN ('supervisor', 'subordinate')", name="ck_account_role"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("contact_address"),
        sa.UniqueConstraint("login_code"),
    )

    op.create_table(
        "vacation_request",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("subject_id", sa.Uuid(), nullable=False),
        sa.Column("date_from", sa.Date(), nullable=False),
        sa.Column("date_to", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("date_to >= date_from", name="ck_vacation_request_range"),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_vacation_request_status"),
        sa.ForeignKeyConstraint(["subject_id"], ["account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_vacation_request_subject_id", "vacation_request", ["subject_id"])
    op.create_index("ix_vacation_request_status", "vacation_request", ["status"])
    op.create_index("ix_vacation_request_subject_submitted", "vacation_request", ["subject_id", "submitted_at"])

    op.create_table(
        "change_proposal",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("subject_id", sa.Uuid(), nullable=False),
        sa.Column("initiator_id", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("candidate_address", sa.String(length=255), nullable=True),
        sa.Column("candidate_secret", sa.String(), nullable=True),
        sa.Column("candidate_digest", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("kind IN ('password', 'email')", name="ck_change_proposal_kind"),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_change_proposal_status"),
        sa.ForeignKeyConstraint(["subject_id"], ["account.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["initiator_id"], ["account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_change_proposal_initiator_id", "change_proposal", ["initiator_id"])
    op.create_index("ix_change_proposal_status", "change_proposal", ["status"])
    op.create_index(
        "ix_change_proposal_subject_kind_created", "change_proposal", ["subject_id", "kind", "created_at"]
    )
    op.create_index(
        "uq_change_proposal_one_pending",
        "change_proposal",
        ["subject_id", "kind"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("ix_audit_log_actor_id", "audit_log", ["actor_id"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_index("uq_change_proposal_one_pending", table_name="change_proposal")
    op.drop_table("change_proposal")
    op.drop_table("vacation_request")
    op.drop_table("account")
