# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from vacation_portal.models.base import CreatedAtMixin, RecordBase, utc_timestamp
from vacation_portal.models.enums import ProposalStatus

_PENDING_ONLY = sa.text("status = 'pending'")


class ChangeProposal(RecordBase, CreatedAtMixin, table=True):
    """A supervisor's proposed change to a subordinate's password or contact address.

    At most one pending proposal may exist per (subject, kind); the partial
    unique index enforces it in storage.
    """

    __tablename__ = "change_proposal"
    __table_args__ = (
        sa.Index(
            "uq_change_proposal_one_pending",
            "subject_id",
            "kind",
            unique=True,
            postgresql_where=_PENDING_ONLY,
            sqlite_where=_PENDING_ONLY,
        ),
        sa.Index("ix_change_proposal_subject_kind_created", "subject_id", "kind", "created_at"),
        sa.CheckConstraint("kind IN ('password', 'email')", name="ck_change_proposal_kind"),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_change_proposal_status"),
    )

    subject_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("account.id", ondelete="CASCADE"), nullable=False),
    )
    initiator_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("account.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    kind: str = Field(max_length=20)
    # Email payload.
    candidate_address: str | None = Field(default=None, max_length=255)
    # Password payload: the escrowed plaintext (may be withheld by settings) and its digest.
    candidate_secret: str | None = None
    candidate_digest: str | None = Field(default=None, max_length=255)
    status: str = Field(
        default=ProposalStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    decided_at: datetime | None = utc_timestamp(nullable=True)
