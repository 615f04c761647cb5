# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from vacation_portal.models.base import RecordBase, utc_timestamp
from vacation_portal.models.enums import RequestStatus


class VacationRequest(RecordBase, table=True):
    """A subordinate's time-off request with its approval state."""

    __tablename__ = "vacation_request"
    __table_args__ = (
        sa.CheckConstraint("date_to >= date_from", name="ck_vacation_request_range"),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_vacation_request_status"),
        sa.Index("ix_vacation_request_subject_submitted", "subject_id", "submitted_at"),
    )

    subject_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("account.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    date_from: date
    date_to: date
    reason: str | None = None
    status: str = Field(
        default=RequestStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    submitted_at: datetime = utc_timestamp()
