# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from vacation_portal.models.enums import RequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitVacationPayload(BaseModel):
    """Request body for submitting a vacation request.

    Dates arrive as strings and are parsed by the service so that an
    unparseable value is reported as ``invalid_dates`` rather than a
    generic body error.
    """

    date_from: str
    date_to: str
    reason: str | None = Field(default=None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class VacationRequestResponse(BaseModel):
    """Response schema for a single vacation request."""

    id: uuid.UUID
    subject_id: uuid.UUID
    date_from: date
    date_to: date
    reason: str | None
    status: RequestStatus
    submitted_at: datetime


class VacationRequestWithOwner(VacationRequestResponse):
    """A vacation request joined with its owner's identity."""

    owner_name: str
    owner_address: str


class VacationRequestListResponse(BaseModel):
    """List of vacation requests, newest first."""

    items: list[VacationRequestResponse]
    total: int


class TeamRequestListResponse(BaseModel):
    """All vacation requests with their owners, newest first."""

    items: list[VacationRequestWithOwner]
    total: int


class DecisionResult(BaseModel):
    """Outcome of a supervisor decision."""

    id: uuid.UUID
    status: RequestStatus


class AccountSummary(BaseModel):
    id: uuid.UUID
    display_name: str
    contact_address: str


class RequestHistoryResponse(BaseModel):
    """One account's vacation history."""

    user: AccountSummary
    items: list[VacationRequestResponse]
    total: int
