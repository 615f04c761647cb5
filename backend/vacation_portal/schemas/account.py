# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from vacation_portal.models.enums import EditOutcome, ProposalStatus, Role

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateAccountPayload(BaseModel):
    """Request body for creating an account."""

    display_name: str = Field(min_length=1, max_length=255)
    contact_address: str = Field(min_length=1, max_length=255)
    login_code: str
    password: str = Field(min_length=1)
    role: Role


class UpdateAccountPayload(BaseModel):
    """Request body for editing an account. Blank strings count as absent."""

    display_name: str | None = Field(default=None, max_length=255)
    contact_address: str | None = Field(default=None, max_length=255)
    password: str | None = None
    role: Role | None = None


class ChangeOwnPasswordPayload(BaseModel):
    """Request body for a self-service password change."""

    current_password: str = ""
    new_password: str = ""


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    """Response schema for an account. Never carries the credential digest."""

    id: uuid.UUID
    display_name: str
    contact_address: str
    login_code: str
    role: Role
    created_at: datetime


class AccountOverview(AccountResponse):
    """An account together with the state of its latest change proposals."""

    pending_password_status: ProposalStatus | None = None
    pending_password_created_at: datetime | None = None
    pending_password_decided_at: datetime | None = None
    pending_email_status: ProposalStatus | None = None
    pending_email_created_at: datetime | None = None
    pending_email_decided_at: datetime | None = None
    pending_email_new: str | None = None


class AccountListResponse(BaseModel):
    """List of accounts, newest first."""

    items: list[AccountOverview]
    total: int


class MeResponse(BaseModel):
    user: AccountResponse | None


class UpdateAccountResult(BaseModel):
    """How the credential fields of an edit were applied."""

    ok: bool = True
    password_status: EditOutcome | None = None
    email_status: EditOutcome | None = None
