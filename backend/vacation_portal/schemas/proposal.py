# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from vacation_portal.models.enums import ProposalKind, ProposalStatus, ResponseAction


class ProposeChangePayload(BaseModel):
    """Request body for proposing a credential change to another account."""

    kind: ProposalKind
    value: str


class RespondPayload(BaseModel):
    """Request body for answering the caller's pending proposal."""

    action: ResponseAction


class ProposalResponse(BaseModel):
    """A stored change proposal, without its payload."""

    id: uuid.UUID
    kind: ProposalKind
    subject_id: uuid.UUID
    initiator_id: uuid.UUID
    status: ProposalStatus
    created_at: datetime
    decided_at: datetime | None


class PendingProposalView(BaseModel):
    """What the subject reviews before answering a proposal.

    ``candidate_value`` is the proposed address for email proposals and the
    escrowed plaintext for password proposals; it is ``None`` when password
    escrow is disabled.
    """

    id: uuid.UUID
    kind: ProposalKind
    created_at: datetime
    initiator_name: str
    initiator_address: str
    candidate_value: str | None


class PendingProposalResponse(BaseModel):
    request: PendingProposalView | None


class RespondResult(BaseModel):
    ok: bool = True
    status: ProposalStatus
