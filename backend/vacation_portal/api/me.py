# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter

from vacation_portal.api.deps import AuthDep
from vacation_portal.db import SessionDep
from vacation_portal.models.enums import ProposalKind
from vacation_portal.schemas.account import ChangeOwnPasswordPayload, MeResponse
from vacation_portal.schemas.common import OkResponse
from vacation_portal.schemas.proposal import PendingProposalResponse, RespondPayload, RespondResult
from vacation_portal.services import account as account_service
from vacation_portal.services import proposal as proposal_service

me_router = APIRouter(prefix="/api/me", tags=["me"])


@me_router.get("", response_model=MeResponse)
async def get_me(session: SessionDep, auth: AuthDep) -> MeResponse:
    """Return the caller's account."""
    return await account_service.get_me(session, auth)


@me_router.patch("/password", response_model=OkResponse)
async def change_own_password(
    payload: ChangeOwnPasswordPayload,
    session: SessionDep,
    auth: AuthDep,
) -> OkResponse:
    """Change the caller's own password."""
    return await account_service.change_own_password(session, auth, payload)


@me_router.get("/pending-password", response_model=PendingProposalResponse)
async def get_pending_password(session: SessionDep, auth: AuthDep) -> PendingProposalResponse:
    """Show the password change a supervisor proposed for the caller, if any."""
    return await proposal_service.get_pending_proposal(session, auth, ProposalKind.PASSWORD)


@me_router.post("/pending-password/respond", response_model=RespondResult)
async def respond_pending_password(
    payload: RespondPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RespondResult:
    """Approve or reject the pending password change."""
    return await proposal_service.respond_to_proposal(session, auth, ProposalKind.PASSWORD, payload.action)


@me_router.get("/pending-email", response_model=PendingProposalResponse)
async def get_pending_email(session: SessionDep, auth: AuthDep) -> PendingProposalResponse:
    """Show the email change a supervisor proposed for the caller, if any."""
    return await proposal_service.get_pending_proposal(session, auth, ProposalKind.EMAIL)


@me_router.post("/pending-email/respond", response_model=RespondResult)
async def respond_pending_email(
    payload: RespondPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RespondResult:
    """Approve or reject the pending email change."""
    return await proposal_service.respond_to_proposal(session, auth, ProposalKind.EMAIL, payload.action)
