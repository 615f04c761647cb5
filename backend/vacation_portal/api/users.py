# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from vacation_portal.api.deps import SupervisorDep
from vacation_portal.db import SessionDep
from vacation_portal.schemas.account import (
    AccountListResponse,
    AccountResponse,
    CreateAccountPayload,
    UpdateAccountPayload,
    UpdateAccountResult,
)
from vacation_portal.schemas.common import OkResponse
from vacation_portal.schemas.proposal import ProposalResponse, ProposeChangePayload
from vacation_portal.schemas.vacation import RequestHistoryResponse
from vacation_portal.services import account as account_service
from vacation_portal.services import proposal as proposal_service
from vacation_portal.services import vacation as vacation_service

users_router = APIRouter(prefix="/api/users", tags=["users"])


@users_router.get("", response_model=AccountListResponse)
async def list_users(session: SessionDep, auth: SupervisorDep) -> AccountListResponse:
    """List all accounts with the state of their latest proposals."""
    return await account_service.list_accounts(session)


@users_router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: CreateAccountPayload,
    session: SessionDep,
    auth: SupervisorDep,
) -> AccountResponse:
    """Create an account."""
    return await account_service.create_account(session, auth, payload)


@users_router.api_route("/{user_id}", methods=["PUT", "PATCH"], response_model=UpdateAccountResult)
async def update_user(
    user_id: uuid.UUID,
    payload: UpdateAccountPayload,
    session: SessionDep,
    auth: SupervisorDep,
) -> UpdateAccountResult:
    """Edit an account. Another account's email or password becomes a proposal."""
    return await account_service.update_account(session, auth, user_id, payload)


@users_router.delete("/{user_id}", response_model=OkResponse)
async def delete_user(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: SupervisorDep,
) -> OkResponse:
    """Delete an account with its requests and proposals."""
    return await account_service.delete_account(session, auth, user_id)


@users_router.post("/{user_id}/proposals", response_model=ProposalResponse, status_code=status.HTTP_201_CREATED)
async def propose_change(
    user_id: uuid.UUID,
    payload: ProposeChangePayload,
    session: SessionDep,
    auth: SupervisorDep,
) -> ProposalResponse:
    """Propose a new password or email for another account."""
    return await proposal_service.propose_credential_change(session, auth, user_id, payload)


@users_router.get("/{user_id}/requests", response_model=RequestHistoryResponse)
async def list_user_history(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: SupervisorDep,
) -> RequestHistoryResponse:
    """List one account's vacation history."""
    return await vacation_service.list_history(session, user_id)
