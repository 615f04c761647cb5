# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from vacation_portal.api.deps import AuthDep, SubordinateDep, SupervisorDep
from vacation_portal.db import SessionDep
from vacation_portal.models.enums import RequestStatus, Role
from vacation_portal.schemas.common import OkResponse
from vacation_portal.schemas.vacation import (
    DecisionResult,
    SubmitVacationPayload,
    TeamRequestListResponse,
    VacationRequestListResponse,
    VacationRequestResponse,
)
from vacation_portal.services import vacation as vacation_service

requests_router = APIRouter(prefix="/api/requests", tags=["requests"])


@requests_router.post("", response_model=VacationRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitVacationPayload,
    session: SessionDep,
    auth: SubordinateDep,
) -> VacationRequestResponse:
    """Submit a new vacation request (subordinates only)."""
    return await vacation_service.submit_request(session, auth, payload)


@requests_router.get("", response_model=None)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    mine: bool = Query(default=False),
) -> VacationRequestListResponse | TeamRequestListResponse:
    """List the caller's own requests, or every request for supervisors."""
    if mine:
        return await vacation_service.list_my_requests(session, auth)
    auth.require(Role.SUPERVISOR)
    return await vacation_service.list_all_requests(session)


@requests_router.post("/{request_id}/approve", response_model=DecisionResult)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: SupervisorDep,
) -> DecisionResult:
    """Approve a pending request (supervisors only)."""
    return await vacation_service.decide_request(session, auth, request_id, RequestStatus.APPROVED)


@requests_router.post("/{request_id}/reject", response_model=DecisionResult)
async def reject_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: SupervisorDep,
) -> DecisionResult:
    """Reject a pending request (supervisors only)."""
    return await vacation_service.decide_request(session, auth, request_id, RequestStatus.REJECTED)


@requests_router.delete("/{request_id}", response_model=OkResponse)
async def withdraw_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: SubordinateDep,
) -> OkResponse:
    """Withdraw one of the caller's pending requests."""
    return await vacation_service.withdraw_request(session, auth, request_id)
