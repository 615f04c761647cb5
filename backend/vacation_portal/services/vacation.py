# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from fastapi import status
from sqlalchemy import delete, select, update
from sqlmodel import col

from vacation_portal.db import transaction
from vacation_portal.exceptions import AppError, ErrorCode
from vacation_portal.models.account import Account
from vacation_portal.models.enums import AuditAction, AuditEntityType, RequestStatus, Role
from vacation_portal.models.vacation import VacationRequest
from vacation_portal.schemas.common import OkResponse
from vacation_portal.schemas.vacation import (
    AccountSummary,
    DecisionResult,
    RequestHistoryResponse,
    TeamRequestListResponse,
    VacationRequestListResponse,
    VacationRequestResponse,
    VacationRequestWithOwner,
)
from vacation_portal.services.account import get_account_or_404
from vacation_portal.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from vacation_portal.schemas.auth import AuthContext
    from vacation_portal.schemas.vacation import SubmitVacationPayload

logger = logging.getLogger(__name__)

_DECISION_ACTIONS = {
    RequestStatus.APPROVED: AuditAction.APPROVE,
    RequestStatus.REJECTED: AuditAction.REJECT,
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(request: VacationRequest) -> VacationRequestResponse:
    """Map a vacation request model to its response schema."""
    return VacationRequestResponse(
        id=request.id,
        subject_id=request.subject_id,
        date_from=request.date_from,
        date_to=request.date_to,
        reason=request.reason,
        status=RequestStatus(request.status),
        submitted_at=request.submitted_at,
    )


def parse_request_date(value: str) -> date:
    """Parse an ISO date (or the date part of an ISO datetime)."""
    text = value.strip()
    try:
        if "T" in text or " " in text:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError:
        raise AppError(ErrorCode.INVALID_DATES, detail=f"Unparseable date: {value!r}") from None


def _newest_first(query: Select[Any]) -> Select[Any]:
    return query.order_by(col(VacationRequest.submitted_at).desc())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitVacationPayload,
) -> VacationRequestResponse:
    """Submit a pending vacation request for the caller.

    Overlapping requests are allowed; only the date range itself is checked.
    """
    auth.require(Role.SUBORDINATE)
    if not payload.date_from.strip() or not payload.date_to.strip():
        raise AppError(ErrorCode.INVALID_BODY, detail="date_from and date_to are required.")
    date_from = parse_request_date(payload.date_from)
    date_to = parse_request_date(payload.date_to)
    if date_to < date_from:
        raise AppError(ErrorCode.DATE_RANGE, detail="date_to must not be earlier than date_from.")
    reason = payload.reason.strip() if payload.reason else None

    vacation_request = VacationRequest(
        subject_id=auth.subject_id,
        date_from=date_from,
        date_to=date_to,
        reason=reason or None,
        status=RequestStatus.PENDING.value,
    )
    async with transaction(session, ErrorCode.CREATE_FAILED):
        session.add(vacation_request)
        await session.flush()
        await write_audit_log(
            session,
            actor_id=auth.subject_id,
            entity_type=AuditEntityType.VACATION_REQUEST,
            entity_id=vacation_request.id,
            action=AuditAction.SUBMIT,
            after_json=model_to_audit_dict(vacation_request),
        )

    logger.info("Account %s submitted vacation request %s", auth.subject_id, vacation_request.id)
    return _build_request_response(vacation_request)


async def decide_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    outcome: RequestStatus,
) -> DecisionResult:
    """Move a pending request to approved or rejected.

    The transition is a single conditional UPDATE guarded by
    ``status = 'pending'``. Of two concurrent decisions on one request, the
    second always matches zero rows and gets ``not_found_or_not_pending``.
    """
    auth.require(Role.SUPERVISOR)
    if outcome not in _DECISION_ACTIONS:
        raise AppError(ErrorCode.INVALID_BODY, detail="Outcome must be approved or rejected.")

    async with transaction(session):
        result = await session.execute(
            update(VacationRequest)
            .where(
                col(VacationRequest.id) == request_id,
                col(VacationRequest.status) == RequestStatus.PENDING.value,
            )
            .values(status=outcome.value)
            .returning(col(VacationRequest.id), col(VacationRequest.status))
        )
        row = result.one_or_none()
        if row is None:
            raise AppError(ErrorCode.NOT_FOUND_OR_NOT_PENDING, status_code=status.HTTP_404_NOT_FOUND)

        await write_audit_log(
            session,
            actor_id=auth.subject_id,
            entity_type=AuditEntityType.VACATION_REQUEST,
            entity_id=row.id,
            action=_DECISION_ACTIONS[outcome],
            before_json={"status": RequestStatus.PENDING.value},
            after_json={"status": row.status},
        )

    logger.info("Vacation request %s %s by %s", request_id, outcome.value, auth.subject_id)
    return DecisionResult(id=row.id, status=RequestStatus(row.status))


async def withdraw_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> OkResponse:
    """Delete the caller's own pending request.

    Succeeds without effect when the request is absent, already decided or
    owned by someone else, so repeating a withdrawal is always safe.
    """
    auth.require(Role.SUBORDINATE)
    async with transaction(session):
        result = await session.execute(
            delete(VacationRequest)
            .where(
                col(VacationRequest.id) == request_id,
                col(VacationRequest.subject_id) == auth.subject_id,
                col(VacationRequest.status) == RequestStatus.PENDING.value,
            )
            .returning(col(VacationRequest.id))
        )
        withdrawn_id = result.scalar_one_or_none()
        if withdrawn_id is not None:
            await write_audit_log(
                session,
                actor_id=auth.subject_id,
                entity_type=AuditEntityType.VACATION_REQUEST,
                entity_id=withdrawn_id,
                action=AuditAction.WITHDRAW,
            )

    if withdrawn_id is not None:
        logger.info("Account %s withdrew vacation request %s", auth.subject_id, withdrawn_id)
    return OkResponse()


async def list_my_requests(session: AsyncSession, auth: AuthContext) -> VacationRequestListResponse:
    """List the caller's own requests, newest first."""
    result = await session.execute(
        _newest_first(select(VacationRequest).where(col(VacationRequest.subject_id) == auth.subject_id))
    )
    items = [_build_request_response(r) for r in result.scalars().all()]
    return VacationRequestListResponse(items=items, total=len(items))


async def list_all_requests(session: AsyncSession) -> TeamRequestListResponse:
    """List every request with its owner, newest first."""
    result = await session.execute(
        _newest_first(
            select(VacationRequest, col(Account.display_name), col(Account.contact_address)).join(
                Account, col(Account.id) == col(VacationRequest.subject_id)
            )
        )
    )
    items = [
        VacationRequestWithOwner(
            **_build_request_response(request).model_dump(),
            owner_name=owner_name,
            owner_address=owner_address,
        )
        for request, owner_name, owner_address in result.all()
    ]
    return TeamRequestListResponse(items=items, total=len(items))


async def list_history(session: AsyncSession, target_id: uuid.UUID) -> RequestHistoryResponse:
    """List one account's requests, newest first. Raises 404 if the account is unknown."""
    account = await get_account_or_404(session, target_id, ErrorCode.USER_NOT_FOUND)
    result = await session.execute(
        _newest_first(select(VacationRequest).where(col(VacationRequest.subject_id) == target_id))
    )
    items = [_build_request_response(r) for r in result.scalars().all()]
    return RequestHistoryResponse(
        user=AccountSummary(
            id=account.id,
            display_name=account.display_name,
            contact_address=account.contact_address,
        ),
        items=items,
        total=len(items),
    )
