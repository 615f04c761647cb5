# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from fastapi import status
from sqlalchemy import delete, select
from sqlmodel import col

from vacation_portal.config import get_settings
from vacation_portal.db import transaction
from vacation_portal.exceptions import AppError, ErrorCode
from vacation_portal.models.account import Account
from vacation_portal.models.base import now_utc
from vacation_portal.models.enums import (
    AuditAction,
    AuditEntityType,
    ProposalKind,
    ProposalStatus,
    ResponseAction,
    Role,
)
from vacation_portal.models.proposal import ChangeProposal
from vacation_portal.schemas.proposal import (
    PendingProposalResponse,
    PendingProposalView,
    ProposalResponse,
    RespondResult,
)
from vacation_portal.services.audit import model_to_audit_dict, write_audit_log
from vacation_portal.services.hasher import get_secret_hasher

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from vacation_portal.schemas.auth import AuthContext
    from vacation_portal.schemas.proposal import ProposeChangePayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_proposal_response(proposal: ChangeProposal) -> ProposalResponse:
    """Map a proposal model to its response schema."""
    return ProposalResponse(
        id=proposal.id,
        kind=ProposalKind(proposal.kind),
        subject_id=proposal.subject_id,
        initiator_id=proposal.initiator_id,
        status=ProposalStatus(proposal.status),
        created_at=proposal.created_at,
        decided_at=proposal.decided_at,
    )


def _escrow_password(plaintext: str) -> dict[str, Any]:
    """Build the stored payload of a password proposal.

    The plaintext is kept so the subject can see exactly what is proposed
    before approving. Setting ``escrow_proposed_passwords`` to false keeps
    only the digest.
    """
    return {
        "candidate_secret": plaintext if get_settings().escrow_proposed_passwords else None,
        "candidate_digest": get_secret_hasher().digest(plaintext),
    }


def _candidate_value(proposal: ChangeProposal) -> str | None:
    if proposal.kind == ProposalKind.EMAIL:
        return proposal.candidate_address
    return proposal.candidate_secret


async def lock_account_for_update(session: AsyncSession, account_id: uuid.UUID) -> Account:
    """Fetch an account with a FOR UPDATE lock. Raises 404 if it is gone."""
    result = await session.execute(
        select(Account)
        .where(col(Account.id) == account_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    account = result.scalar_one_or_none()
    if account is None:
        raise AppError(ErrorCode.NOT_FOUND, status_code=status.HTTP_404_NOT_FOUND)
    return account


async def _lock_latest_pending(
    session: AsyncSession,
    subject_id: uuid.UUID,
    kind: ProposalKind,
) -> ChangeProposal | None:
    """Select the newest pending proposal of ``kind`` for the subject, locked for update."""
    result = await session.execute(
        select(ChangeProposal)
        .where(
            col(ChangeProposal.subject_id) == subject_id,
            col(ChangeProposal.kind) == kind.value,
            col(ChangeProposal.status) == ProposalStatus.PENDING.value,
        )
        .order_by(col(ChangeProposal.created_at).desc())
        .limit(1)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _apply_proposal(session: AsyncSession, account: Account, proposal: ChangeProposal) -> None:
    """Write the proposal's payload into the subject's account."""
    if proposal.kind == ProposalKind.EMAIL:
        account.contact_address = proposal.candidate_address  # type: ignore[assignment]
    else:
        account.credential_digest = proposal.candidate_digest  # type: ignore[assignment]
    await session.flush()


def _mark_decided(proposal: ChangeProposal, new_status: ProposalStatus) -> None:
    proposal.status = new_status.value
    proposal.decided_at = now_utc()


def normalize_candidate(kind: ProposalKind, value: str, *, min_password_length: int = 8) -> str:
    """Trim and validate a proposed value before any storage I/O."""
    trimmed = value.strip()
    if kind == ProposalKind.PASSWORD and len(trimmed) < min_password_length:
        raise AppError(
            ErrorCode.PASSWORD_TOO_SHORT,
            detail=f"Password must be at least {min_password_length} characters.",
        )
    if not trimmed:
        raise AppError(ErrorCode.INVALID_BODY, detail="Proposed value must not be empty.")
    return trimmed


async def stage_proposal(
    session: AsyncSession,
    *,
    kind: ProposalKind,
    subject_id: uuid.UUID,
    initiator_id: uuid.UUID,
    value: str,
) -> ChangeProposal:
    """Replace the subject's pending proposal of ``kind`` with a new one.

    Runs inside the caller's transaction, which must already hold the lock
    on the subject's account row. Any undecided proposal of the same kind
    is deleted first, so at most one stays pending.
    """
    superseded = await session.execute(
        delete(ChangeProposal)
        .where(
            col(ChangeProposal.subject_id) == subject_id,
            col(ChangeProposal.kind) == kind.value,
            col(ChangeProposal.status) == ProposalStatus.PENDING.value,
        )
        .returning(col(ChangeProposal.id))
    )
    for superseded_id in superseded.scalars().all():
        await write_audit_log(
            session,
            actor_id=initiator_id,
            entity_type=AuditEntityType.CHANGE_PROPOSAL,
            entity_id=superseded_id,
            action=AuditAction.DELETE,
        )

    payload = _escrow_password(value) if kind == ProposalKind.PASSWORD else {"candidate_address": value}
    proposal = ChangeProposal(
        subject_id=subject_id,
        initiator_id=initiator_id,
        kind=kind.value,
        status=ProposalStatus.PENDING.value,
        **payload,
    )
    session.add(proposal)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=initiator_id,
        entity_type=AuditEntityType.CHANGE_PROPOSAL,
        entity_id=proposal.id,
        action=AuditAction.PROPOSE,
        after_json=model_to_audit_dict(proposal),
    )
    return proposal


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def propose_credential_change(
    session: AsyncSession,
    auth: AuthContext,
    target_id: uuid.UUID,
    payload: ProposeChangePayload,
) -> ProposalResponse:
    """Propose a new password or contact address for another account.

    1. Validate the candidate (no storage I/O).
    2. Lock the target account row; concurrent proposers for the same
       target queue here.
    3. Supersede the pending proposal of the same kind and insert the new one.
    4. Commit.
    """
    auth.require(Role.SUPERVISOR)
    if auth.subject_id == target_id:
        raise AppError(
            ErrorCode.INVALID_TARGET,
            detail="Own credentials are changed directly, not proposed.",
        )
    value = normalize_candidate(payload.kind, payload.value, min_password_length=get_settings().min_password_length)

    async with transaction(session):
        await lock_account_for_update(session, target_id)
        proposal = await stage_proposal(
            session,
            kind=payload.kind,
            subject_id=target_id,
            initiator_id=auth.subject_id,
            value=value,
        )

    logger.info("Proposed %s change %s for account %s", payload.kind.value, proposal.id, target_id)
    return _build_proposal_response(proposal)


async def get_pending_proposal(
    session: AsyncSession,
    auth: AuthContext,
    kind: ProposalKind,
) -> PendingProposalResponse:
    """Return the caller's newest pending proposal of ``kind``, if any."""
    result = await session.execute(
        select(ChangeProposal, col(Account.display_name), col(Account.contact_address))
        .join(Account, col(Account.id) == col(ChangeProposal.initiator_id))
        .where(
            col(ChangeProposal.subject_id) == auth.subject_id,
            col(ChangeProposal.kind) == kind.value,
            col(ChangeProposal.status) == ProposalStatus.PENDING.value,
        )
        .order_by(col(ChangeProposal.created_at).desc())
        .limit(1)
    )
    row = result.one_or_none()
    if row is None:
        return PendingProposalResponse(request=None)

    proposal, initiator_name, initiator_address = row
    return PendingProposalResponse(
        request=PendingProposalView(
            id=proposal.id,
            kind=ProposalKind(proposal.kind),
            created_at=proposal.created_at,
            initiator_name=initiator_name,
            initiator_address=initiator_address,
            candidate_value=_candidate_value(proposal),
        )
    )


async def respond_to_proposal(
    session: AsyncSession,
    auth: AuthContext,
    kind: ProposalKind,
    action: ResponseAction,
) -> RespondResult:
    """Approve or reject the caller's pending proposal of ``kind``.

    Everything happens in one transaction:
    1. Lock the caller's account row, then the newest pending proposal.
       The order matches the proposer's, so the two never deadlock.
    2. On approve, write the payload into the account.
    3. Mark the proposal approved/rejected and stamp decided_at.
    4. Commit. Any failure rolls back steps 2 and 3 together.
    """
    new_status = ProposalStatus.APPROVED if action == ResponseAction.APPROVE else ProposalStatus.REJECTED

    async with transaction(session):
        account = await lock_account_for_update(session, auth.subject_id)
        proposal = await _lock_latest_pending(session, auth.subject_id, kind)
        if proposal is None:
            raise AppError(ErrorCode.NO_PENDING_UPDATE, status_code=status.HTTP_404_NOT_FOUND)

        before_dict = model_to_audit_dict(proposal)
        if action == ResponseAction.APPROVE:
            await _apply_proposal(session, account, proposal)
        _mark_decided(proposal, new_status)
        await session.flush()

        await write_audit_log(
            session,
            actor_id=auth.subject_id,
            entity_type=AuditEntityType.CHANGE_PROPOSAL,
            entity_id=proposal.id,
            action=AuditAction.APPROVE if action == ResponseAction.APPROVE else AuditAction.REJECT,
            before_json=before_dict,
            after_json=model_to_audit_dict(proposal),
        )

    logger.info("Account %s %s %s proposal %s", auth.subject_id, new_status.value, kind.value, proposal.id)
    return RespondResult(status=new_status)
