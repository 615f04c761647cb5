# ruff: noqa: TC003
from __future__ import annotations

import logging
import re
import uuid
from typing import TYPE_CHECKING

from fastapi import status
from sqlalchemy import delete, select
from sqlmodel import col

from vacation_portal.config import get_settings
from vacation_portal.db import transaction
from vacation_portal.exceptions import AppError, ErrorCode
from vacation_portal.models.account import Account
from vacation_portal.models.enums import (
    AuditAction,
    AuditEntityType,
    EditOutcome,
    ProposalKind,
    ProposalStatus,
    Role,
)
from vacation_portal.models.proposal import ChangeProposal
from vacation_portal.schemas.account import (
    AccountListResponse,
    AccountOverview,
    AccountResponse,
    MeResponse,
    UpdateAccountResult,
)
from vacation_portal.schemas.common import OkResponse
from vacation_portal.services.audit import REDACTED, model_to_audit_dict, write_audit_log
from vacation_portal.services.edit_plan import DirectEdit, EditField, ProposedEdit, plan_account_edit
from vacation_portal.services.hasher import get_secret_hasher
from vacation_portal.services.proposal import lock_account_for_update, stage_proposal

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from vacation_portal.schemas.account import (
        ChangeOwnPasswordPayload,
        CreateAccountPayload,
        UpdateAccountPayload,
    )
    from vacation_portal.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

LOGIN_CODE_PATTERN = re.compile(r"[0-9]{7}")

# Account column written by each direct edit.
_DIRECT_COLUMNS: dict[EditField, str] = {
    EditField.NAME: "display_name",
    EditField.ROLE: "role",
    EditField.EMAIL: "contact_address",
    EditField.PASSWORD: "credential_digest",
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_account_response(account: Account) -> AccountResponse:
    """Map an account model to its response schema."""
    return AccountResponse(
        id=account.id,
        display_name=account.display_name,
        contact_address=account.contact_address,
        login_code=account.login_code,
        role=Role(account.role),
        created_at=account.created_at,
    )


def _password_too_short(min_length: int) -> AppError:
    return AppError(
        ErrorCode.PASSWORD_TOO_SHORT,
        detail=f"Password must be at least {min_length} characters.",
    )


def validate_login_code(login_code: str) -> str:
    """Return the trimmed login code, or raise if it is not exactly 7 ASCII digits."""
    trimmed = login_code.strip()
    if not LOGIN_CODE_PATTERN.fullmatch(trimmed):
        raise AppError(ErrorCode.INVALID_LOGIN_CODE, detail="Login code must be exactly 7 digits.")
    return trimmed


async def _latest_proposals(session: AsyncSession) -> dict[tuple[uuid.UUID, str], ChangeProposal]:
    """Latest proposal of each kind per subject, whatever its status."""
    result = await session.execute(
        select(ChangeProposal)
        .distinct(col(ChangeProposal.subject_id), col(ChangeProposal.kind))
        .order_by(
            col(ChangeProposal.subject_id),
            col(ChangeProposal.kind),
            col(ChangeProposal.created_at).desc(),
        )
    )
    return {(p.subject_id, p.kind): p for p in result.scalars().all()}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_account(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateAccountPayload,
) -> AccountResponse:
    """Create an account. Duplicate address or login code fails with create_failed."""
    auth.require(Role.SUPERVISOR)
    login_code = validate_login_code(payload.login_code)
    min_length = get_settings().min_password_length
    password = payload.password.strip()
    if len(password) < min_length:
        raise _password_too_short(min_length)

    account = Account(
        display_name=payload.display_name.strip(),
        contact_address=payload.contact_address.strip(),
        login_code=login_code,
        credential_digest=get_secret_hasher().digest(password),
        role=payload.role.value,
    )
    async with transaction(session, ErrorCode.CREATE_FAILED):
        session.add(account)
        await session.flush()
        await write_audit_log(
            session,
            actor_id=auth.subject_id,
            entity_type=AuditEntityType.ACCOUNT,
            entity_id=account.id,
            action=AuditAction.CREATE,
            after_json=model_to_audit_dict(account),
        )

    logger.info("Created %s account %s", account.role, account.id)
    return _build_account_response(account)


async def get_me(session: AsyncSession, auth: AuthContext) -> MeResponse:
    """Return the caller's own account, or ``None`` if it no longer exists."""
    account = await session.get(Account, auth.subject_id)
    return MeResponse(user=_build_account_response(account) if account is not None else None)


async def list_accounts(session: AsyncSession) -> AccountListResponse:
    """List all accounts, newest first, with their latest proposal states."""
    result = await session.execute(select(Account).order_by(col(Account.created_at).desc()))
    accounts = list(result.scalars().all())
    latest = await _latest_proposals(session)

    items: list[AccountOverview] = []
    for account in accounts:
        password = latest.get((account.id, ProposalKind.PASSWORD.value))
        email = latest.get((account.id, ProposalKind.EMAIL.value))
        items.append(
            AccountOverview(
                **_build_account_response(account).model_dump(),
                pending_password_status=ProposalStatus(password.status) if password else None,
                pending_password_created_at=password.created_at if password else None,
                pending_password_decided_at=password.decided_at if password else None,
                pending_email_status=ProposalStatus(email.status) if email else None,
                pending_email_created_at=email.created_at if email else None,
                pending_email_decided_at=email.decided_at if email else None,
                pending_email_new=email.candidate_address if email else None,
            )
        )
    return AccountListResponse(items=items, total=len(items))


async def update_account(
    session: AsyncSession,
    auth: AuthContext,
    target_id: uuid.UUID,
    payload: UpdateAccountPayload,
) -> UpdateAccountResult:
    """Edit an account, routing credential changes for others through proposals.

    1. Plan the edit (validation only, no storage I/O).
    2. Lock the target account row (404 if it is gone).
    3. Apply direct edits; stage a proposal for each proposed edit.
    4. Audit and commit.
    """
    auth.require(Role.SUPERVISOR)
    edits = plan_account_edit(
        auth.subject_id,
        target_id,
        payload,
        min_password_length=get_settings().min_password_length,
    )
    outcome: dict[EditField, EditOutcome] = {}

    async with transaction(session):
        account = await lock_account_for_update(session, target_id)
        before_dict = model_to_audit_dict(account)

        for edit in edits:
            if isinstance(edit, ProposedEdit):
                await stage_proposal(
                    session,
                    kind=edit.kind,
                    subject_id=target_id,
                    initiator_id=auth.subject_id,
                    value=edit.value,
                )
                field = EditField.PASSWORD if edit.kind == ProposalKind.PASSWORD else EditField.EMAIL
                outcome[field] = EditOutcome.PENDING
            elif isinstance(edit, DirectEdit):
                value = get_secret_hasher().digest(edit.value) if edit.field == EditField.PASSWORD else edit.value
                setattr(account, _DIRECT_COLUMNS[edit.field], value)
                outcome[edit.field] = EditOutcome.UPDATED

        await session.flush()
        await write_audit_log(
            session,
            actor_id=auth.subject_id,
            entity_type=AuditEntityType.ACCOUNT,
            entity_id=account.id,
            action=AuditAction.UPDATE,
            before_json=before_dict,
            after_json=model_to_audit_dict(account),
        )

    logger.info("Updated account %s (%s)", target_id, ", ".join(f"{f}={o}" for f, o in outcome.items()) or "no-op")
    return UpdateAccountResult(
        password_status=outcome.get(EditField.PASSWORD),
        email_status=outcome.get(EditField.EMAIL),
    )


async def delete_account(
    session: AsyncSession,
    auth: AuthContext,
    target_id: uuid.UUID,
) -> OkResponse:
    """Delete an account; its requests and proposals go with it. Absent accounts are a no-op."""
    auth.require(Role.SUPERVISOR)
    async with transaction(session):
        result = await session.execute(
            delete(Account).where(col(Account.id) == target_id).returning(col(Account.id))
        )
        deleted_id = result.scalar_one_or_none()
        if deleted_id is not None:
            await write_audit_log(
                session,
                actor_id=auth.subject_id,
                entity_type=AuditEntityType.ACCOUNT,
                entity_id=deleted_id,
                action=AuditAction.DELETE,
            )

    if deleted_id is not None:
        logger.info("Deleted account %s", deleted_id)
    return OkResponse()


async def change_own_password(
    session: AsyncSession,
    auth: AuthContext,
    payload: ChangeOwnPasswordPayload,
) -> OkResponse:
    """Replace the caller's password after verifying the current one.

    Actor and target are the same account, so no proposal is involved.
    """
    current = payload.current_password.strip()
    new = payload.new_password.strip()
    if not current or not new:
        raise AppError(ErrorCode.MISSING_FIELDS)
    min_length = get_settings().min_password_length
    if len(new) < min_length:
        raise _password_too_short(min_length)

    hasher = get_secret_hasher()
    async with transaction(session):
        account = await lock_account_for_update(session, auth.subject_id)
        if not hasher.matches(current, account.credential_digest):
            raise AppError(ErrorCode.INVALID_CURRENT_PASSWORD)

        account.credential_digest = hasher.digest(new)
        await session.flush()
        await write_audit_log(
            session,
            actor_id=auth.subject_id,
            entity_type=AuditEntityType.ACCOUNT,
            entity_id=account.id,
            action=AuditAction.UPDATE,
            after_json={"credential_digest": REDACTED},
        )

    logger.info("Account %s changed its own password", auth.subject_id)
    return OkResponse()


async def get_account_or_404(
    session: AsyncSession,
    account_id: uuid.UUID,
    code: ErrorCode = ErrorCode.NOT_FOUND,
) -> Account:
    """Fetch an account by ID. Raises 404 with ``code`` if not found."""
    account = await session.get(Account, account_id)
    if account is None:
        raise AppError(code, status_code=status.HTTP_404_NOT_FOUND)
    return account
