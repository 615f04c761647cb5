"""Routing of account edits into direct writes and change proposals.

A supervisor may rename an account or change its role outright, but a
contact address or password belonging to someone else is only ever
proposed; the owner has to approve it. The routing is a fixed table keyed
on ``(field, actor is target)`` and is evaluated without touching storage.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vacation_portal.exceptions import AppError, ErrorCode
from vacation_portal.models.enums import ProposalKind

if TYPE_CHECKING:
    import uuid

    from vacation_portal.schemas.account import UpdateAccountPayload


class EditField(enum.StrEnum):
    """Editable account fields."""

    NAME = "name"
    ROLE = "role"
    EMAIL = "email"
    PASSWORD = "password"


class EditRoute(enum.StrEnum):
    DIRECT = "direct"
    PROPOSED = "proposed"


_ROUTES: dict[tuple[EditField, bool], EditRoute] = {
    (EditField.NAME, True): EditRoute.DIRECT,
    (EditField.NAME, False): EditRoute.DIRECT,
    (EditField.ROLE, True): EditRoute.DIRECT,
    (EditField.ROLE, False): EditRoute.DIRECT,
    (EditField.EMAIL, True): EditRoute.DIRECT,
    (EditField.EMAIL, False): EditRoute.PROPOSED,
    (EditField.PASSWORD, True): EditRoute.DIRECT,
    (EditField.PASSWORD, False): EditRoute.PROPOSED,
}

_PROPOSAL_KINDS: dict[EditField, ProposalKind] = {
    EditField.EMAIL: ProposalKind.EMAIL,
    EditField.PASSWORD: ProposalKind.PASSWORD,
}


@dataclass(frozen=True)
class DirectEdit:
    """Write ``value`` straight into the account. Passwords are still plaintext here."""

    field: EditField
    value: str


@dataclass(frozen=True)
class ProposedEdit:
    """Record ``value`` as a pending proposal for the account owner to decide."""

    kind: ProposalKind
    value: str


AccountEdit = DirectEdit | ProposedEdit


def route_for(field: EditField, *, self_edit: bool) -> EditRoute:
    """Look up how a field edit is applied."""
    return _ROUTES[(field, self_edit)]


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def plan_account_edit(
    actor_id: uuid.UUID,
    target_id: uuid.UUID,
    payload: UpdateAccountPayload,
    *,
    min_password_length: int = 8,
) -> list[AccountEdit]:
    """Turn an edit request into the list of edits to apply.

    Raises ``password_too_short`` for a short password and
    ``nothing_to_update`` when no recognised field is present.
    """
    self_edit = actor_id == target_id
    requested: list[tuple[EditField, str]] = []

    name = _clean(payload.display_name)
    if name is not None:
        requested.append((EditField.NAME, name))
    email = _clean(payload.contact_address)
    if email is not None:
        requested.append((EditField.EMAIL, email))
    if payload.role is not None:
        requested.append((EditField.ROLE, payload.role.value))
    password = _clean(payload.password)
    if password is not None:
        if len(password) < min_password_length:
            raise AppError(
                ErrorCode.PASSWORD_TOO_SHORT,
                detail=f"Password must be at least {min_password_length} characters.",
            )
        requested.append((EditField.PASSWORD, password))

    if not requested:
        raise AppError(ErrorCode.NOTHING_TO_UPDATE)

    edits: list[AccountEdit] = []
    for field, value in requested:
        if route_for(field, self_edit=self_edit) is EditRoute.PROPOSED:
            edits.append(ProposedEdit(kind=_PROPOSAL_KINDS[field], value=value))
        else:
            edits.append(DirectEdit(field=field, value=value))
    return edits
