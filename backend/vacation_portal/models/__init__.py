from sqlmodel import SQLModel

from vacation_portal.models.account import Account
from vacation_portal.models.audit import AuditLog
from vacation_portal.models.base import CreatedAtMixin, RecordBase
from vacation_portal.models.enums import (
    AuditAction,
    AuditEntityType,
    EditOutcome,
    ProposalKind,
    ProposalStatus,
    RequestStatus,
    ResponseAction,
    Role,
)
from vacation_portal.models.proposal import ChangeProposal
from vacation_portal.models.vacation import VacationRequest

__all__ = [
    "Account",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "ChangeProposal",
    "CreatedAtMixin",
    "EditOutcome",
    "ProposalKind",
    "ProposalStatus",
    "RecordBase",
    "RequestStatus",
    "ResponseAction",
    "Role",
    "SQLModel",
    "VacationRequest",
]
