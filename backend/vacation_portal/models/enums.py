from __future__ import annotations

import enum


class Role(enum.StrEnum):
    """Account role."""

    SUPERVISOR = "supervisor"
    SUBORDINATE = "subordinate"


class RequestStatus(enum.StrEnum):
    """State machine for vacation requests. APPROVED and REJECTED are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ProposalKind(enum.StrEnum):
    """Which credential a change proposal targets."""

    PASSWORD = "password"
    EMAIL = "email"


class ProposalStatus(enum.StrEnum):
    """State machine for change proposals. APPROVED and REJECTED are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ResponseAction(enum.StrEnum):
    """A subject's answer to a change proposal."""

    APPROVE = "approve"
    REJECT = "reject"


class EditOutcome(enum.StrEnum):
    """How a credential field of an account edit was applied."""

    PENDING = "pending"
    UPDATED = "updated"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    ACCOUNT = "ACCOUNT"
    VACATION_REQUEST = "VACATION_REQUEST"
    CHANGE_PROPOSAL = "CHANGE_PROPOSAL"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    WITHDRAW = "WITHDRAW"
    PROPOSE = "PROPOSE"
