"""Audit trail for account, request and proposal mutations.

Entries are added to the caller's session and so commit or roll back
together with the change they describe. Credential columns are masked
before they are stored.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from vacation_portal.models.audit import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from vacation_portal.models.enums import AuditAction, AuditEntityType

logger = logging.getLogger(__name__)

_REDACTED_FIELDS = frozenset({"credential_digest", "candidate_secret", "candidate_digest"})
REDACTED = "***"


def _json_safe(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Snapshot a model as JSON-safe values with credential columns masked."""
    snapshot: dict[str, Any] = {}
    for key, value in model.model_dump().items():
        if key in _REDACTED_FIELDS and value is not None:
            snapshot[key] = REDACTED
        else:
            snapshot[key] = _json_safe(value)
    return snapshot


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Stage an audit entry in the caller's transaction."""
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    logger.debug("Audit %s %s %s by %s", action.value, entity_type.value, entity_id, actor_id)
    return entry
