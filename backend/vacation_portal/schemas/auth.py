# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import status
from pydantic import BaseModel

from vacation_portal.exceptions import AppError, ErrorCode
from vacation_portal.models.enums import Role


class AuthContext(BaseModel):
    """Identity of the caller as resolved by the authenticator."""

    subject_id: uuid.UUID
    role: Role

    def require(self, role: Role) -> None:
        """Raise ``forbidden`` unless the caller holds ``role``."""
        if self.role != role:
            raise AppError(ErrorCode.FORBIDDEN, status_code=status.HTTP_403_FORBIDDEN)
