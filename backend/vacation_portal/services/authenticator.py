from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from vacation_portal.models.enums import Role
from vacation_portal.schemas.auth import AuthContext

if TYPE_CHECKING:
    from fastapi import Request


@runtime_checkable
class Authenticator(Protocol):
    """Resolves the caller of an inbound request to an identity."""

    async def identify(self, request: Request) -> AuthContext | None:
        """Return the caller's identity, or None if the request is anonymous."""
        ...


class HeaderAuthenticator:
    """Trusts ``X-User-Id`` and ``X-Role`` headers set by an upstream gateway."""

    user_header = "x-user-id"
    role_header = "x-role"

    async def identify(self, request: Request) -> AuthContext | None:
        raw_id = request.headers.get(self.user_header)
        raw_role = request.headers.get(self.role_header)
        if not raw_id or not raw_role:
            return None
        try:
            subject_id = uuid.UUID(raw_id.strip())
            role = Role(raw_role.strip().lower())
        except ValueError:
            return None
        return AuthContext(subject_id=subject_id, role=role)


_authenticator: Authenticator = HeaderAuthenticator()


def get_authenticator() -> Authenticator:
    """Return the active authenticator."""
    return _authenticator


def set_authenticator(authenticator: Authenticator) -> None:
    """Override the authenticator (for testing or production wiring)."""
    global _authenticator
    _authenticator = authenticator
