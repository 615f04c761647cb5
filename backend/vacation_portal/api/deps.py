from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request, status

from vacation_portal.exceptions import AppError, ErrorCode
from vacation_portal.models.enums import Role
from vacation_portal.schemas.auth import AuthContext
from vacation_portal.services.authenticator import get_authenticator


async def get_auth_context(request: Request) -> AuthContext:
    """Resolve the caller through the configured authenticator."""
    auth = await get_authenticator().identify(request)
    if auth is None:
        raise AppError(ErrorCode.UNAUTHORIZED, status_code=status.HTTP_401_UNAUTHORIZED)
    return auth


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_supervisor(auth: AuthDep) -> AuthContext:
    """Require the supervisor role for the request."""
    auth.require(Role.SUPERVISOR)
    return auth


SupervisorDep = Annotated[AuthContext, Depends(require_supervisor)]


async def require_subordinate(auth: AuthDep) -> AuthContext:
    """Require the subordinate role for the request."""
    auth.require(Role.SUBORDINATE)
    return auth


SubordinateDep = Annotated[AuthContext, Depends(require_subordinate)]
