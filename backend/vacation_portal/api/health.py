import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from vacation_portal.config import get_settings
from vacation_portal.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

HealthStatus = Literal["ok", "degraded"]


class HealthResponse(BaseModel):
    """Liveness report. ``degraded`` means the API is up but storage is not."""

    status: HealthStatus
    name: str
    version: str
    environment: str


async def _database_reachable(session: AsyncSession) -> bool:
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database ping failed")
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report liveness together with a database ping."""
    settings = get_settings()
    return HealthResponse(
        status="ok" if await _database_reachable(session) else "degraded",
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )
