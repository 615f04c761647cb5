"""Seed script for development data.

Run with:  python -m vacation_portal.seed  (or the vacation-portal-seed script)

Creates missing tables and upserts one supervisor and one subordinate,
keyed on contact address.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import uuid

from sqlalchemy.dialects.postgresql import insert

from vacation_portal.db import dispose_engine, get_engine, get_session_factory
from vacation_portal.models import Account, Role, SQLModel
from vacation_portal.services.hasher import get_secret_hasher

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "Password1!"

ACCOUNTS = [
    {
        "display_name": "Maggie Manager",
        "contact_address": "maggie.manager@example.com",
        "login_code": "1000001",
        "role": Role.SUPERVISOR,
    },
    {
        "display_name": "Ethan Employee",
        "contact_address": "ethan.employee@example.com",
        "login_code": "2000001",
        "role": Role.SUBORDINATE,
    },
]


async def upsert_account(
    display_name: str,
    contact_address: str,
    login_code: str,
    role: Role,
    password: str = DEFAULT_PASSWORD,
) -> None:
    """Insert an account or overwrite the one with the same contact address."""
    digest = get_secret_hasher().digest(password)
    stmt = insert(Account).values(
        id=uuid.uuid4(),
        display_name=display_name,
        contact_address=contact_address,
        login_code=login_code,
        credential_digest=digest,
        role=role.value,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Account.__table__.c.contact_address],  # type: ignore[attr-defined]
        set_={
            "display_name": stmt.excluded.display_name,
            "login_code": stmt.excluded.login_code,
            "credential_digest": stmt.excluded.credential_digest,
            "role": stmt.excluded.role,
        },
    )
    async with get_session_factory()() as session:
        await session.execute(stmt)
        await session.commit()
    logger.info("Seeded %s %s (%s)", role.value, display_name, login_code)


async def seed() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    for account in ACCOUNTS:
        await upsert_account(**account)  # type: ignore[arg-type]
    await dispose_engine()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    try:
        asyncio.run(seed())
    except Exception:
        logger.exception("Seed failed")
        sys.exit(1)
    logger.info("Seed complete.")


if __name__ == "__main__":
    main()
