from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vacation_portal.config import get_settings
from vacation_portal.db import get_session
from vacation_portal.main import app
from vacation_portal.models import Account, Role, SQLModel
from vacation_portal.services.hasher import BcryptSecretHasher, get_secret_hasher, set_secret_hasher

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

TEST_PASSWORD = "Password1!"

_login_codes = itertools.count(3_000_000)


@pytest.fixture(scope="session")
async def engine() -> AsyncIterator[AsyncEngine]:
    """Session-scoped async engine.

    Tables are created from the model metadata when missing and dropped once
    the run finishes.
    """
    settings = get_settings()
    _engine = create_async_engine(settings.database_url)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a session inside an outer transaction that rolls back after each test.

    Service commits and rollbacks map onto savepoints, so the test still
    sees a clean database afterwards.
    """
    async with engine.connect() as conn:
        txn = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False, join_transaction_mode="create_savepoint")
        yield session
        await session.close()
        await txn.rollback()


@pytest.fixture
async def committed_sessions(engine: AsyncEngine) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Factory of independent sessions that really commit, for race tests.

    Every row is deleted afterwards.
    """
    yield async_sessionmaker(engine, expire_on_commit=False)
    async with engine.begin() as conn:
        for table in reversed(SQLModel.metadata.sorted_tables):
            await conn.execute(table.delete())


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _fast_hasher() -> Iterator[None]:
    """Use the cheapest bcrypt cost so tests stay fast."""
    set_secret_hasher(BcryptSecretHasher(rounds=4))
    yield
    set_secret_hasher(None)


@pytest.fixture
def make_account() -> Callable[..., Awaitable[Account]]:
    """Return a coroutine that commits a new account through the given session.

    The account is detached afterwards, so a later rollback in the same
    session cannot expire the attributes a test reads for its headers.
    """

    async def _make(
        session: AsyncSession,
        *,
        role: Role = Role.SUBORDINATE,
        password: str = TEST_PASSWORD,
        display_name: str | None = None,
        contact_address: str | None = None,
    ) -> Account:
        code = f"{next(_login_codes):07d}"
        account = Account(
            display_name=display_name or f"User {code}",
            contact_address=contact_address or f"user{code}@example.com",
            login_code=code,
            credential_digest=get_secret_hasher().digest(password),
            role=role.value,
        )
        session.add(account)
        await session.commit()
        session.expunge(account)
        return account

    return _make
