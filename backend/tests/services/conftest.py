"""Service test fixtures: async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory with StaticPool: test sessions and request sessions share one
      connection, so rows seeded by a fixture are visible to the routes
    - Concurrency tests build their own file-backed database (test_concurrency.py):
      a shared connection cannot show two transactions racing
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from reward_tracker.core.domain_types import TaskStatus, UserStatus
from reward_tracker.db.base import Base
from reward_tracker.infrastructure.database import get_db, DatabaseSessionManager
from reward_tracker.models import Task, User
import reward_tracker.infrastructure.database as db_module
from reward_tracker.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


async def _insert(db, row):
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row


@pytest.fixture
def make_user(test_db):
    """Factory inserting a user with the given counters."""
    async def _make(
        email: str, balance: float = 0.0, status: UserStatus = UserStatus.ACTIVE,
        tasks_completed: int = 0,
    ) -> User:
        return await _insert(test_db, User(
            username=email.split("@")[0],
            email=email,
            balance=balance,
            tasks_completed=tasks_completed,
            status=status.value,
        ))
    return _make


@pytest.fixture
def make_task(test_db):
    """Factory inserting a task in the given status."""
    async def _make(
        title: str = "Write report",
        status: TaskStatus = TaskStatus.NOT_STARTED,
        description: str = "",
    ) -> Task:
        return await _insert(test_db, Task(
            title=title, status=int(status), description=description,
        ))
    return _make


@pytest.fixture
async def seed_user(make_user):
    """Active user with a balance of 50."""
    return await make_user("alice@example.com", balance=50.0)


@pytest.fixture
async def seed_task(make_task):
    return await make_task()
