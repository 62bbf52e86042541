"""Standalone Sessions: engine + session factory outside the FastAPI request cycle.

Invariants:
    - Meant for scripts and test fixtures; request handling goes through
      infrastructure/database.py
    - Sessions never expire attributes on commit, same as DatabaseSessionManager

Design Decisions:
    - SQLite connections get a busy timeout: concurrent writers wait for the
      single write lock instead of failing at once
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from reward_tracker.db.base import Base

SQLITE_BUSY_TIMEOUT_SECONDS = 5.0


def create_engine_for(database_url: str) -> AsyncEngine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["timeout"] = SQLITE_BUSY_TIMEOUT_SECONDS
    return create_async_engine(database_url, connect_args=connect_args)


def create_session_factory(
    database_url: str,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to a new engine for `database_url`."""
    return async_sessionmaker(
        create_engine_for(database_url), class_=AsyncSession, expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create every table from model metadata (tests and local scripts, not prod)."""
    import reward_tracker.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
