"""Database Session Manager: async connection pool, unit of work, and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - unit_of_work commits only when its block finishes normally; any exception,
      asyncio cancellation included, rolls the whole transaction back
    - All SQLAlchemy exceptions mapped to DatabaseError (core/errors.py)
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
      (ADR: no global import side effects)
    - expire_on_commit=False: prevents lazy-load issues in async context; coordinators
      refresh explicitly when they need the post-commit row
    - unit_of_work wraps a caller-owned session instead of opening its own, so one
      request session can run several sequential transactions
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from reward_tracker.core.errors import DatabaseError, RewardTrackerError

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise DatabaseError("Integrity constraint violated", "commit")
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise DatabaseError("Connection or operational error", "execute")
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise DatabaseError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown")
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Run one atomic transaction on `db`: commit on success, roll back otherwise."""
    try:
        yield db
        await db.commit()
    except RewardTrackerError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Transaction rolled back: {e}", exc_info=True)
        raise DatabaseError("Transaction rolled back", "transaction") from e
    except BaseException:
        # Cancellation or an unexpected bug: never commit, always roll back.
        await db.rollback()
        raise


def is_unique_violation(error: IntegrityError, column: str) -> bool:
    """True when `error` is a unique-constraint failure naming `column`.

    PostgreSQL: `duplicate key value violates unique constraint ... Key (email)=`;
    SQLite: `UNIQUE constraint failed: users.email`.
    """
    message = str(error.orig).lower()
    return ("unique" in message or "duplicate" in message) and column in message


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
