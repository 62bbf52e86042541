"""Row Lookups: shared fetch-or-404 and fetch-for-update helpers.

Invariants:
    - *_for_update helpers take a row lock (SELECT ... FOR UPDATE) on stores that
      support it and always bypass the identity map (populate_existing), so the
      caller sees the committed row, not a cached object
    - Missing rows raise ResourceNotFoundError, never return None

Design Decisions:
    - SQLite ignores FOR UPDATE; correctness there relies on the guarded UPDATE
      statements in the coordinators and on SQLite's single-writer lock
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.core.errors import ResourceNotFoundError
from reward_tracker.models.task import Task
from reward_tracker.models.user import User


async def get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise ResourceNotFoundError("User", str(user_id))
    return user


async def get_task_or_404(db: AsyncSession, task_id: UUID) -> Task:
    result = await db.execute(select(Task).where(Task.id == task_id))
    task = result.scalar_one_or_none()
    if task is None:
        raise ResourceNotFoundError("Task", str(task_id))
    return task


async def get_user_for_update(db: AsyncSession, user_id: UUID) -> User:
    """Fetch a user row with a row lock held until the transaction ends."""
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True),
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise ResourceNotFoundError("User", str(user_id))
    return user


async def get_task_for_update(db: AsyncSession, task_id: UUID) -> Task:
    """Fetch a task row with a row lock held until the transaction ends."""
    result = await db.execute(
        select(Task)
        .where(Task.id == task_id)
        .with_for_update()
        .execution_options(populate_existing=True),
    )
    task = result.scalar_one_or_none()
    if task is None:
        raise ResourceNotFoundError("Task", str(task_id))
    return task


async def user_exists(db: AsyncSession, user_id: UUID) -> bool:
    return await db.scalar(select(User.id).where(User.id == user_id)) is not None
