"""Status Transition Coordinator: task status changes with at-most-once completion credit.

Invariants:
    - The status code is validated before the transaction starts
    - Read of the current status, status write and counter increment share ONE
      transaction; any failure rolls back both the status and the counter
    - Entering COMPLETED from any other stored status increments the acting user's
      tasks_completed by exactly 1; COMPLETED -> COMPLETED only rewrites status and
      updated_at
    - Two concurrent completions of the same task credit once: the task row is locked
      for the read, and the crediting UPDATE re-checks the stored status in its WHERE
      clause so only one writer can match it

Design Decisions:
    - The guarded UPDATE is the authority, the locked read is the fast path: on
      PostgreSQL the FOR UPDATE lock serializes callers, on SQLite the single-writer
      lock plus the WHERE guard gives the same outcome
    - The acting user must exist even for non-crediting transitions (ValidationError)
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.core.domain_types import TaskStatus
from reward_tracker.core.errors import ValidationError
from reward_tracker.core.task_transitions import (
    check_transition_allowed,
    crediting_predecessors,
    parse_task_status,
)
from reward_tracker.infrastructure.database import unit_of_work
from reward_tracker.models.task import Task
from reward_tracker.services.ledger import Ledger
from reward_tracker.services.lookups import get_task_for_update, user_exists

logger = logging.getLogger(__name__)


class StatusTransitionCoordinator:
    """Moves tasks between statuses and credits completions exactly once."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = Ledger(db)

    async def transition_status(
        self, task_id: UUID, new_status: int, acting_user_id: UUID,
    ) -> Task:
        """Set the task status; credit `acting_user_id` on first entry into COMPLETED."""
        status = parse_task_status(new_status)

        async with unit_of_work(self.db):
            task = await get_task_for_update(self.db, task_id)
            if not await user_exists(self.db, acting_user_id):
                raise ValidationError("acting user does not exist", field="user_id")
            check_transition_allowed(TaskStatus(task.status), status)
            credited = await self._write_status(task_id, status, acting_user_id)

        await self.db.refresh(task)
        logger.info(
            "Task status updated",
            extra={
                "task_id": str(task_id),
                "user_id": str(acting_user_id),
                "new_status": int(status),
                "credited": credited,
            },
        )
        return task

    async def _write_status(
        self, task_id: UUID, status: TaskStatus, acting_user_id: UUID,
    ) -> bool:
        """Write the status; return True if this call credited the acting user."""
        now = datetime.now(timezone.utc)
        crediting = crediting_predecessors(status)
        if crediting:
            result = await self.db.execute(
                update(Task)
                .where(
                    Task.id == task_id,
                    Task.status.in_([int(s) for s in crediting]),
                )
                .values(status=int(status), updated_at=now)
                .execution_options(synchronize_session=False),
            )
            if result.rowcount == 1:
                await self.ledger.credit_completed_task(acting_user_id)
                return True

        await self.db.execute(
            update(Task)
            .where(Task.id == task_id)
            .values(status=int(status), updated_at=now)
            .execution_options(synchronize_session=False),
        )
        return False
