"""Task Service: create, read, list, partial update, delete and description paging.

Invariants:
    - Tasks are created as NOT_STARTED or IN_PROGRESS; COMPLETED is only reachable
      through StatusTransitionCoordinator, so completion credit cannot be bypassed
    - Partial updates never touch status
    - Assignee, when set, must reference an existing user (ValidationError)
    - Deletion is plain row removal
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.core.domain_types import TaskStatus
from reward_tracker.core.errors import ValidationError
from reward_tracker.core.field_overrides import apply_overrides
from reward_tracker.core.pagination import (
    DescriptionPage, check_page_request, page_offset, paginate_description, total_pages,
)
from reward_tracker.core.task_rules import check_due_date, check_title
from reward_tracker.core.task_transitions import check_initial_status, parse_task_status
from reward_tracker.infrastructure.database import unit_of_work
from reward_tracker.models.task import Task
from reward_tracker.services.lookups import (
    get_task_for_update, get_task_or_404, user_exists,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "due_date", "assignee_id")


@dataclass
class TaskFilter:
    title: str | None = None
    status: int | None = None
    assignee_id: UUID | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
    due_after: datetime | None = None
    due_before: datetime | None = None
    page: int = 1
    page_size: int = 20


@dataclass
class TaskPage:
    tasks: list[Task]
    page: int
    total_pages: int
    total_items: int
    page_size: int


class TaskService:
    """CRUD and read helpers for tasks."""

    def __init__(self, db: AsyncSession, description_page_size: int = 10):
        self.db = db
        self.description_page_size = description_page_size

    async def create_task(
        self,
        title: str,
        description: str = "",
        due_date: datetime | None = None,
        status: int | None = None,
        assignee_id: UUID | None = None,
    ) -> Task:
        title = check_title(title)
        check_due_date(due_date, _now())
        initial = TaskStatus.NOT_STARTED if status is None else parse_task_status(status)
        check_initial_status(initial)

        async with unit_of_work(self.db):
            await self._check_assignee(assignee_id)
            task = Task(
                title=title,
                description=description or "",
                due_date=due_date,
                status=int(initial),
                assignee_id=assignee_id,
            )
            self.db.add(task)
            await self.db.flush()

        logger.info("Task created", extra={"task_id": str(task.id)})
        return task

    async def get_task(self, task_id: UUID) -> Task:
        return await get_task_or_404(self.db, task_id)

    async def list_tasks(self, task_filter: TaskFilter) -> TaskPage:
        check_page_request(task_filter.page, task_filter.page_size)
        conditions = _filter_conditions(task_filter)

        total_items = await self.db.scalar(
            select(func.count(Task.id)).where(*conditions),
        )
        result = await self.db.execute(
            select(Task)
            .where(*conditions)
            .order_by(Task.created_at.desc())
            .limit(task_filter.page_size)
            .offset(page_offset(task_filter.page, task_filter.page_size)),
        )
        return TaskPage(
            tasks=list(result.scalars().all()),
            page=task_filter.page,
            total_pages=total_pages(total_items, task_filter.page_size),
            total_items=total_items,
            page_size=task_filter.page_size,
        )

    async def update_task(self, task_id: UUID, overrides: dict) -> Task:
        """Apply present fields of `overrides` to the task in one transaction."""
        overrides = dict(overrides)
        if "title" in overrides:
            overrides["title"] = check_title(overrides["title"])
        if "due_date" in overrides:
            check_due_date(overrides["due_date"], _now())
        if overrides.get("description", "") is None:
            overrides["description"] = ""

        async with unit_of_work(self.db):
            task = await get_task_for_update(self.db, task_id)
            if overrides.get("assignee_id") is not None:
                await self._check_assignee(overrides["assignee_id"])
            changed = apply_overrides(task, overrides, UPDATABLE_FIELDS)
            if changed:
                task.updated_at = _now()

        logger.info(
            f"Task updated: {', '.join(changed) or 'no changes'}",
            extra={"task_id": str(task_id)},
        )
        return task

    async def delete_task(self, task_id: UUID) -> None:
        async with unit_of_work(self.db):
            task = await get_task_or_404(self.db, task_id)
            await self.db.delete(task)
        logger.info("Task deleted", extra={"task_id": str(task_id)})

    async def get_description(
        self, task_id: UUID, page: int = 1, page_size: int = 0,
    ) -> DescriptionPage:
        task = await get_task_or_404(self.db, task_id)
        return paginate_description(
            task.description, page, page_size, self.description_page_size,
        )

    async def _check_assignee(self, assignee_id: UUID | None) -> None:
        if assignee_id is not None and not await user_exists(self.db, assignee_id):
            raise ValidationError("assignee does not exist", field="assignee_id")


def _filter_conditions(task_filter: TaskFilter) -> list:
    conditions = []
    if task_filter.title:
        conditions.append(Task.title.ilike(f"%{task_filter.title}%"))
    if task_filter.status is not None:
        conditions.append(Task.status == int(parse_task_status(task_filter.status)))
    if task_filter.assignee_id is not None:
        conditions.append(Task.assignee_id == task_filter.assignee_id)
    if task_filter.created_after is not None:
        conditions.append(Task.created_at > task_filter.created_after)
    if task_filter.created_before is not None:
        conditions.append(Task.created_at < task_filter.created_before)
    if task_filter.due_after is not None:
        conditions.append(Task.due_date > task_filter.due_after)
    if task_filter.due_before is not None:
        conditions.append(Task.due_date < task_filter.due_before)
    return conditions


def _now() -> datetime:
    return datetime.now(timezone.utc)
