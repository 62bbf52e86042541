"""Task Routes: CRUD, status transitions and description paging.

Invariants:
    - PATCH /{task_id}/status is the only way to change a task's status
    - Settings read per request through get_settings (cached)
"""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.config import get_settings
from reward_tracker.infrastructure.database import get_db
from reward_tracker.schemas.task import (
    DescriptionResponse, TaskCreate, TaskListResponse, TaskResponse,
    TaskStatusUpdate, TaskUpdate,
)
from reward_tracker.services.status_transition import StatusTransitionCoordinator
from reward_tracker.services.task_service import TaskFilter, TaskService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


def _task_service(db: AsyncSession) -> TaskService:
    return TaskService(db, get_settings().description_page_size)


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    title: str | None = None,
    status_code: int | None = Query(None, alias="status"),
    assignee_id: UUID | None = None,
    created_after: datetime | None = None,
    created_before: datetime | None = None,
    due_after: datetime | None = None,
    due_before: datetime | None = None,
    page: int = 1,
    page_size: int = 20,
    db: AsyncSession = Depends(get_db),
):
    """List tasks with filters and pagination."""
    result = await _task_service(db).list_tasks(TaskFilter(
        title=title,
        status=status_code,
        assignee_id=assignee_id,
        created_after=created_after,
        created_before=created_before,
        due_after=due_after,
        due_before=due_before,
        page=page,
        page_size=page_size,
    ))
    return TaskListResponse(
        tasks=[TaskResponse.model_validate(t) for t in result.tasks],
        page=result.page,
        total_pages=result.total_pages,
        total_items=result.total_items,
        page_size=result.page_size,
    )


@router.post(
    "", response_model=TaskResponse, status_code=status.HTTP_201_CREATED,
)
async def create_task(body: TaskCreate, db: AsyncSession = Depends(get_db)):
    """Create a task."""
    task = await _task_service(db).create_task(
        title=body.title,
        description=body.description,
        due_date=body.due_date,
        status=body.status,
        assignee_id=body.assignee_id,
    )
    return TaskResponse.model_validate(task)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: UUID, db: AsyncSession = Depends(get_db)):
    return TaskResponse.model_validate(await _task_service(db).get_task(task_id))


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID, body: TaskUpdate, db: AsyncSession = Depends(get_db),
):
    """Partial update: only fields present in the body are applied."""
    task = await _task_service(db).update_task(
        task_id, body.model_dump(exclude_unset=True),
    )
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: UUID, db: AsyncSession = Depends(get_db)):
    await _task_service(db).delete_task(task_id)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: UUID, body: TaskStatusUpdate, db: AsyncSession = Depends(get_db),
):
    """Transition task status; entering Completed credits the acting user once."""
    task = await StatusTransitionCoordinator(db).transition_status(
        task_id, body.status, body.user_id,
    )
    return TaskResponse.model_validate(task)


@router.get("/{task_id}/description", response_model=DescriptionResponse)
async def get_description(
    task_id: UUID,
    page: int = 1,
    page_size: int = 0,
    db: AsyncSession = Depends(get_db),
):
    """Description split into paragraph pages."""
    result = await _task_service(db).get_description(task_id, page, page_size)
    return DescriptionResponse(
        description=result.description,
        current_page=result.current_page,
        total_pages=result.total_pages,
        page_size=result.page_size,
    )
