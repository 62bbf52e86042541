"""Task Schemas: create, partial update, status transition and listing shapes.

Invariants:
    - TaskUpdate forbids unknown fields, so `status` cannot sneak into a partial update
    - TaskStatusUpdate.status is a bare int; the coordinator decides if it exists
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from reward_tracker.core.domain_types import TaskStatus


class TaskCreate(BaseModel):
    """Task creation request."""
    title: str = Field(min_length=1, max_length=200)
    description: str = Field("", max_length=50_000)
    due_date: datetime | None = None
    status: int | None = None
    assignee_id: UUID | None = None


class TaskUpdate(BaseModel):
    """Partial task update. Only fields present in the body are applied."""
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=50_000)
    due_date: datetime | None = None
    assignee_id: UUID | None = None


class TaskStatusUpdate(BaseModel):
    """Status transition request: wire code 1..4 and the acting user."""
    status: int
    user_id: UUID


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str
    status: int
    due_date: datetime | None = None
    assignee_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def status_name(self) -> str:
        return TaskStatus(self.status).label


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]
    page: int
    total_pages: int
    total_items: int
    page_size: int


class DescriptionResponse(BaseModel):
    description: str
    current_page: int
    total_pages: int
    page_size: int
