"""Task ORM: unit of work a user can complete for credit.

Invariants:
    - status is one of the TaskStatus codes 1..4 (CHECK constraint)
    - assignee_id is optional; deleting the user clears it
    - status changes go through StatusTransitionCoordinator only

Design Decisions:
    - Integer status column: the wire code is the stored value, no mapping table
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from reward_tracker.core.domain_types import TaskStatus
from reward_tracker.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Task(Base):
    """Task row with an optional assignee."""
    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint("status BETWEEN 1 AND 4", name="ck_tasks_status_known"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[int] = mapped_column(
        Integer, nullable=False, default=int(TaskStatus.NOT_STARTED),
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    assignee_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now,
    )
