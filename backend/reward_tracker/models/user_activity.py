"""UserActivity ORM: one row per recorded visit.

Invariants:
    - Rows are append-only; weekly and monthly activity are counts over activity_time
    - Deleting the user deletes their activity
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from reward_tracker.db.base import Base


class UserActivity(Base):
    """Visit timestamp for a user."""
    __tablename__ = "user_activity"
    __table_args__ = (
        Index("ix_user_activity_user_id_activity_time", "user_id", "activity_time"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    activity_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
